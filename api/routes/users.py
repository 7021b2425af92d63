"""User administration routes."""
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session as DbSession

from api.database import get_db
from api.dependencies.auth import require_role
from api.models.auth import MessageResponse, UserResponse
from api.models.db.user import User, UserRole
from api.services.auth_service import (
    approve_user,
    delete_user,
    get_user_by_id,
    list_users,
)

router = APIRouter(prefix="/api/users", tags=["users"])

AdminUser = Annotated[User, Depends(require_role(UserRole.ADMIN))]


def _get_user_or_404(db: DbSession, user_id: int) -> User:
    user = get_user_by_id(db, user_id)
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="User not found",
        )
    return user


@router.get("", response_model=list[UserResponse])
async def get_users(
    admin: AdminUser,
    db: Annotated[DbSession, Depends(get_db)],
    role: Annotated[UserRole | None, Query()] = None,
    pending: bool = False,
) -> list[User]:
    """List users, optionally only those awaiting approval."""
    return list_users(db, role=role, pending_only=pending)


@router.get("/{user_id}", response_model=UserResponse)
async def get_user(
    user_id: int,
    admin: AdminUser,
    db: Annotated[DbSession, Depends(get_db)],
) -> User:
    """Get one user."""
    return _get_user_or_404(db, user_id)


@router.post("/{user_id}/approve", response_model=UserResponse)
async def approve(
    user_id: int,
    admin: AdminUser,
    db: Annotated[DbSession, Depends(get_db)],
) -> User:
    """Approve a pending account."""
    user = _get_user_or_404(db, user_id)
    return approve_user(db, user)


@router.delete("/{user_id}", response_model=MessageResponse)
async def remove_user(
    user_id: int,
    admin: AdminUser,
    db: Annotated[DbSession, Depends(get_db)],
) -> MessageResponse:
    """Delete a user account."""
    user = _get_user_or_404(db, user_id)
    if user.id == admin.id:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Cannot delete your own account",
        )
    delete_user(db, user)
    return MessageResponse(message="User deleted")
