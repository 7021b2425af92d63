"""Authentication dependencies for FastAPI."""
from typing import Annotated, Callable

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session as DbSession

from api.database import get_db
from api.models.db.user import User, UserRole
from api.services.auth_service import (
    extend_session,
    get_active_session,
    get_user_by_id,
    verify_token,
)

# HTTP Bearer scheme for JWT
security = HTTPBearer(auto_error=False)


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


async def get_current_user(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
    db: Annotated[DbSession, Depends(get_db)],
) -> User:
    """Get the current authenticated and approved user.

    Raises:
        HTTPException: 401 if not authenticated or token is invalid,
            403 if the account still awaits approval.
    """
    if credentials is None:
        raise _unauthorized("Not authenticated")

    payload = verify_token(credentials.credentials)
    if payload is None:
        raise _unauthorized("Invalid or expired token")

    # Check if session is still active
    jti = payload.get("jti")
    if jti:
        session = get_active_session(db, jti)
        if session is None:
            raise _unauthorized("Session expired or invalidated")
        # Extend session on activity
        extend_session(db, session)

    user_id = payload.get("sub")
    if user_id is None:
        raise _unauthorized("Invalid token payload")

    user = get_user_by_id(db, int(user_id))
    if user is None:
        raise _unauthorized("User not found")

    if not user.is_active:
        raise _unauthorized("User is inactive")

    if not user.is_approved:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Account pending approval",
        )

    return user


def require_role(*roles: UserRole) -> Callable[..., object]:
    """Build a dependency that only lets users with one of ``roles`` through."""
    allowed = {role.value for role in roles}

    async def _check(
        user: Annotated[User, Depends(get_current_user)],
    ) -> User:
        if user.role not in allowed:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Access denied",
            )
        return user

    return _check
