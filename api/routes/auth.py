"""Authentication routes."""
import logging
from datetime import datetime, timedelta, timezone
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session as DbSession

from api.config import ACCESS_TOKEN_EXPIRE_MINUTES
from api.database import get_db
from api.dependencies.auth import get_current_user
from api.models.auth import (
    MessageResponse,
    TokenResponse,
    UserLogin,
    UserRegister,
    UserResponse,
)
from api.models.db.user import User, UserRole
from api.services.auth_service import (
    create_access_token,
    create_session,
    create_user,
    get_user_by_email,
    get_user_by_id,
    get_user_by_username,
    invalidate_session,
    verify_password,
    verify_token,
)
from api.services.course_service import get_course

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["auth"])
security = HTTPBearer(auto_error=False)


def _issue_token(db: DbSession, user: User) -> TokenResponse:
    token, jti = create_access_token(user.id, user.role)
    expires_at = datetime.now(timezone.utc) + timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES)
    create_session(db, user.id, jti, expires_at)
    return TokenResponse(
        access_token=token,
        token_type="bearer",
        expires_in=ACCESS_TOKEN_EXPIRE_MINUTES * 60,
    )


@router.post("/register", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
async def register(
    data: UserRegister,
    db: Annotated[DbSession, Depends(get_db)],
) -> User:
    """Register a student or teacher. Teachers wait for admin approval."""
    if get_user_by_username(db, data.username):
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Username already registered",
        )

    if get_user_by_email(db, data.email):
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Email already registered",
        )

    role = UserRole(data.role)
    if role is UserRole.STUDENT:
        if data.course_id is None:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Students must choose a course",
            )
        if get_course(db, data.course_id) is None:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Course not found",
            )

    user = create_user(
        db,
        data.username,
        data.email,
        data.password,
        role=role,
        display_name=data.display_name,
        course_id=data.course_id,
    )
    logger.info("Registered %s %s", user.role, user.username)
    return user


@router.post("/login", response_model=TokenResponse)
async def login(
    data: UserLogin,
    db: Annotated[DbSession, Depends(get_db)],
) -> TokenResponse:
    """Login and get JWT token."""
    # Try to find user by username
    user = get_user_by_username(db, data.username)

    # If not found by username, try email
    if user is None:
        user = get_user_by_email(db, data.username)

    if user is None or not verify_password(data.password, user.hashed_password):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid credentials",
        )

    if not user.is_active:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User is inactive",
        )

    if not user.is_approved:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Account pending approval",
        )

    return _issue_token(db, user)


@router.post("/logout", response_model=MessageResponse)
async def logout(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
    db: Annotated[DbSession, Depends(get_db)],
) -> MessageResponse:
    """Logout and invalidate current session."""
    if credentials is None:
        return MessageResponse(message="Already logged out")

    payload = verify_token(credentials.credentials)
    if payload and payload.get("jti"):
        invalidate_session(db, payload["jti"])

    return MessageResponse(message="Logged out successfully")


@router.get("/me", response_model=UserResponse)
async def get_me(
    current_user: Annotated[User, Depends(get_current_user)],
) -> User:
    """Get current user info."""
    return current_user


@router.post("/refresh", response_model=TokenResponse)
async def refresh_token(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
    db: Annotated[DbSession, Depends(get_db)],
) -> TokenResponse:
    """Refresh access token."""
    if credentials is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )

    payload = verify_token(credentials.credentials)
    if payload is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired token",
            headers={"WWW-Authenticate": "Bearer"},
        )

    user_id = payload.get("sub")
    user = get_user_by_id(db, int(user_id)) if user_id is not None else None
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token payload",
        )

    # Invalidate old session if exists
    old_jti = payload.get("jti")
    if old_jti:
        invalidate_session(db, old_jti)

    return _issue_token(db, user)
