"""Authentication service for user management and JWT handling."""
import logging
import uuid
from datetime import datetime, timedelta, timezone

import bcrypt
from jose import JWTError, jwt
from sqlalchemy import delete, select
from sqlalchemy.orm import Session as DbSession

from api.config import (
    ACCESS_TOKEN_EXPIRE_MINUTES,
    ADMIN_EMAIL,
    ADMIN_PASSWORD,
    ADMIN_USERNAME,
    ALGORITHM,
    SECRET_KEY,
    SESSION_EXTEND_MINUTES,
)
from api.models.db.attempt import Attempt
from api.models.db.course import Material
from api.models.db.exam import TestRecord
from api.models.db.user import Session, User, UserRole

logger = logging.getLogger(__name__)


def hash_password(password: str) -> str:
    """Hash a password using bcrypt."""
    salt = bcrypt.gensalt()
    return bcrypt.hashpw(password.encode("utf-8"), salt).decode("utf-8")


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a password against its hash."""
    return bcrypt.checkpw(
        plain_password.encode("utf-8"), hashed_password.encode("utf-8")
    )


def create_access_token(user_id: int, role: str, jti: str | None = None) -> tuple[str, str]:
    """Create a JWT access token.

    Returns:
        Tuple of (token, jti)
    """
    if jti is None:
        jti = str(uuid.uuid4())

    expire = datetime.now(timezone.utc) + timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES)
    to_encode = {
        "sub": str(user_id),
        "role": role,
        "exp": expire,
        "jti": jti,
    }
    encoded_jwt = jwt.encode(to_encode, SECRET_KEY, algorithm=ALGORITHM)
    return encoded_jwt, jti


def verify_token(token: str) -> dict | None:
    """Verify and decode a JWT token.

    Returns:
        Decoded token payload or None if invalid.
    """
    try:
        payload = jwt.decode(token, SECRET_KEY, algorithms=[ALGORITHM])
        return payload
    except JWTError:
        return None


def get_user_by_username(db: DbSession, username: str) -> User | None:
    """Get user by username."""
    return db.query(User).filter(User.username == username).first()


def get_user_by_email(db: DbSession, email: str) -> User | None:
    """Get user by email."""
    return db.query(User).filter(User.email == email.lower()).first()


def get_user_by_id(db: DbSession, user_id: int) -> User | None:
    """Get user by ID."""
    return db.query(User).filter(User.id == user_id).first()


def create_user(
    db: DbSession,
    username: str,
    email: str,
    password: str,
    role: UserRole = UserRole.STUDENT,
    display_name: str | None = None,
    course_id: int | None = None,
    approved: bool | None = None,
) -> User:
    """Create a new user.

    Students are approved immediately unless ``approved`` says otherwise;
    teachers stay pending until an admin approves them.
    """
    if approved is None:
        approved = role is not UserRole.TEACHER
    user = User(
        username=username,
        email=email.lower(),
        hashed_password=hash_password(password),
        display_name=display_name,
        role=role.value,
        is_approved=approved,
        course_id=course_id if role is UserRole.STUDENT else None,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def list_users(
    db: DbSession, role: UserRole | None = None, pending_only: bool = False
) -> list[User]:
    """List users, newest first."""
    query = db.query(User)
    if role is not None:
        query = query.filter(User.role == role.value)
    if pending_only:
        query = query.filter(User.is_approved == False)  # noqa: E712
    return query.order_by(User.created_at.desc(), User.id.desc()).all()


def approve_user(db: DbSession, user: User) -> User:
    """Approve a pending account."""
    user.is_approved = True
    db.commit()
    db.refresh(user)
    logger.info("Approved %s account %s", user.role, user.username)
    return user


def delete_user(db: DbSession, user: User) -> None:
    """Delete a user with their attempts, and for teachers their tests and materials."""
    owned_tests = select(TestRecord.id).where(TestRecord.teacher_id == user.id)
    db.execute(
        delete(Attempt).where(
            (Attempt.student_id == user.id) | Attempt.test_id.in_(owned_tests)
        )
    )
    db.execute(delete(TestRecord).where(TestRecord.teacher_id == user.id))
    db.execute(delete(Material).where(Material.teacher_id == user.id))
    username = user.username
    db.delete(user)
    db.commit()
    logger.info("Deleted user %s", username)


def seed_admin(
    db: DbSession,
    username: str = ADMIN_USERNAME,
    email: str = ADMIN_EMAIL,
    password: str = ADMIN_PASSWORD,
) -> User | None:
    """Create the administrator account if no admin exists yet.

    Returns:
        The created admin, or None if one already existed.
    """
    existing = db.query(User).filter(User.role == UserRole.ADMIN.value).first()
    if existing:
        return None
    admin = create_user(
        db,
        username=username,
        email=email,
        password=password,
        role=UserRole.ADMIN,
        display_name="Admin",
        approved=True,
    )
    logger.info("Admin user created: %s", admin.username)
    return admin


def create_session(
    db: DbSession, user_id: int, token_jti: str, expires_at: datetime
) -> Session:
    """Create a new session for user."""
    session = Session(
        user_id=user_id,
        token_jti=token_jti,
        expires_at=expires_at,
    )
    db.add(session)
    db.commit()
    db.refresh(session)
    return session


def get_active_session(db: DbSession, token_jti: str) -> Session | None:
    """Get an active session by token JTI."""
    now = datetime.now(timezone.utc)
    return (
        db.query(Session)
        .filter(
            Session.token_jti == token_jti,
            Session.is_active == True,  # noqa: E712
            Session.expires_at > now,
        )
        .first()
    )


def extend_session(db: DbSession, session: Session) -> Session:
    """Extend session expiration and update last activity."""
    now = datetime.now(timezone.utc)
    session.last_activity = now
    session.expires_at = now + timedelta(minutes=SESSION_EXTEND_MINUTES)
    db.commit()
    db.refresh(session)
    return session


def invalidate_session(db: DbSession, token_jti: str) -> None:
    """Invalidate a session by token JTI."""
    session = db.query(Session).filter(Session.token_jti == token_jti).first()
    if session:
        session.is_active = False
        db.commit()


def cleanup_expired_sessions(db: DbSession) -> int:
    """Remove expired sessions from database."""
    now = datetime.now(timezone.utc)
    result = db.query(Session).filter(Session.expires_at < now).delete()
    db.commit()
    return result
