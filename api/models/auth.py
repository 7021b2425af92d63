"""Pydantic models for authentication."""
from datetime import datetime
from typing import Literal

from pydantic import BaseModel, EmailStr, Field


class UserRegister(BaseModel):
    """User registration request. Admin accounts are seeded, not registered."""

    username: str = Field(..., min_length=3, max_length=50)
    email: EmailStr
    password: str = Field(..., min_length=6, max_length=100)
    display_name: str | None = Field(None, max_length=100)
    role: Literal["student", "teacher"] = "student"
    course_id: int | None = None


class UserLogin(BaseModel):
    """User login request."""

    username: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)


class TokenResponse(BaseModel):
    """JWT token response."""

    access_token: str
    token_type: str = "bearer"
    expires_in: int


class UserResponse(BaseModel):
    """User response (public info)."""

    id: int
    username: str
    email: str
    display_name: str | None
    role: str
    is_approved: bool
    is_active: bool
    course_id: int | None
    created_at: datetime

    class Config:
        from_attributes = True


class MessageResponse(BaseModel):
    """Simple message response."""

    message: str
