"""Pydantic models."""
from api.models.attempts import AttemptResponse, AttemptSubmitRequest
from api.models.auth import (
    MessageResponse,
    TokenResponse,
    UserLogin,
    UserRegister,
    UserResponse,
)
from api.models.courses import (
    CourseCreate,
    CourseResponse,
    MaterialCreate,
    MaterialResponse,
    MaterialUpdate,
)
from api.models.tests import QuestionPayload, TestCreate, TestUpdate

__all__ = [
    "AttemptResponse",
    "AttemptSubmitRequest",
    "CourseCreate",
    "CourseResponse",
    "MaterialCreate",
    "MaterialResponse",
    "MaterialUpdate",
    "MessageResponse",
    "QuestionPayload",
    "TestCreate",
    "TestUpdate",
    "TokenResponse",
    "UserLogin",
    "UserRegister",
    "UserResponse",
]
