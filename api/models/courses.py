"""Course and material Pydantic models."""
from datetime import datetime

from pydantic import BaseModel, Field

from api.models.db.course import MaterialType


class CourseCreate(BaseModel):
    """Model for creating a course."""

    name: str = Field(..., min_length=1, max_length=200)
    description: str = ""


class CourseResponse(BaseModel):
    """Course response."""

    id: int
    name: str
    description: str
    created_at: datetime

    class Config:
        from_attributes = True


class MaterialCreate(BaseModel):
    """Model for publishing study material."""

    title: str = Field(..., min_length=1, max_length=200)
    course_id: int
    subject: str = Field(..., min_length=1, max_length=200)
    content: str = Field(..., min_length=1)
    type: MaterialType


class MaterialUpdate(BaseModel):
    """Model for updating study material. Omitted fields are kept."""

    title: str | None = Field(None, min_length=1, max_length=200)
    subject: str | None = Field(None, min_length=1, max_length=200)
    content: str | None = Field(None, min_length=1)
    type: MaterialType | None = None


class MaterialResponse(BaseModel):
    """Material response."""

    id: int
    title: str
    course_id: int
    course_name: str | None
    subject: str
    content: str
    type: str
    teacher_id: int
    teacher_name: str | None
    created_at: datetime
