"""
Test database model.
Questions are stored as a JSON snapshot on the test row.
"""

from __future__ import annotations

import json
import uuid
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any

import sqlalchemy as sa
from sqlalchemy import ForeignKey, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from api.database import Base

if TYPE_CHECKING:
    from api.models.db.course import Course
    from api.models.db.user import User


class TestRecord(Base):
    """
    A timed multiple-choice test written by a teacher.
    Students only see it once an admin approved it and it is active.
    """

    __tablename__ = "tests"

    id: Mapped[str] = mapped_column(
        String(64), primary_key=True, index=True, default=lambda: uuid.uuid4().hex
    )
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    course_id: Mapped[int] = mapped_column(
        ForeignKey("courses.id", ondelete="CASCADE"), nullable=False, index=True
    )
    subject: Mapped[str] = mapped_column(String(200), nullable=False)
    duration: Mapped[int] = mapped_column(nullable=False)  # minutes
    questions_json: Mapped[str] = mapped_column(Text, default="[]", nullable=False)
    teacher_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    is_approved: Mapped[bool] = mapped_column(default=False, nullable=False)
    is_active: Mapped[bool] = mapped_column(default=False, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        sa.DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False,
    )
    updated_at: Mapped[datetime] = mapped_column(
        sa.DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
        nullable=False,
    )

    # Relationships
    course: Mapped["Course"] = relationship("Course")
    teacher: Mapped["User"] = relationship("User")

    @property
    def questions(self) -> list[dict[str, Any]]:
        """Parse questions from JSON."""
        if not self.questions_json:
            return []
        try:
            return json.loads(self.questions_json)
        except (json.JSONDecodeError, TypeError):
            return []

    @questions.setter
    def questions(self, value: list[dict[str, Any]]) -> None:
        """Serialize questions to JSON."""
        self.questions_json = json.dumps(value or [], ensure_ascii=False)

    @property
    def question_count(self) -> int:
        return len(self.questions)
