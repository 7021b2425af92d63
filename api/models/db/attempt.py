"""
Attempt database model: the durable result of one exam session.
"""

from __future__ import annotations

import json
import uuid
from datetime import datetime, timezone
from typing import TYPE_CHECKING

import sqlalchemy as sa
from sqlalchemy import ForeignKey, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from api.database import Base

if TYPE_CHECKING:
    from api.models.db.exam import TestRecord
    from api.models.db.user import User


class Attempt(Base):
    """
    Graded test attempt.
    At most one per (test, student).
    """

    __tablename__ = "attempts"

    id: Mapped[str] = mapped_column(
        String(64), primary_key=True, index=True, default=lambda: uuid.uuid4().hex
    )

    # References
    test_id: Mapped[str] = mapped_column(
        ForeignKey("tests.id", ondelete="CASCADE"), index=True, nullable=False
    )
    student_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), index=True, nullable=False
    )

    # Results
    score: Mapped[int] = mapped_column(default=0, nullable=False)
    total: Mapped[int] = mapped_column(default=0, nullable=False)

    # Presentation-index keyed answers and the order they were shown in
    answers_json: Mapped[str] = mapped_column(Text, default="{}", nullable=False)
    shuffle_order_json: Mapped[str] = mapped_column(Text, default="[]", nullable=False)

    submitted_at: Mapped[datetime] = mapped_column(
        sa.DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False,
    )

    __table_args__ = (
        UniqueConstraint("test_id", "student_id", name="uq_attempt_test_student"),
    )

    # Relationships
    test: Mapped["TestRecord"] = relationship("TestRecord")
    student: Mapped["User"] = relationship("User")

    @property
    def answers(self) -> dict[int, int]:
        """Parse answers from JSON."""
        if not self.answers_json:
            return {}
        try:
            raw = json.loads(self.answers_json)
            return {int(key): int(value) for key, value in raw.items()}
        except (json.JSONDecodeError, TypeError, ValueError, AttributeError):
            return {}

    @answers.setter
    def answers(self, value: dict[int, int]) -> None:
        """Serialize answers to JSON."""
        self.answers_json = json.dumps(
            {str(key): option for key, option in sorted((value or {}).items())}
        )

    @property
    def shuffle_order(self) -> list[int]:
        """Parse shuffle order from JSON."""
        if not self.shuffle_order_json:
            return []
        try:
            return [int(item) for item in json.loads(self.shuffle_order_json)]
        except (json.JSONDecodeError, TypeError, ValueError):
            return []

    @shuffle_order.setter
    def shuffle_order(self, value: list[int]) -> None:
        """Serialize shuffle order to JSON."""
        self.shuffle_order_json = json.dumps(list(value or []))

    @property
    def percent_correct(self) -> float:
        """Calculate percentage of correct answers."""
        if self.total == 0:
            return 0.0
        return (self.score / self.total) * 100
