"""Attempt-related Pydantic models."""
from datetime import datetime

from pydantic import BaseModel, Field


class AttemptSubmitRequest(BaseModel):
    """A graded attempt as produced by an exam session."""

    testId: str = Field(..., min_length=1)
    studentId: str | None = None
    score: int | None = Field(None, ge=0)
    total: int | None = Field(None, ge=0)
    answers: dict[str, int] = Field(default_factory=dict)
    shuffleOrder: list[int]


class AttemptResponse(BaseModel):
    """Stored attempt."""

    id: str
    testId: str
    studentId: str
    testTitle: str | None = None
    score: int
    total: int
    percentCorrect: float
    answers: dict[str, int]
    # keyed by question index in the stored test
    originalAnswers: dict[str, int]
    shuffleOrder: list[int]
    submittedAt: datetime
