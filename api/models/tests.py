"""Test-related Pydantic models."""
from pydantic import BaseModel, Field, model_validator

from core.errors import ValidationError
from core.validation import validate_question
from models import Question


class QuestionPayload(BaseModel):
    """A multiple-choice question as sent by teachers."""

    question: str
    options: list[str]
    correct: int
    image: str | None = None
    optionImages: list[str | None] | None = None
    explanation: str | None = None

    @model_validator(mode="after")
    def check_invariants(self) -> "QuestionPayload":
        try:
            validate_question(self.to_question())
        except ValidationError as exc:
            raise ValueError(str(exc)) from exc
        return self

    def to_question(self) -> Question:
        return Question(
            question=self.question,
            options=list(self.options),
            correct=self.correct,
            image=self.image,
            option_images=self.optionImages,
            explanation=self.explanation,
        )


class TestCreate(BaseModel):
    """Model for creating a new test."""

    title: str = Field(..., min_length=1, max_length=200)
    course_id: int
    subject: str = Field(..., min_length=1, max_length=200)
    duration: int = Field(..., gt=0)
    questions: list[QuestionPayload] = Field(..., min_length=1)


class TestUpdate(BaseModel):
    """Model for updating a test. Omitted fields are kept."""

    title: str | None = Field(None, min_length=1, max_length=200)
    subject: str | None = Field(None, min_length=1, max_length=200)
    duration: int | None = Field(None, gt=0)
    questions: list[QuestionPayload] | None = Field(None, min_length=1)
    active: bool | None = None
