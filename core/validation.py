"""Invariant checks for questions and tests handed to the engine."""
from __future__ import annotations

from core.errors import ValidationError
from models import Question, Test


def _is_index(value: object) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def validate_question(question: Question, position: int | None = None) -> None:
    """Raise ValidationError if the question breaks its invariants."""
    label = "Question" if position is None else f"Question {position}"
    if not isinstance(question.question, str) or not question.question.strip():
        raise ValidationError(f"{label}: prompt text is required")
    options = question.options
    if not isinstance(options, list) or len(options) < 2:
        raise ValidationError(f"{label}: at least two options are required")
    if any(not isinstance(option, str) for option in options):
        raise ValidationError(f"{label}: options must be text")
    if not _is_index(question.correct) or not 0 <= question.correct < len(options):
        raise ValidationError(
            f"{label}: correct option {question.correct!r} is out of range"
        )
    if question.option_images is not None and len(question.option_images) != len(options):
        raise ValidationError(
            f"{label}: option images must match the number of options"
        )


def validate_test(test: Test) -> None:
    """Raise ValidationError if the test cannot be taken."""
    if not _is_index(test.duration) or test.duration <= 0:
        raise ValidationError("Test duration must be a positive number of minutes")
    if not test.questions:
        raise ValidationError("Test has no questions")
    for position, question in enumerate(test.questions):
        validate_question(question, position)


def validate_option(question: Question, option: object) -> int:
    """Return ``option`` if it indexes one of the question's options."""
    if not _is_index(option) or not 0 <= option < len(question.options):
        raise ValidationError(
            f"Option {option!r} is not valid for a question with "
            f"{len(question.options)} options"
        )
    return option
