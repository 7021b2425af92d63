from __future__ import annotations

from datetime import datetime
from typing import Any, Mapping, Sequence

from core.errors import ValidationError
from core.validation import validate_test
from models import Attempt, Question, Test


def _optional_str(value: object) -> str | None:
    if value is None or value == "":
        return None
    return str(value)


def question_to_payload(question: Question) -> dict[str, Any]:
    payload: dict[str, Any] = {
        "question": question.question,
        "options": list(question.options),
        "correct": question.correct,
    }
    if question.image:
        payload["image"] = question.image
    if question.option_images is not None:
        payload["optionImages"] = list(question.option_images)
    if question.explanation:
        payload["explanation"] = question.explanation
    return payload


def question_from_payload(payload: object) -> Question:
    if not isinstance(payload, dict):
        raise ValidationError("Question payload must be an object")
    option_images = payload.get("optionImages")
    return Question(
        question=payload.get("question", ""),
        options=list(payload.get("options") or []),
        correct=payload.get("correct", -1),
        image=_optional_str(payload.get("image")),
        option_images=(
            [_optional_str(item) for item in option_images]
            if isinstance(option_images, list)
            else None
        ),
        explanation=_optional_str(payload.get("explanation")),
    )


def parse_test_payload(payload: object) -> Test:
    """Build a validated Test from the JSON returned by ``/api/tests/{id}``."""
    if not isinstance(payload, dict):
        raise ValidationError("Test payload must be an object")
    questions = payload.get("questions")
    if not isinstance(questions, list):
        raise ValidationError("Test payload has no question list")
    test = Test(
        id=str(payload.get("id", "")),
        title=str(payload.get("title", "")),
        questions=[question_from_payload(item) for item in questions],
        duration=payload.get("duration", 0),
        approved=bool(payload.get("approved", False)),
        active=bool(payload.get("active", False)),
        course_id=payload.get("course"),
        subject=str(payload.get("subject", "")),
    )
    validate_test(test)
    return test


def answers_to_payload(answers: Mapping[int, int]) -> dict[str, int]:
    return {str(index): option for index, option in sorted(answers.items())}


def answers_from_payload(payload: object) -> dict[int, int]:
    if payload is None:
        return {}
    if not isinstance(payload, dict):
        raise ValidationError("Answers must be an object")
    answers: dict[int, int] = {}
    for key, value in payload.items():
        try:
            answers[int(key)] = int(value)
        except (TypeError, ValueError) as exc:
            raise ValidationError(f"Invalid answer entry {key!r}: {value!r}") from exc
    return answers


def attempt_request_payload(
    test_id: str,
    student_id: str,
    score: int,
    total: int,
    answers: Mapping[int, int],
    shuffle_order: Sequence[int],
) -> dict[str, Any]:
    return {
        "testId": test_id,
        "studentId": student_id,
        "score": score,
        "total": total,
        "answers": answers_to_payload(answers),
        "shuffleOrder": list(shuffle_order),
    }


def attempt_from_payload(payload: object) -> Attempt:
    if not isinstance(payload, dict):
        raise ValidationError("Attempt payload must be an object")
    submitted_at = payload.get("submittedAt")
    if isinstance(submitted_at, str):
        raw = submitted_at[:-1] + "+00:00" if submitted_at.endswith("Z") else submitted_at
        submitted = datetime.fromisoformat(raw)
    elif isinstance(submitted_at, datetime):
        submitted = submitted_at
    else:
        raise ValidationError("Attempt payload has no submission time")
    return Attempt(
        id=_optional_str(payload.get("id")),
        test_id=str(payload.get("testId", "")),
        student_id=str(payload.get("studentId", "")),
        score=int(payload.get("score", 0)),
        total=int(payload.get("total", 0)),
        answers=answers_from_payload(payload.get("answers")),
        shuffle_order=[int(item) for item in payload.get("shuffleOrder") or []],
        submitted_at=submitted,
    )


def serialize_metadata(payload: dict[str, Any]) -> dict[str, Any]:
    return {
        "id": payload.get("id"),
        "title": payload.get("title"),
        "subject": payload.get("subject"),
        "duration": payload.get("duration"),
        "questionCount": len(payload.get("questions", [])),
    }
