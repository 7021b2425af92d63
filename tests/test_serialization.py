from datetime import datetime, timezone

import pytest

import models
from core.errors import ValidationError
from serialization import (
    answers_from_payload,
    attempt_from_payload,
    attempt_request_payload,
    parse_test_payload,
    question_from_payload,
    question_to_payload,
    serialize_metadata,
)


def _payload(**overrides: object) -> dict[str, object]:
    payload: dict[str, object] = {
        "id": "t1",
        "title": "Biology",
        "course": 2,
        "subject": "Cells",
        "duration": 10,
        "approved": True,
        "active": False,
        "questions": [
            {
                "question": "Powerhouse of the cell?",
                "options": ["Nucleus", "Mitochondria"],
                "correct": 1,
                "explanation": "ATP",
            }
        ],
    }
    payload.update(overrides)
    return payload


def test_parse_test_payload_builds_validated_test() -> None:
    test = parse_test_payload(_payload())
    assert test.id == "t1"
    assert test.course_id == 2
    assert test.approved and not test.active
    assert test.questions[0].correct == 1
    assert test.questions[0].explanation == "ATP"


@pytest.mark.parametrize(
    "overrides",
    [
        {"duration": 0},
        {"duration": "10"},
        {"questions": []},
        {"questions": "nope"},
        {"questions": [{"question": "Q", "options": ["only"], "correct": 0}]},
        {"questions": [{"question": "Q", "options": ["a", "b"], "correct": 2}]},
        {"questions": [{"question": " ", "options": ["a", "b"], "correct": 0}]},
    ],
)
def test_parse_test_payload_rejects_broken_tests(overrides: dict[str, object]) -> None:
    with pytest.raises(ValidationError):
        parse_test_payload(_payload(**overrides))


def test_question_payload_uses_camel_case_images() -> None:
    question = models.Question(
        question="Pick the red one",
        options=["a", "b"],
        correct=0,
        option_images=["red.png", None],
    )
    payload = question_to_payload(question)
    assert payload["optionImages"] == ["red.png", None]
    assert "image" not in payload
    assert question_from_payload(payload) == question


def test_answers_payload_keys_are_strings_on_the_wire() -> None:
    payload = attempt_request_payload("t1", "5", 1, 2, {1: 0, 0: 3}, (1, 0))
    assert payload["answers"] == {"0": 3, "1": 0}
    assert payload["shuffleOrder"] == [1, 0]
    assert answers_from_payload(payload["answers"]) == {0: 3, 1: 0}


def test_answers_from_payload_rejects_garbage() -> None:
    with pytest.raises(ValidationError):
        answers_from_payload({"x": 1})
    with pytest.raises(ValidationError):
        answers_from_payload([1, 2])
    assert answers_from_payload(None) == {}


def test_attempt_from_payload_parses_timestamps() -> None:
    attempt = attempt_from_payload(
        {
            "id": "a1",
            "testId": "t1",
            "studentId": "5",
            "score": 1,
            "total": 2,
            "answers": {"1": 0},
            "shuffleOrder": [1, 0],
            "submittedAt": "2026-01-02T03:04:05Z",
        }
    )
    assert attempt.submitted_at == datetime(2026, 1, 2, 3, 4, 5, tzinfo=timezone.utc)
    assert attempt.percent_correct == 50.0
    with pytest.raises(ValidationError):
        attempt_from_payload({"testId": "t1"})


def test_serialize_metadata_counts_questions() -> None:
    metadata = serialize_metadata(_payload())
    assert metadata["questionCount"] == 1
    assert "questions" not in metadata
