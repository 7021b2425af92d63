"""Service layer for graded attempts."""
import logging

from fastapi import HTTPException
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session as DBSession, joinedload

from api.models.attempts import AttemptSubmitRequest
from api.models.db.attempt import Attempt
from api.models.db.exam import TestRecord
from api.models.db.user import User
from api.services.test_service import get_test, is_available_to_student, record_to_test
from core.errors import ValidationError
from core.scoring import original_answers, score_answers
from core.shuffle import is_permutation
from core.validation import validate_option
from serialization import answers_from_payload, answers_to_payload

logger = logging.getLogger(__name__)


def serialize_attempt(attempt: Attempt) -> dict[str, object]:
    """Serialize an attempt row to its API payload."""
    return {
        "id": attempt.id,
        "testId": attempt.test_id,
        "studentId": str(attempt.student_id),
        "testTitle": attempt.test.title if attempt.test else None,
        "score": attempt.score,
        "total": attempt.total,
        "percentCorrect": attempt.percent_correct,
        "answers": {str(key): value for key, value in attempt.answers.items()},
        "originalAnswers": answers_to_payload(
            original_answers(attempt.shuffle_order, answers_from_payload(attempt.answers))
        ),
        "shuffleOrder": attempt.shuffle_order,
        "submittedAt": attempt.submitted_at,
    }


def find_attempt(db: DBSession, test_id: str, student_id: int) -> Attempt | None:
    """Get the attempt of a student for a test, if any."""
    return db.execute(
        select(Attempt).where(
            Attempt.test_id == test_id,
            Attempt.student_id == student_id,
        )
    ).scalar_one_or_none()


def submit_attempt(
    db: DBSession, student: User, data: AttemptSubmitRequest
) -> Attempt:
    """
    Persist a student's attempt.

    The score is recomputed from the stored answer key; a client score that
    disagrees is logged and replaced.

    Raises:
        HTTPException 403: studentId mismatch or test not available
        HTTPException 404: unknown test
        HTTPException 409: the student already has an attempt for this test
        HTTPException 400: malformed shuffle order or answers
    """
    if data.studentId is not None and data.studentId != str(student.id):
        raise HTTPException(status_code=403, detail="Cannot submit for another student")

    record = get_test(db, data.testId)
    if not is_available_to_student(record, student):
        raise HTTPException(status_code=403, detail="Test is not available")

    if find_attempt(db, record.id, student.id) is not None:
        raise HTTPException(status_code=409, detail="Attempt already submitted")

    test = record_to_test(record)
    if not is_permutation(data.shuffleOrder, test.question_count):
        raise HTTPException(status_code=400, detail="Invalid shuffle order")

    try:
        answers = answers_from_payload(data.answers)
        for index, option in answers.items():
            if not 0 <= index < test.question_count:
                raise ValidationError(f"Answer for unknown question {index}")
            validate_option(test.questions[data.shuffleOrder[index]], option)
        score, total = score_answers(data.shuffleOrder, test.questions, answers)
    except ValidationError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc

    if data.score is not None and data.score != score:
        logger.warning(
            "Client score %s for test %s by %s differs from server score %s",
            data.score,
            record.id,
            student.username,
            score,
        )

    attempt = Attempt(
        test_id=record.id,
        student_id=student.id,
        score=score,
        total=total,
    )
    attempt.answers = answers
    attempt.shuffle_order = data.shuffleOrder
    db.add(attempt)
    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        raise HTTPException(status_code=409, detail="Attempt already submitted") from exc
    db.refresh(attempt)
    logger.info(
        "Student %s submitted test %s: %s/%s", student.username, record.id, score, total
    )
    return attempt


def list_attempts_for(
    db: DBSession, user: User, test_id: str | None = None
) -> list[Attempt]:
    """
    List attempts visible to ``user``.
    Students see their own, teachers see attempts on their tests,
    admin sees everything.
    """
    query = select(Attempt).options(joinedload(Attempt.test))
    if user.is_student:
        query = query.where(Attempt.student_id == user.id)
    elif user.is_teacher:
        query = query.join(TestRecord, TestRecord.id == Attempt.test_id).where(
            TestRecord.teacher_id == user.id
        )
    if test_id:
        query = query.where(Attempt.test_id == test_id)
    query = query.order_by(Attempt.submitted_at.desc())
    return list(db.execute(query).scalars().all())


def get_attempt(db: DBSession, attempt_id: str, user: User) -> Attempt:
    """Get attempt by ID if ``user`` may see it, else 404."""
    attempt = db.execute(
        select(Attempt)
        .options(joinedload(Attempt.test))
        .where(Attempt.id == attempt_id)
    ).scalar_one_or_none()
    if attempt is None:
        raise HTTPException(status_code=404, detail="Attempt not found")

    if user.is_admin:
        return attempt
    if user.is_student and attempt.student_id == user.id:
        return attempt
    if user.is_teacher and attempt.test and attempt.test.teacher_id == user.id:
        return attempt
    raise HTTPException(status_code=404, detail="Attempt not found")
