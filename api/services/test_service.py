"""Service layer for test operations."""
import logging
from datetime import datetime, timezone

from fastapi import HTTPException
from sqlalchemy import delete, select
from sqlalchemy.orm import Session as DbSession

from api.models.db.attempt import Attempt
from api.models.db.exam import TestRecord
from api.models.db.user import User
from api.models.tests import TestCreate, TestUpdate
from api.services.course_service import get_course
from models import Test
from serialization import question_from_payload, question_to_payload

logger = logging.getLogger(__name__)


def serialize_test(record: TestRecord) -> dict[str, object]:
    """Serialize a test row to its API payload."""
    return {
        "id": record.id,
        "title": record.title,
        "course": record.course_id,
        "courseName": record.course.name if record.course else None,
        "subject": record.subject,
        "duration": record.duration,
        "questions": record.questions,
        "questionCount": record.question_count,
        "teacherId": record.teacher_id,
        "approved": record.is_approved,
        "active": record.is_active,
        "createdAt": record.created_at.isoformat(),
    }


def record_to_test(record: TestRecord) -> Test:
    """Build the engine's view of a stored test."""
    return Test(
        id=record.id,
        title=record.title,
        questions=[question_from_payload(item) for item in record.questions],
        duration=record.duration,
        approved=record.is_approved,
        active=record.is_active,
        course_id=record.course_id,
        subject=record.subject,
    )


def get_test(db: DbSession, test_id: str) -> TestRecord:
    """Get test by ID or raise 404."""
    record = db.get(TestRecord, test_id)
    if record is None:
        raise HTTPException(status_code=404, detail="Test not found")
    return record


def is_available_to_student(record: TestRecord, student: User) -> bool:
    """Approved, active and in the student's course."""
    return (
        record.is_approved
        and record.is_active
        and student.course_id is not None
        and record.course_id == student.course_id
    )


def can_view_test(record: TestRecord, user: User) -> bool:
    """Check if user can view a test."""
    if user.is_admin:
        return True
    if user.is_teacher:
        return record.teacher_id == user.id
    return is_available_to_student(record, user)


def list_tests_for(db: DbSession, user: User) -> list[TestRecord]:
    """
    List tests visible to ``user``.
    Admin sees all, teachers see their own, students see approved and
    active tests of their course.
    """
    query = select(TestRecord)
    if user.is_teacher:
        query = query.where(TestRecord.teacher_id == user.id)
    elif user.is_student:
        if user.course_id is None:
            return []
        query = query.where(
            TestRecord.course_id == user.course_id,
            TestRecord.is_approved == True,  # noqa: E712
            TestRecord.is_active == True,  # noqa: E712
        )
    query = query.order_by(TestRecord.created_at.desc())
    return list(db.execute(query).scalars().all())


def create_test(db: DbSession, teacher: User, data: TestCreate) -> TestRecord:
    """Create a new test. It stays unapproved and inactive until an admin acts."""
    if get_course(db, data.course_id) is None:
        raise HTTPException(status_code=400, detail="Course not found")

    record = TestRecord(
        title=data.title.strip(),
        course_id=data.course_id,
        subject=data.subject.strip(),
        duration=data.duration,
        teacher_id=teacher.id,
        is_approved=False,
        is_active=False,
    )
    record.questions = [
        question_to_payload(question.to_question()) for question in data.questions
    ]
    db.add(record)
    db.commit()
    db.refresh(record)
    logger.info("Teacher %s created test %s", teacher.username, record.id)
    return record


def update_test(
    db: DbSession, record: TestRecord, user: User, data: TestUpdate
) -> TestRecord:
    """
    Update a test.
    Admin may change anything; the owning teacher may only toggle ``active``,
    and only once the test is approved.
    """
    if user.is_teacher:
        if record.teacher_id != user.id:
            raise HTTPException(status_code=403, detail="Access denied")
        changed = data.model_dump(exclude_unset=True)
        if set(changed) - {"active"}:
            raise HTTPException(
                status_code=403, detail="Teachers can only change the active flag"
            )
        if data.active is not None:
            if not record.is_approved:
                raise HTTPException(
                    status_code=400, detail="Test must be approved before activation"
                )
            record.is_active = data.active
    elif user.is_admin:
        if data.title is not None:
            record.title = data.title.strip()
        if data.subject is not None:
            record.subject = data.subject.strip()
        if data.duration is not None:
            record.duration = data.duration
        if data.questions is not None:
            record.questions = [
                question_to_payload(question.to_question()) for question in data.questions
            ]
        if data.active is not None:
            record.is_active = data.active
    else:
        raise HTTPException(status_code=403, detail="Access denied")

    record.updated_at = datetime.now(timezone.utc)
    db.commit()
    db.refresh(record)
    return record


def approve_test(db: DbSession, record: TestRecord) -> TestRecord:
    """Mark a test as approved by an admin."""
    record.is_approved = True
    db.commit()
    db.refresh(record)
    logger.info("Approved test %s", record.id)
    return record


def delete_test(db: DbSession, record: TestRecord, user: User) -> None:
    """Delete test. Only admin or the teacher who created it."""
    if not user.is_admin and record.teacher_id != user.id:
        raise HTTPException(status_code=403, detail="Access denied")
    test_id = record.id
    db.execute(delete(Attempt).where(Attempt.test_id == test_id))
    db.delete(record)
    db.commit()
    logger.info("Deleted test %s", test_id)
