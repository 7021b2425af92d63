"""Test management endpoints."""
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session as DbSession

from api.database import get_db
from api.dependencies.auth import get_current_user, require_role
from api.models import MessageResponse, TestCreate, TestUpdate
from api.models.db.user import User, UserRole
from api.services import test_service
from serialization import serialize_metadata

router = APIRouter(prefix="/api/tests", tags=["tests"])


@router.get("")
def list_tests(
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[DbSession, Depends(get_db)],
) -> list[dict[str, object]]:
    """List tests accessible to the current user, without their questions."""
    tests = []
    for record in test_service.list_tests_for(db, current_user):
        payload = test_service.serialize_test(record)
        metadata = serialize_metadata(payload)
        metadata["course"] = payload["course"]
        metadata["courseName"] = payload["courseName"]
        metadata["approved"] = payload["approved"]
        metadata["active"] = payload["active"]
        metadata["teacherId"] = payload["teacherId"]
        tests.append(metadata)
    return tests


@router.post("", status_code=201)
def create_test(
    payload: TestCreate,
    teacher: Annotated[User, Depends(require_role(UserRole.TEACHER))],
    db: Annotated[DbSession, Depends(get_db)],
) -> dict[str, object]:
    """Create a new test. It waits for admin approval."""
    record = test_service.create_test(db, teacher, payload)
    return test_service.serialize_test(record)


@router.get("/{test_id}")
def get_test(
    test_id: str,
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[DbSession, Depends(get_db)],
) -> dict[str, object]:
    """Get full test payload."""
    record = test_service.get_test(db, test_id)
    if not test_service.can_view_test(record, current_user):
        # Don't reveal tests the user cannot take
        raise HTTPException(status_code=404, detail="Test not found")
    return test_service.serialize_test(record)


@router.patch("/{test_id}")
def update_test(
    test_id: str,
    payload: TestUpdate,
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[DbSession, Depends(get_db)],
) -> dict[str, object]:
    record = test_service.get_test(db, test_id)
    record = test_service.update_test(db, record, current_user, payload)
    return test_service.serialize_test(record)


@router.post("/{test_id}/approve")
def approve_test(
    test_id: str,
    admin: Annotated[User, Depends(require_role(UserRole.ADMIN))],
    db: Annotated[DbSession, Depends(get_db)],
) -> dict[str, object]:
    record = test_service.get_test(db, test_id)
    record = test_service.approve_test(db, record)
    return test_service.serialize_test(record)


@router.delete("/{test_id}", response_model=MessageResponse)
def delete_test(
    test_id: str,
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[DbSession, Depends(get_db)],
) -> MessageResponse:
    record = test_service.get_test(db, test_id)
    test_service.delete_test(db, record, current_user)
    return MessageResponse(message="Test deleted")
