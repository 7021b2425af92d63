"""Attempt endpoints: the server side of exam submission."""
from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session as DbSession

from api.database import get_db
from api.dependencies.auth import get_current_user, require_role
from api.models import AttemptResponse, AttemptSubmitRequest
from api.models.db.user import User, UserRole
from api.services import attempt_service

router = APIRouter(prefix="/api/attempts", tags=["attempts"])


@router.post("", response_model=AttemptResponse, status_code=201)
def submit_attempt(
    payload: AttemptSubmitRequest,
    student: Annotated[User, Depends(require_role(UserRole.STUDENT))],
    db: Annotated[DbSession, Depends(get_db)],
) -> dict[str, object]:
    """Store a finished exam session. One attempt per student and test."""
    attempt = attempt_service.submit_attempt(db, student, payload)
    return attempt_service.serialize_attempt(attempt)


@router.get("", response_model=list[AttemptResponse])
def list_attempts(
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[DbSession, Depends(get_db)],
    test_id: str | None = None,
) -> list[dict[str, object]]:
    return [
        attempt_service.serialize_attempt(attempt)
        for attempt in attempt_service.list_attempts_for(db, current_user, test_id)
    ]


@router.get("/{attempt_id}", response_model=AttemptResponse)
def get_attempt(
    attempt_id: str,
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[DbSession, Depends(get_db)],
) -> dict[str, object]:
    attempt = attempt_service.get_attempt(db, attempt_id, current_user)
    return attempt_service.serialize_attempt(attempt)
