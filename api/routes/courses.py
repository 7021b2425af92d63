"""Course and study material endpoints."""
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session as DbSession

from api.database import get_db
from api.dependencies.auth import get_current_user, require_role
from api.models import (
    CourseCreate,
    CourseResponse,
    MaterialCreate,
    MaterialResponse,
    MaterialUpdate,
    MessageResponse,
)
from api.models.db.course import Course
from api.models.db.user import User, UserRole
from api.services import course_service

router = APIRouter(tags=["courses"])


@router.get("/api/courses", response_model=list[CourseResponse])
def list_courses(db: Annotated[DbSession, Depends(get_db)]) -> list[Course]:
    """List courses. Public so students can pick one when registering."""
    return course_service.list_courses(db)


@router.post("/api/courses", response_model=CourseResponse, status_code=201)
def create_course(
    payload: CourseCreate,
    admin: Annotated[User, Depends(require_role(UserRole.ADMIN))],
    db: Annotated[DbSession, Depends(get_db)],
) -> Course:
    return course_service.create_course(db, payload.name, payload.description)


@router.delete("/api/courses/{course_id}", response_model=MessageResponse)
def delete_course(
    course_id: int,
    admin: Annotated[User, Depends(require_role(UserRole.ADMIN))],
    db: Annotated[DbSession, Depends(get_db)],
) -> MessageResponse:
    if not course_service.delete_course(db, course_id):
        raise HTTPException(status_code=404, detail="Course not found")
    return MessageResponse(message="Course deleted")


@router.get("/api/materials", response_model=list[MaterialResponse])
def list_materials(
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[DbSession, Depends(get_db)],
) -> list[dict[str, object]]:
    """List materials visible to the current user."""
    return [
        course_service.serialize_material(material)
        for material in course_service.list_materials_for(db, current_user)
    ]


@router.post("/api/materials", response_model=MaterialResponse, status_code=201)
def create_material(
    payload: MaterialCreate,
    teacher: Annotated[User, Depends(require_role(UserRole.TEACHER))],
    db: Annotated[DbSession, Depends(get_db)],
) -> dict[str, object]:
    material = course_service.create_material(db, teacher, payload)
    return course_service.serialize_material(material)


@router.get("/api/materials/{material_id}", response_model=MaterialResponse)
def get_material(
    material_id: int,
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[DbSession, Depends(get_db)],
) -> dict[str, object]:
    material = course_service.get_material(db, material_id)
    if not course_service.can_view_material(material, current_user):
        raise HTTPException(status_code=404, detail="Material not found")
    return course_service.serialize_material(material)


@router.patch("/api/materials/{material_id}", response_model=MaterialResponse)
def update_material(
    material_id: int,
    payload: MaterialUpdate,
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[DbSession, Depends(get_db)],
) -> dict[str, object]:
    material = course_service.get_material(db, material_id)
    material = course_service.update_material(db, material, current_user, payload)
    return course_service.serialize_material(material)


@router.delete("/api/materials/{material_id}", response_model=MessageResponse)
def delete_material(
    material_id: int,
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[DbSession, Depends(get_db)],
) -> MessageResponse:
    material = course_service.get_material(db, material_id)
    course_service.delete_material(db, material, current_user)
    return MessageResponse(message="Material deleted")
