"""Course and study material service."""
import logging

from fastapi import HTTPException
from sqlalchemy import delete, func, select, update
from sqlalchemy.orm import Session as DbSession, joinedload

from api.models.courses import MaterialCreate, MaterialUpdate
from api.models.db.course import Course, Material
from api.models.db.exam import TestRecord
from api.models.db.user import User

logger = logging.getLogger(__name__)


def get_course(db: DbSession, course_id: int) -> Course | None:
    """Get course by ID."""
    return db.get(Course, course_id)


def list_courses(db: DbSession) -> list[Course]:
    """List all courses ordered by name."""
    return list(db.execute(select(Course).order_by(Course.name)).scalars().all())


def create_course(db: DbSession, name: str, description: str = "") -> Course:
    """Create a course. Names are unique regardless of case."""
    name = name.strip()
    if not name:
        raise HTTPException(status_code=400, detail="Course name is required")

    existing = db.execute(
        select(Course).where(func.lower(Course.name) == name.lower())
    ).scalar_one_or_none()
    if existing:
        raise HTTPException(status_code=409, detail="Course already exists")

    course = Course(name=name, description=description or "")
    db.add(course)
    db.commit()
    db.refresh(course)
    logger.info("Created course %s", course.name)
    return course


def delete_course(db: DbSession, course_id: int) -> bool:
    """Delete a course and its materials. Courses that still have tests are kept."""
    course = get_course(db, course_id)
    if not course:
        return False
    has_tests = db.execute(
        select(TestRecord.id).where(TestRecord.course_id == course_id).limit(1)
    ).first()
    if has_tests:
        raise HTTPException(status_code=409, detail="Course still has tests")
    db.execute(update(User).where(User.course_id == course_id).values(course_id=None))
    db.execute(delete(Material).where(Material.course_id == course_id))
    db.delete(course)
    db.commit()
    logger.info("Deleted course %s", course_id)
    return True


def serialize_material(material: Material) -> dict[str, object]:
    return {
        "id": material.id,
        "title": material.title,
        "course_id": material.course_id,
        "course_name": material.course.name if material.course else None,
        "subject": material.subject,
        "content": material.content,
        "type": material.material_type,
        "teacher_id": material.teacher_id,
        "teacher_name": (
            material.teacher.display_name or material.teacher.username
            if material.teacher
            else None
        ),
        "created_at": material.created_at,
    }


def get_material(db: DbSession, material_id: int) -> Material:
    """Get material with course and teacher loaded, or raise 404."""
    material = db.execute(
        select(Material)
        .options(joinedload(Material.course), joinedload(Material.teacher))
        .where(Material.id == material_id)
    ).scalar_one_or_none()
    if material is None:
        raise HTTPException(status_code=404, detail="Material not found")
    return material


def list_materials_for(db: DbSession, user: User) -> list[Material]:
    """
    Students see materials of their course, teachers see their own,
    admin sees everything.
    """
    query = select(Material).options(
        joinedload(Material.course), joinedload(Material.teacher)
    )
    if user.is_student:
        if user.course_id is None:
            return []
        query = query.where(Material.course_id == user.course_id)
    elif user.is_teacher:
        query = query.where(Material.teacher_id == user.id)
    query = query.order_by(Material.created_at.desc(), Material.id.desc())
    return list(db.execute(query).scalars().all())


def can_view_material(material: Material, user: User) -> bool:
    if user.is_admin:
        return True
    if user.is_teacher:
        return material.teacher_id == user.id
    return material.course_id == user.course_id


def create_material(db: DbSession, teacher: User, data: MaterialCreate) -> Material:
    """Publish material for a course."""
    if get_course(db, data.course_id) is None:
        raise HTTPException(status_code=400, detail="Course not found")

    material = Material(
        title=data.title.strip(),
        course_id=data.course_id,
        subject=data.subject.strip(),
        content=data.content,
        material_type=data.type.value,
        teacher_id=teacher.id,
    )
    db.add(material)
    db.commit()
    return get_material(db, material.id)


def update_material(
    db: DbSession, material: Material, user: User, data: MaterialUpdate
) -> Material:
    """Update material. Only the teacher who created it or admin."""
    if not user.is_admin and material.teacher_id != user.id:
        raise HTTPException(status_code=403, detail="Access denied")

    if data.title is not None:
        material.title = data.title.strip()
    if data.subject is not None:
        material.subject = data.subject.strip()
    if data.content is not None:
        material.content = data.content
    if data.type is not None:
        material.material_type = data.type.value

    db.commit()
    db.refresh(material)
    return material


def delete_material(db: DbSession, material: Material, user: User) -> None:
    """Delete material. Only the teacher who created it or admin."""
    if not user.is_admin and material.teacher_id != user.id:
        raise HTTPException(status_code=403, detail="Access denied")
    db.delete(material)
    db.commit()
