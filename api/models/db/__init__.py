"""Database models."""
from api.models.db.user import User, Session, UserRole
from api.models.db.course import Course, Material, MaterialType
from api.models.db.exam import TestRecord
from api.models.db.attempt import Attempt

__all__ = [
    "User",
    "Session",
    "UserRole",
    "Course",
    "Material",
    "MaterialType",
    "TestRecord",
    "Attempt",
]
