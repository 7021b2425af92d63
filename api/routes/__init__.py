"""API route modules."""
from api.routes import attempts, auth, courses, tests, users

__all__ = ["attempts", "auth", "courses", "tests", "users"]
