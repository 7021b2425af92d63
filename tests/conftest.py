import os
import tempfile
from typing import Callable

# The api package reads its configuration at import time
os.environ.setdefault("DB_DIR", tempfile.mkdtemp(prefix="quizplatform-tests-"))

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from api.app import app
from api.database import get_db, init_db
from api.models.db.user import UserRole
from api.services.auth_service import create_user
from api.services.course_service import create_course


@pytest.fixture()
def session_factory():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    init_db(bind=engine)
    yield sessionmaker(autocommit=False, autoflush=False, bind=engine)
    engine.dispose()


@pytest.fixture()
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def client(session_factory):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture()
def course(db):
    return create_course(db, "Computer Science", "First year")


@pytest.fixture()
def make_user(db) -> Callable[..., object]:
    def _make(
        username: str,
        role: UserRole = UserRole.STUDENT,
        course_id: int | None = None,
        approved: bool = True,
    ):
        return create_user(
            db,
            username=username,
            email=f"{username}@school.org",
            password="secret123",
            role=role,
            course_id=course_id,
            approved=approved,
        )

    return _make


@pytest.fixture()
def login(client) -> Callable[[str], dict[str, str]]:
    def _login(username: str, password: str = "secret123") -> dict[str, str]:
        response = client.post(
            "/api/auth/login", json={"username": username, "password": password}
        )
        assert response.status_code == 200, response.text
        return {"Authorization": f"Bearer {response.json()['access_token']}"}

    return _login
