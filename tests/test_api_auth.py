from api.models.db.user import UserRole
from api.services.auth_service import seed_admin


def test_student_registration_is_approved(client, course) -> None:
    response = client.post(
        "/api/auth/register",
        json={
            "username": "alice",
            "email": "Alice@School.org",
            "password": "secret123",
            "role": "student",
            "course_id": course.id,
        },
    )
    assert response.status_code == 201, response.text
    body = response.json()
    assert body["role"] == "student"
    assert body["is_approved"] is True
    assert body["email"] == "alice@school.org"
    assert body["course_id"] == course.id


def test_student_registration_requires_existing_course(client) -> None:
    payload = {"username": "alice", "email": "alice@school.org", "password": "secret123"}
    assert client.post("/api/auth/register", json=payload).status_code == 400
    payload["course_id"] = 999
    assert client.post("/api/auth/register", json=payload).status_code == 400


def test_admin_role_cannot_be_self_registered(client, course) -> None:
    response = client.post(
        "/api/auth/register",
        json={
            "username": "mallory",
            "email": "mallory@school.org",
            "password": "secret123",
            "role": "admin",
        },
    )
    assert response.status_code == 422


def test_duplicate_username_and_email_conflict(client, course, make_user) -> None:
    make_user("alice", course_id=course.id)
    base = {"password": "secret123", "course_id": course.id}
    taken_name = client.post(
        "/api/auth/register",
        json={**base, "username": "alice", "email": "other@school.org"},
    )
    taken_email = client.post(
        "/api/auth/register",
        json={**base, "username": "alice2", "email": "ALICE@school.org"},
    )
    assert taken_name.status_code == 409
    assert taken_email.status_code == 409


def test_teacher_waits_for_approval(client, make_user, login) -> None:
    admin = make_user("root", role=UserRole.ADMIN)
    response = client.post(
        "/api/auth/register",
        json={
            "username": "bob",
            "email": "bob@school.org",
            "password": "secret123",
            "role": "teacher",
        },
    )
    assert response.status_code == 201
    teacher_id = response.json()["id"]
    assert response.json()["is_approved"] is False

    pending = client.post("/api/auth/login", json={"username": "bob", "password": "secret123"})
    assert pending.status_code == 403
    assert pending.json()["detail"] == "Account pending approval"

    headers = login(admin.username)
    listed = client.get("/api/users", params={"pending": True}, headers=headers)
    assert [user["username"] for user in listed.json()] == ["bob"]

    approved = client.post(f"/api/users/{teacher_id}/approve", headers=headers)
    assert approved.status_code == 200
    assert approved.json()["is_approved"] is True
    assert login("bob")


def test_login_by_email_and_me(client, course, make_user, login) -> None:
    make_user("carol", course_id=course.id)
    headers = login("carol@school.org")
    me = client.get("/api/auth/me", headers=headers)
    assert me.status_code == 200
    assert me.json()["username"] == "carol"


def test_bad_credentials_and_missing_token(client, course, make_user) -> None:
    make_user("carol", course_id=course.id)
    wrong = client.post("/api/auth/login", json={"username": "carol", "password": "nope"})
    assert wrong.status_code == 401
    assert client.get("/api/auth/me").status_code == 401
    garbage = client.get("/api/auth/me", headers={"Authorization": "Bearer garbage"})
    assert garbage.status_code == 401


def test_logout_invalidates_token(client, course, make_user, login) -> None:
    make_user("carol", course_id=course.id)
    headers = login("carol")
    assert client.post("/api/auth/logout", headers=headers).status_code == 200
    assert client.get("/api/auth/me", headers=headers).status_code == 401


def test_refresh_issues_new_token(client, course, make_user, login) -> None:
    make_user("carol", course_id=course.id)
    headers = login("carol")
    refreshed = client.post("/api/auth/refresh", headers=headers)
    assert refreshed.status_code == 200
    new_headers = {"Authorization": f"Bearer {refreshed.json()['access_token']}"}
    assert client.get("/api/auth/me", headers=new_headers).status_code == 200
    assert client.get("/api/auth/me", headers=headers).status_code == 401


def test_user_admin_endpoints_need_admin(client, course, make_user, login) -> None:
    make_user("carol", course_id=course.id)
    headers = login("carol")
    assert client.get("/api/users", headers=headers).status_code == 403


def test_admin_deletes_user(client, course, make_user, login) -> None:
    admin = make_user("root", role=UserRole.ADMIN)
    student = make_user("carol", course_id=course.id)
    student_id = student.id
    headers = login(admin.username)
    assert client.delete(f"/api/users/{student_id}", headers=headers).status_code == 200
    assert client.get(f"/api/users/{student_id}", headers=headers).status_code == 404
    assert client.delete(f"/api/users/{admin.id}", headers=headers).status_code == 400


def test_seed_admin_runs_once(db) -> None:
    admin = seed_admin(db, "root", "root@school.org", "secret123")
    assert admin is not None
    assert admin.is_admin and admin.is_approved
    assert seed_admin(db, "root2", "root2@school.org", "secret123") is None
