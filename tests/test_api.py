import pytest
from sqlalchemy.exc import OperationalError

import api.routes.auth as auth_routes
from app import app
from core.dependencies import get_course_manager
from core.security import issue_token

from conftest import auth_header, login, register, register_and_login


@pytest.fixture
def admin_token(client):
    return register_and_login(client, "admin", "admin@example.com", name="Ada")


@pytest.fixture
def teacher_token(client, admin_token):
    resp = register(client, "teacher", "teacher@example.com", name="Tess")
    teacher_id = resp.json()["id"]
    resp = client.patch(
        f"/api/admin/teachers/{teacher_id}/status",
        json={"status": "approved"},
        headers=auth_header(admin_token),
    )
    assert resp.status_code == 200, resp.text
    return login(client, "teacher@example.com", "teacher").json()["token"]


@pytest.fixture
def student_token(client):
    return register_and_login(client, "student", "student@example.com", name="Stu")


@pytest.fixture
def course_id(client, admin_token, teacher_token):
    resp = client.post(
        "/api/teacher/courses",
        json={"title": "Intro", "description": "Basics"},
        headers=auth_header(teacher_token),
    )
    assert resp.status_code == 201, resp.text
    return resp.json()["course_id"]


def approve_course(client, admin_token, course_id):
    resp = client.patch(
        f"/api/admin/courses/{course_id}/status",
        json={"status": "approved"},
        headers=auth_header(admin_token),
    )
    assert resp.status_code == 200, resp.text
    return resp.json()


def test_health(client):
    assert client.get("/api/health").json() == {"status": "ok"}


class TestAuth:
    def test_teacher_must_be_approved_before_login(self, client, admin_token):
        resp = register(client, "teacher", "t@example.com")
        assert resp.status_code == 201
        assert resp.json()["status"] == "pending"
        teacher_id = resp.json()["id"]

        resp = login(client, "t@example.com", "teacher")
        assert resp.status_code == 401
        assert "pending" in resp.json()["message"]

        client.patch(
            f"/api/admin/teachers/{teacher_id}/status",
            json={"status": "approved"},
            headers=auth_header(admin_token),
        )
        resp = login(client, "t@example.com", "teacher")
        assert resp.status_code == 200
        assert resp.json()["user"]["status"] == "approved"

    def test_me_never_exposes_password_hash(self, client, student_token):
        resp = client.get("/api/auth/me", headers=auth_header(student_token))
        assert resp.status_code == 200
        body = resp.json()
        assert body["email"] == "student@example.com"
        assert "password_hash" not in body
        assert "password" not in body

    def test_login_response_has_no_password_hash(self, client):
        register(client, "student", "s@example.com")
        user = login(client, "s@example.com", "student").json()["user"]
        assert "password_hash" not in user

    def test_duplicate_email_conflicts(self, client):
        register(client, "student", "dup@example.com")
        resp = register(client, "teacher", "DUP@example.com")
        assert resp.status_code == 409
        assert resp.json() == {"message": "User already exists with this email"}

    def test_invalid_email_is_bad_request(self, client):
        resp = register(client, "student", "not-an-email")
        assert resp.status_code == 400
        assert "email" in resp.json()["message"]

    def test_unknown_role_is_bad_request(self, client):
        resp = register(client, "wizard", "w@example.com")
        assert resp.status_code == 400

    def test_wrong_role_claim(self, client, student_token):
        resp = login(client, "student@example.com", "admin")
        assert resp.status_code == 401

    def test_admin_token_required_when_configured(self, client, monkeypatch):
        monkeypatch.setattr(auth_routes, "ADMIN_TOKEN", "letmein")
        resp = register(client, "admin", "boss@example.com")
        assert resp.status_code == 403
        resp = client.post(
            "/api/auth/register",
            json={
                "name": "Boss",
                "email": "boss@example.com",
                "password": "pw",
                "role": "admin",
                "admin_token": "letmein",
            },
        )
        assert resp.status_code == 201

    def test_malformed_login_email_is_unauthenticated(self, client):
        resp = login(client, "not-an-email", "student")
        assert resp.status_code == 401
        assert resp.json() == {"message": "Invalid credentials"}

    def test_logout(self, client):
        assert client.post("/api/auth/logout").status_code == 200


class TestAccessGate:
    def test_missing_token(self, client):
        resp = client.get("/api/student/courses")
        assert resp.status_code == 401
        assert resp.json() == {"message": "No token, authorization denied"}

    def test_invalid_token(self, client):
        resp = client.get("/api/student/courses", headers=auth_header("garbage"))
        assert resp.status_code == 401

    def test_wrong_role_is_forbidden(self, client, student_token):
        resp = client.get("/api/admin/stats", headers=auth_header(student_token))
        assert resp.status_code == 403
        assert "message" in resp.json()

    def test_pending_teacher_token_is_refused(self, client):
        teacher_id = register(client, "teacher", "p@example.com").json()["id"]
        token = issue_token(teacher_id, "teacher")
        for path in ("/api/teacher/courses", "/api/auth/me", "/api/student/courses"):
            resp = client.get(path, headers=auth_header(token))
            assert resp.status_code == 401, path


def test_course_approval_gates_enrollment(client, admin_token, student_token, course_id):
    student = auth_header(student_token)

    assert client.get("/api/student/courses", headers=student).json() == []
    resp = client.post(f"/api/student/courses/{course_id}/enroll", headers=student)
    assert resp.status_code == 404

    approve_course(client, admin_token, course_id)
    listed = client.get("/api/student/courses", headers=student).json()
    assert [c["course_id"] for c in listed] == [course_id]
    assert listed[0]["teacher"]["name"] == "Tess"

    resp = client.post(f"/api/student/courses/{course_id}/enroll", headers=student)
    assert resp.status_code == 201
    assert resp.json()["progress"] == 0

    resp = client.post(f"/api/student/courses/{course_id}/enroll", headers=student)
    assert resp.status_code == 409
    assert resp.json() == {"message": "Already enrolled in this course"}


def test_review_moderation(client, admin_token, student_token, course_id):
    student = auth_header(student_token)
    admin = auth_header(admin_token)
    approve_course(client, admin_token, course_id)

    resp = client.post(f"/api/student/courses/{course_id}/reviews", json={"rating": 5}, headers=student)
    assert resp.status_code == 403

    client.post(f"/api/student/courses/{course_id}/enroll", headers=student)
    resp = client.post(
        f"/api/student/courses/{course_id}/reviews",
        json={"rating": 5, "comment": "Great"},
        headers=student,
    )
    assert resp.status_code == 201
    review_id = resp.json()["review_id"]
    assert resp.json()["status"] == "pending"

    detail = client.get(f"/api/student/courses/{course_id}", headers=student).json()
    assert detail["reviews"] == []
    assert detail["has_reviewed"] is True
    assert detail["stats"]["average_rating"] == 0.0

    resp = client.patch(f"/api/admin/reviews/{review_id}/status", json={"status": "approved"}, headers=admin)
    assert resp.status_code == 200

    detail = client.get(f"/api/student/courses/{course_id}", headers=student).json()
    assert [r["review_id"] for r in detail["reviews"]] == [review_id]
    assert detail["stats"]["average_rating"] == 5.0

    resp = client.post(
        f"/api/student/courses/{course_id}/reviews", json={"rating": 4}, headers=student
    )
    assert resp.status_code == 409


def test_review_rating_out_of_range(client, admin_token, student_token, course_id):
    student = auth_header(student_token)
    approve_course(client, admin_token, course_id)
    client.post(f"/api/student/courses/{course_id}/enroll", headers=student)
    resp = client.post(f"/api/student/courses/{course_id}/reviews", json={"rating": 6}, headers=student)
    assert resp.status_code == 400


def test_editing_approved_course_sends_it_back_to_review(client, admin_token, teacher_token, student_token, course_id):
    approve_course(client, admin_token, course_id)
    resp = client.patch(
        f"/api/teacher/courses/{course_id}",
        json={"title": "Intro, revised"},
        headers=auth_header(teacher_token),
    )
    assert resp.status_code == 200
    assert resp.json()["status"] == "pending"
    assert client.get("/api/student/courses", headers=auth_header(student_token)).json() == []


def test_progress_updates(client, admin_token, student_token, course_id):
    student = auth_header(student_token)
    approve_course(client, admin_token, course_id)
    enrollment_id = client.post(f"/api/student/courses/{course_id}/enroll", headers=student).json()["enrollment_id"]

    resp = client.patch(f"/api/student/enrollments/{enrollment_id}/progress", json={"progress": 100}, headers=student)
    assert resp.status_code == 200
    assert resp.json()["completed"] is True

    resp = client.patch(f"/api/student/courses/{course_id}/progress", json={"progress": 150}, headers=student)
    assert resp.status_code == 400
    assert resp.json() == {"message": "Progress must be between 0 and 100"}


def test_invalid_status_value(client, admin_token, course_id):
    resp = client.patch(
        f"/api/admin/courses/{course_id}/status",
        json={"status": "archived"},
        headers=auth_header(admin_token),
    )
    assert resp.status_code == 400


def test_unknown_course_status_change(client, admin_token):
    resp = client.patch(
        "/api/admin/courses/missing/status",
        json={"status": "approved"},
        headers=auth_header(admin_token),
    )
    assert resp.status_code == 404
    assert resp.json() == {"message": "Course not found"}


def test_teacher_cannot_read_other_teachers_course(client, admin_token, course_id):
    other_id = register(client, "teacher", "other@example.com").json()["id"]
    client.patch(
        f"/api/admin/teachers/{other_id}/status",
        json={"status": "approved"},
        headers=auth_header(admin_token),
    )
    token = login(client, "other@example.com", "teacher").json()["token"]
    resp = client.get(f"/api/teacher/courses/{course_id}", headers=auth_header(token))
    assert resp.status_code == 403


def test_dashboards(client, admin_token, teacher_token, course_id):
    stats = client.get("/api/admin/stats", headers=auth_header(admin_token)).json()
    assert stats["pending_courses"] == 1
    assert stats["total_teachers"] == 1

    dashboard = client.get("/api/teacher/stats", headers=auth_header(teacher_token)).json()
    assert dashboard["stats"]["total_courses"] == 1
    assert dashboard["recent_courses"][0]["students"] == 0


def test_profile_update(client, student_token):
    resp = client.patch(
        "/api/student/profile",
        json={"name": "Stuart", "bio": "Hi", "role": "admin"},
        headers=auth_header(student_token),
    )
    assert resp.status_code == 200
    assert resp.json()["name"] == "Stuart"
    assert resp.json()["role"] == "student"


def test_database_unavailable_is_503(client, admin_token):
    def broken_manager():
        raise OperationalError("SELECT 1", {}, Exception("database is locked"))

    app.dependency_overrides[get_course_manager] = broken_manager
    try:
        resp = client.get("/api/admin/courses", headers=auth_header(admin_token))
    finally:
        app.dependency_overrides.clear()
    assert resp.status_code == 503
    assert "message" in resp.json()


def test_admin_profile(client, admin_token):
    resp = client.patch(
        "/api/admin/profile", json={"bio": "Moderator"}, headers=auth_header(admin_token)
    )
    assert resp.status_code == 200
    assert resp.json()["bio"] == "Moderator"
    assert client.get("/api/admin/profile", headers=auth_header(admin_token)).json()["name"] == "Ada"


def test_boolean_progress_and_rating_are_rejected(client, admin_token, student_token, course_id):
    student = auth_header(student_token)
    approve_course(client, admin_token, course_id)
    client.post(f"/api/student/courses/{course_id}/enroll", headers=student)

    resp = client.patch(f"/api/student/courses/{course_id}/progress", json={"progress": True}, headers=student)
    assert resp.status_code == 400
    assert "progress" in resp.json()["message"]

    resp = client.post(f"/api/student/courses/{course_id}/reviews", json={"rating": True}, headers=student)
    assert resp.status_code == 400
    assert "rating" in resp.json()["message"]

    detail = client.get(f"/api/student/courses/{course_id}", headers=student).json()
    assert detail["enrollment"]["progress"] == 0
    assert detail["has_reviewed"] is False
