import os
import uuid

# Configure before any application module reads the environment
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["JWT_SECRET_KEY"] = "test-secret"
os.environ.pop("ADMIN_TOKEN", None)

import pytest
from fastapi.testclient import TestClient

from app import app
from core.database import SessionLocal, engine
from models.base import Base
from utils.course_manager import CourseManager
from utils.user_manager import UserManager

PASSWORD = "s3cret-pass"


@pytest.fixture(autouse=True)
def reset_database():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield


@pytest.fixture
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client():
    return TestClient(app)


def make_user(db, role, approved=True, name=None, email=None):
    """Create a user directly through UserManager; teachers approved on request."""
    manager = UserManager(db)
    user = manager.create_user(
        name=name or f"{role} user",
        email=email or f"{role}-{uuid.uuid4().hex[:8]}@example.com",
        password=PASSWORD,
        role=role,
    )
    if role == "teacher" and approved:
        admin = manager.get_user_by_email("root@example.com") or manager.create_user(
            name="root", email="root@example.com", password=PASSWORD, role="admin"
        )
        user = manager.set_teacher_status(admin, user.user_id, "approved")
    return user


def make_course(db, teacher, approved=True, title="Intro to Python"):
    manager = CourseManager(db)
    course = manager.create_course(teacher, title, "Basics")
    if approved:
        admin = UserManager(db).get_user_by_email("root@example.com")
        manager.set_status(admin, course.course_id, "approved")
        course = manager.get_course(course.course_id)
    return course


@pytest.fixture
def admin(db):
    return UserManager(db).get_user_by_email("root@example.com") or make_user(
        db, "admin", email="root@example.com", name="root"
    )


@pytest.fixture
def teacher(db, admin):
    return make_user(db, "teacher", email="teacher@example.com", name="Tess")


@pytest.fixture
def student(db):
    return make_user(db, "student", email="student@example.com", name="Stu")


@pytest.fixture
def approved_course(db, teacher, admin):
    return make_course(db, teacher)


# --- HTTP helpers ---


def auth_header(token):
    return {"Authorization": f"Bearer {token}"}


def register(client, role, email, name="Someone", password=PASSWORD):
    return client.post(
        "/api/auth/register",
        json={"name": name, "email": email, "password": password, "role": role},
    )


def login(client, email, role, password=PASSWORD):
    return client.post(
        "/api/auth/login",
        json={"email": email, "password": password, "role": role},
    )


def register_and_login(client, role, email, name="Someone"):
    resp = register(client, role, email, name=name)
    assert resp.status_code == 201, resp.text
    resp = login(client, email, role)
    assert resp.status_code == 200, resp.text
    return resp.json()["token"]
