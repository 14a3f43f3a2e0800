from datetime import timedelta

import pytest

from core.exceptions import ForbiddenError, UnauthenticatedError
from core.security import create_access_token, decode_access_token, issue_token
from utils.access_control import authenticate, authorize
from utils.user_manager import UserManager

from conftest import make_user


def test_token_round_trip_carries_subject_and_role():
    payload = decode_access_token(issue_token("user-1", "teacher"))
    assert payload["sub"] == "user-1"
    assert payload["role"] == "teacher"
    assert "exp" in payload


def test_authenticate_resolves_approved_user(db, student):
    user = authenticate(issue_token(student.user_id, "student"), UserManager(db))
    assert user.user_id == student.user_id


@pytest.mark.parametrize("token", [None, ""])
def test_missing_token(db, token):
    with pytest.raises(UnauthenticatedError) as exc_info:
        authenticate(token, UserManager(db))
    assert exc_info.value.message == "No token, authorization denied"


def test_garbage_token(db):
    with pytest.raises(UnauthenticatedError):
        authenticate("not-a-jwt", UserManager(db))


def test_expired_token(db, student):
    token = create_access_token(
        {"sub": student.user_id, "role": "student"}, expires_delta=timedelta(minutes=-5)
    )
    with pytest.raises(UnauthenticatedError):
        authenticate(token, UserManager(db))


def test_token_without_subject(db):
    with pytest.raises(UnauthenticatedError):
        authenticate(create_access_token({"role": "admin"}), UserManager(db))


def test_unknown_subject(db):
    with pytest.raises(UnauthenticatedError) as exc_info:
        authenticate(issue_token("ghost", "student"), UserManager(db))
    assert exc_info.value.message == "User not found"


def test_pending_teacher_is_refused_everywhere(db):
    teacher = make_user(db, "teacher", approved=False)
    with pytest.raises(UnauthenticatedError) as exc_info:
        authenticate(issue_token(teacher.user_id, "teacher"), UserManager(db))
    assert exc_info.value.message == "Your account is not approved"


def test_authorize_accepts_allowed_role(student):
    assert authorize(student, ("student",)) is student


def test_authorize_rejects_other_roles(student):
    with pytest.raises(ForbiddenError):
        authorize(student, ("admin", "teacher"))
