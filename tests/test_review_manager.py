import pytest

from core.exceptions import (
    DuplicateReviewError,
    ForbiddenError,
    InvalidInputError,
    InvalidStatusError,
    NotFoundError,
)
from utils.enrollment_manager import EnrollmentManager
from utils.review_manager import ReviewManager

from conftest import make_course


@pytest.fixture
def enrolled(db, student, approved_course):
    EnrollmentManager(db).enroll(student, approved_course.course_id)
    return approved_course


def test_review_starts_pending(db, student, enrolled):
    review = ReviewManager(db).submit_review(student, enrolled.course_id, 4, "Nice")
    assert review.status == "pending"
    assert review.rating == 4


def test_enrollment_required(db, student, approved_course):
    with pytest.raises(ForbiddenError) as exc_info:
        ReviewManager(db).submit_review(student, approved_course.course_id, 5)
    assert "enrolled" in exc_info.value.message


@pytest.mark.parametrize("rating", [0, 6, -3])
def test_rating_range(db, student, enrolled, rating):
    with pytest.raises(InvalidInputError):
        ReviewManager(db).submit_review(student, enrolled.course_id, rating)


def test_pending_course_cannot_be_reviewed(db, teacher, student):
    course = make_course(db, teacher, approved=False)
    with pytest.raises(NotFoundError):
        ReviewManager(db).submit_review(student, course.course_id, 5)


def test_only_students_review(db, teacher, approved_course):
    with pytest.raises(ForbiddenError):
        ReviewManager(db).submit_review(teacher, approved_course.course_id, 5)


def test_one_review_per_course(db, student, enrolled):
    manager = ReviewManager(db)
    manager.submit_review(student, enrolled.course_id, 5)
    with pytest.raises(DuplicateReviewError):
        manager.submit_review(student, enrolled.course_id, 3)


def test_concurrent_duplicate_stopped_by_unique_constraint(db, student, enrolled, monkeypatch):
    ReviewManager(db).submit_review(student, enrolled.course_id, 5)
    racing = ReviewManager(db)
    monkeypatch.setattr(racing, "_find", lambda student_id, course_id: None)
    with pytest.raises(DuplicateReviewError):
        racing.submit_review(student, enrolled.course_id, 2)


def test_only_approved_reviews_are_public(db, admin, student, enrolled):
    manager = ReviewManager(db)
    review = manager.submit_review(student, enrolled.course_id, 5)
    assert manager.list_approved_for_course(enrolled.course_id) == []

    approved = manager.set_status(admin, review.review_id, "approved")
    assert approved.status == "approved"
    assert approved.student.user_id == student.user_id
    assert approved.course.course_id == enrolled.course_id
    public = manager.list_approved_for_course(enrolled.course_id)
    assert [r.review_id for r in public] == [review.review_id]


def test_author_still_sees_rejected_review(db, admin, student, enrolled):
    manager = ReviewManager(db)
    review = manager.submit_review(student, enrolled.course_id, 1)
    manager.set_status(admin, review.review_id, "rejected")
    own = manager.list_for_student(student.user_id)
    assert [r.status for r in own] == ["rejected"]
    assert manager.list_reviews(status="pending") == []


class TestSetStatus:
    def test_non_admin(self, db, student, enrolled):
        manager = ReviewManager(db)
        review = manager.submit_review(student, enrolled.course_id, 5)
        with pytest.raises(ForbiddenError):
            manager.set_status(student, review.review_id, "approved")

    def test_invalid_status(self, db, admin):
        with pytest.raises(InvalidStatusError):
            ReviewManager(db).set_status(admin, "missing", "pending")

    def test_unknown_review(self, db, admin):
        with pytest.raises(NotFoundError):
            ReviewManager(db).set_status(admin, "missing", "approved")
