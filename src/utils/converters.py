"""Conversions between SQLAlchemy models and pydantic schemas."""

from typing import Optional

from models.course import CourseModel
from models.enrollment import EnrollmentModel
from models.review import ReviewModel
from models.user import UserModel
from schemas.course import Course, CourseRef
from schemas.enrollment import Enrollment
from schemas.review import Review
from schemas.user import User, UserRef


def user_to_model(user: User) -> UserModel:
    return UserModel(**user.model_dump())


def model_to_user(model: UserModel) -> User:
    return User(
        user_id=model.user_id,
        name=model.name,
        email=model.email,
        password_hash=model.password_hash,
        role=model.role,
        status=model.status,
        bio=model.bio,
        avatar_url=model.avatar_url,
        create_at=model.create_at,
        update_at=model.update_at,
    )


def model_to_user_ref(model: Optional[UserModel]) -> Optional[UserRef]:
    if model is None:
        return None
    return UserRef(
        user_id=model.user_id,
        name=model.name,
        email=model.email,
        bio=model.bio,
        avatar_url=model.avatar_url,
    )


def model_to_course(model: CourseModel) -> Course:
    return Course(
        course_id=model.course_id,
        title=model.title,
        description=model.description,
        teacher_id=model.teacher_id,
        status=model.status,
        create_at=model.create_at,
        update_at=model.update_at,
    )


def model_to_course_ref(model: Optional[CourseModel]) -> Optional[CourseRef]:
    if model is None:
        return None
    return CourseRef(
        course_id=model.course_id,
        title=model.title,
        description=model.description,
        status=model.status,
    )


def model_to_enrollment(model: EnrollmentModel) -> Enrollment:
    return Enrollment(
        enrollment_id=model.enrollment_id,
        student_id=model.student_id,
        course_id=model.course_id,
        progress=model.progress,
        completed=model.completed,
        joined_at=model.joined_at,
        last_accessed_at=model.last_accessed_at,
    )


def model_to_review(model: ReviewModel) -> Review:
    return Review(
        review_id=model.review_id,
        course_id=model.course_id,
        student_id=model.student_id,
        rating=model.rating,
        comment=model.comment,
        status=model.status,
        create_at=model.create_at,
        update_at=model.update_at,
    )
