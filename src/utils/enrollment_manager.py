"""Enrollment management utilities."""

import logging
import uuid
from datetime import datetime
from typing import List, Optional

import pytz
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from core.exceptions import (
    DuplicateEnrollmentError,
    ForbiddenError,
    InvalidInputError,
    NotFoundError,
)
from models.course import CourseModel
from models.enrollment import EnrollmentModel
from models.user import UserModel
from schemas.enrollment import Enrollment, EnrollmentWithCourse, EnrollmentWithStudent
from schemas.user import User
from utils.approval import ApprovalStatus
from utils.converters import model_to_enrollment, model_to_user_ref
from utils.course_manager import CourseManager, build_course_with_teacher

logger = logging.getLogger(__name__)

MIN_PROGRESS = 0
MAX_PROGRESS = 100


def validate_progress(progress) -> int:
    """Return progress if it is an integer in [0, 100].

    Raises:
        InvalidInputError: Otherwise.
    """
    if (
        isinstance(progress, bool)
        or not isinstance(progress, int)
        or not MIN_PROGRESS <= progress <= MAX_PROGRESS
    ):
        raise InvalidInputError("Progress must be between 0 and 100")
    return progress


class EnrollmentManager:
    """Manages student enrollments and their progress."""

    def __init__(self, db: Session):
        self.db = db
        self.course_manager = CourseManager(db)

    def _find(self, student_id: str, course_id: str) -> Optional[EnrollmentModel]:
        return (
            self.db.query(EnrollmentModel)
            .filter(
                EnrollmentModel.student_id == student_id,
                EnrollmentModel.course_id == course_id,
            )
            .first()
        )

    def get_enrollment_for(self, student_id: str, course_id: str) -> Optional[Enrollment]:
        model = self._find(student_id, course_id)
        if model:
            return model_to_enrollment(model)
        return None

    def enroll(self, actor: User, course_id: str) -> Enrollment:
        """Enroll the acting student in an approved course.

        Args:
            actor: The acting user, must be a student.
            course_id: Course to join.

        Returns:
            The created Enrollment.

        Raises:
            ForbiddenError: If the actor is not a student.
            NotFoundError: If the course does not exist or is not approved.
            DuplicateEnrollmentError: If the student is already enrolled.
        """
        if actor.role != "student":
            raise ForbiddenError("Only students can enroll in courses")
        self.course_manager.get_approved_course(course_id)

        if self._find(actor.user_id, course_id) is not None:
            raise DuplicateEnrollmentError()

        now = datetime.now(pytz.utc).isoformat()
        model = EnrollmentModel(
            enrollment_id=str(uuid.uuid4()),
            student_id=actor.user_id,
            course_id=course_id,
            progress=0,
            completed=False,
            joined_at=now,
            last_accessed_at=now,
        )
        # Concurrent duplicates are stopped by uq_enrollments_student_course
        try:
            self.db.add(model)
            self.db.commit()
        except IntegrityError as e:
            self.db.rollback()
            raise DuplicateEnrollmentError() from e
        self.db.refresh(model)

        logger.info("Student %s enrolled in course %s", actor.user_id, course_id)
        return model_to_enrollment(model)

    def list_for_student(
        self, student_id: str, approved_only: bool = True
    ) -> List[EnrollmentWithCourse]:
        """List a student's enrollments with course and teacher, newest first.

        Args:
            student_id: The student's user_id.
            approved_only: Hide enrollments whose course is no longer approved.
        """
        query = (
            self.db.query(EnrollmentModel, CourseModel, UserModel)
            .join(CourseModel, CourseModel.course_id == EnrollmentModel.course_id)
            .outerjoin(UserModel, UserModel.user_id == CourseModel.teacher_id)
            .filter(EnrollmentModel.student_id == student_id)
        )
        if approved_only:
            query = query.filter(CourseModel.status == ApprovalStatus.APPROVED.value)
        rows = query.order_by(EnrollmentModel.joined_at.desc()).all()
        return [
            EnrollmentWithCourse(
                **model_to_enrollment(enrollment).model_dump(),
                course=build_course_with_teacher(course, teacher),
            )
            for enrollment, course, teacher in rows
        ]

    def list_for_course(self, course_id: str) -> List[EnrollmentWithStudent]:
        rows = (
            self.db.query(EnrollmentModel, UserModel)
            .outerjoin(UserModel, UserModel.user_id == EnrollmentModel.student_id)
            .filter(EnrollmentModel.course_id == course_id)
            .order_by(EnrollmentModel.joined_at.desc())
            .all()
        )
        return [
            EnrollmentWithStudent(
                **model_to_enrollment(enrollment).model_dump(),
                student=model_to_user_ref(student),
            )
            for enrollment, student in rows
        ]

    def _apply_progress(self, model: EnrollmentModel, progress: int) -> Enrollment:
        model.progress = progress
        model.completed = progress >= MAX_PROGRESS
        model.last_accessed_at = datetime.now(pytz.utc).isoformat()
        self.db.commit()
        self.db.refresh(model)
        logger.info(
            "Enrollment %s progress set to %s (completed=%s)",
            model.enrollment_id, progress, model.completed,
        )
        return model_to_enrollment(model)

    def update_progress(self, actor: User, enrollment_id: str, progress: int) -> Enrollment:
        """Set progress on an enrollment the acting student owns.

        Raises:
            InvalidInputError: If progress is outside 0..100.
            NotFoundError: If the enrollment does not exist.
            ForbiddenError: If the enrollment belongs to another user.
        """
        validate_progress(progress)
        model = (
            self.db.query(EnrollmentModel)
            .filter(EnrollmentModel.enrollment_id == enrollment_id)
            .first()
        )
        if not model:
            raise NotFoundError("Enrollment", enrollment_id)
        if model.student_id != actor.user_id:
            raise ForbiddenError("You can only update your own enrollments")
        return self._apply_progress(model, progress)

    def update_progress_for_course(
        self, actor: User, course_id: str, progress: int
    ) -> Enrollment:
        """Set progress on the acting student's enrollment in a course.

        Raises:
            InvalidInputError: If progress is outside 0..100.
            NotFoundError: If the student is not enrolled in the course.
        """
        validate_progress(progress)
        model = self._find(actor.user_id, course_id)
        if not model:
            raise NotFoundError("Enrollment", course_id)
        return self._apply_progress(model, progress)
