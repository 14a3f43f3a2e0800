"""Review management utilities."""

import logging
import uuid
from datetime import datetime
from typing import Iterable, List, Optional

import pytz
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from core.exceptions import (
    DuplicateReviewError,
    ForbiddenError,
    InvalidInputError,
    NotFoundError,
)
from models.course import CourseModel
from models.enrollment import EnrollmentModel
from models.review import ReviewModel
from models.user import UserModel
from schemas.review import Review, ReviewWithRefs
from schemas.user import User
from utils.approval import REVIEW_WORKFLOW, ApprovalStatus
from utils.converters import model_to_course_ref, model_to_review, model_to_user_ref
from utils.course_manager import CourseManager

logger = logging.getLogger(__name__)

MIN_RATING = 1
MAX_RATING = 5


def validate_rating(rating) -> int:
    if (
        isinstance(rating, bool)
        or not isinstance(rating, int)
        or not MIN_RATING <= rating <= MAX_RATING
    ):
        raise InvalidInputError("Rating must be between 1 and 5")
    return rating


class ReviewManager:
    """Manages student reviews and their moderation."""

    workflow = REVIEW_WORKFLOW

    def __init__(self, db: Session):
        self.db = db
        self.course_manager = CourseManager(db)

    def _find(self, student_id: str, course_id: str) -> Optional[ReviewModel]:
        return (
            self.db.query(ReviewModel)
            .filter(
                ReviewModel.student_id == student_id,
                ReviewModel.course_id == course_id,
            )
            .first()
        )

    def has_reviewed(self, student_id: str, course_id: str) -> bool:
        return self._find(student_id, course_id) is not None

    def submit_review(
        self,
        actor: User,
        course_id: str,
        rating: int,
        comment: Optional[str] = None,
    ) -> Review:
        """Submit a review for a course the acting student is enrolled in.

        New reviews always start pending and stay hidden from the public
        course page until an admin approves them.

        Args:
            actor: The acting user, must be a student.
            course_id: Reviewed course.
            rating: Integer from 1 to 5.
            comment: Optional free text.

        Returns:
            The created Review.

        Raises:
            ForbiddenError: If the actor is not a student or is not enrolled.
            InvalidInputError: If the rating is outside 1..5.
            NotFoundError: If the course does not exist or is not approved.
            DuplicateReviewError: If the student already reviewed the course.
        """
        if actor.role != "student":
            raise ForbiddenError("Only students can review courses")
        validate_rating(rating)
        self.course_manager.get_approved_course(course_id)

        enrolled = (
            self.db.query(EnrollmentModel.enrollment_id)
            .filter(
                EnrollmentModel.student_id == actor.user_id,
                EnrollmentModel.course_id == course_id,
            )
            .first()
        )
        if not enrolled:
            raise ForbiddenError("You must be enrolled in the course to review it")

        if self._find(actor.user_id, course_id) is not None:
            raise DuplicateReviewError()

        now = datetime.now(pytz.utc).isoformat()
        model = ReviewModel(
            review_id=str(uuid.uuid4()),
            course_id=course_id,
            student_id=actor.user_id,
            rating=rating,
            comment=comment,
            status=ApprovalStatus.PENDING.value,
            create_at=now,
            update_at=now,
        )
        try:
            self.db.add(model)
            self.db.commit()
        except IntegrityError as e:
            self.db.rollback()
            raise DuplicateReviewError() from e
        self.db.refresh(model)

        logger.info("Student %s reviewed course %s (pending)", actor.user_id, course_id)
        return model_to_review(model)

    def _query_with_refs(self):
        return (
            self.db.query(ReviewModel, UserModel, CourseModel)
            .outerjoin(UserModel, UserModel.user_id == ReviewModel.student_id)
            .outerjoin(CourseModel, CourseModel.course_id == ReviewModel.course_id)
        )

    @staticmethod
    def _build(rows) -> List[ReviewWithRefs]:
        return [
            ReviewWithRefs(
                **model_to_review(review).model_dump(),
                student=model_to_user_ref(student),
                course=model_to_course_ref(course),
            )
            for review, student, course in rows
        ]

    def list_reviews(self, status: Optional[str] = None) -> List[ReviewWithRefs]:
        """List reviews for moderation, newest first."""
        query = self._query_with_refs()
        if status:
            query = query.filter(ReviewModel.status == status)
        return self._build(query.order_by(ReviewModel.create_at.desc()).all())

    def list_for_student(self, student_id: str) -> List[ReviewWithRefs]:
        """List every review the student wrote, whatever its status."""
        query = self._query_with_refs().filter(ReviewModel.student_id == student_id)
        return self._build(query.order_by(ReviewModel.create_at.desc()).all())

    def list_for_courses(
        self, course_ids: Iterable[str], approved_only: bool = True
    ) -> List[ReviewWithRefs]:
        course_ids = list(course_ids)
        if not course_ids:
            return []
        query = self._query_with_refs().filter(ReviewModel.course_id.in_(course_ids))
        if approved_only:
            query = query.filter(ReviewModel.status == ApprovalStatus.APPROVED.value)
        return self._build(query.order_by(ReviewModel.create_at.desc()).all())

    def list_approved_for_course(self, course_id: str) -> List[ReviewWithRefs]:
        return self.list_for_courses([course_id], approved_only=True)

    def set_status(self, actor: User, review_id: str, status: str) -> ReviewWithRefs:
        """Approve or reject a review.

        Raises:
            ForbiddenError: If the actor is not an admin.
            InvalidStatusError: If the status is not a decision value.
            NotFoundError: If the review does not exist.
        """
        self.workflow.check_decider(actor)
        self.workflow.parse_decision(status)
        model = (
            self.db.query(ReviewModel)
            .filter(ReviewModel.review_id == review_id)
            .first()
        )
        if not model:
            raise NotFoundError("Review", review_id)

        previous = model.status
        model.status = self.workflow.decide(actor, status).value
        model.update_at = datetime.now(pytz.utc).isoformat()
        self.db.commit()
        logger.info(
            "Review %s status %s -> %s by admin %s",
            review_id, previous, model.status, actor.user_id,
        )
        rows = self._query_with_refs().filter(ReviewModel.review_id == review_id).all()
        return self._build(rows)[0]
