"""Course management utilities."""

import logging
import uuid
from datetime import datetime
from typing import List, Optional

import pytz
from sqlalchemy.orm import Session

from core.exceptions import ForbiddenError, InvalidInputError, NotFoundError
from models.course import CourseModel
from models.user import UserModel
from schemas.course import Course, CourseWithTeacher
from schemas.user import User
from utils.approval import COURSE_WORKFLOW, ApprovalStatus
from utils.converters import model_to_course, model_to_user_ref

logger = logging.getLogger(__name__)


def build_course_with_teacher(
    model: CourseModel, teacher: Optional[UserModel]
) -> CourseWithTeacher:
    return CourseWithTeacher(
        **model_to_course(model).model_dump(),
        teacher=model_to_user_ref(teacher),
    )


class CourseManager:
    """Manages course authoring, visibility and admin decisions."""

    workflow = COURSE_WORKFLOW

    def __init__(self, db: Session):
        self.db = db

    def create_course(
        self, actor: User, title: str, description: Optional[str] = None
    ) -> Course:
        """Create a pending course owned by the acting teacher."""
        if actor.role != "teacher":
            raise ForbiddenError("Only teachers can create courses")
        if actor.status != ApprovalStatus.APPROVED.value:
            raise ForbiddenError("Your teacher account is pending approval")
        if not title or not title.strip():
            raise InvalidInputError("Title is required")

        now = datetime.now(pytz.utc).isoformat()
        model = CourseModel(
            course_id=str(uuid.uuid4()),
            title=title.strip(),
            description=description,
            teacher_id=actor.user_id,
            status=ApprovalStatus.PENDING.value,
            create_at=now,
            update_at=now,
        )
        self.db.add(model)
        self.db.commit()
        self.db.refresh(model)
        logger.info("Teacher %s created course %s", actor.user_id, model.course_id)
        return model_to_course(model)

    def _get_model(self, course_id: str) -> CourseModel:
        model = (
            self.db.query(CourseModel)
            .filter(CourseModel.course_id == course_id)
            .first()
        )
        if not model:
            raise NotFoundError("Course", course_id)
        return model

    def get_course(self, course_id: str) -> Course:
        return model_to_course(self._get_model(course_id))

    def get_course_with_teacher(self, course_id: str) -> CourseWithTeacher:
        row = (
            self.db.query(CourseModel, UserModel)
            .outerjoin(UserModel, UserModel.user_id == CourseModel.teacher_id)
            .filter(CourseModel.course_id == course_id)
            .first()
        )
        if not row:
            raise NotFoundError("Course", course_id)
        return build_course_with_teacher(*row)

    def get_owned_course(self, actor: User, course_id: str) -> CourseModel:
        """Load a course the acting teacher owns.

        Raises:
            NotFoundError: If the course does not exist.
            ForbiddenError: If the actor is not the owning teacher.
        """
        model = self._get_model(course_id)
        if model.teacher_id != actor.user_id:
            raise ForbiddenError("You can only access your own courses")
        return model

    def get_approved_course(self, course_id: str) -> CourseModel:
        """Load a course visible to students.

        Raises:
            NotFoundError: If the course does not exist or is not approved.
        """
        model = (
            self.db.query(CourseModel)
            .filter(
                CourseModel.course_id == course_id,
                CourseModel.status == ApprovalStatus.APPROVED.value,
            )
            .first()
        )
        if not model:
            raise NotFoundError("Course", course_id)
        return model

    def list_courses(self, status: Optional[str] = None) -> List[CourseWithTeacher]:
        """List courses with their teacher, newest first."""
        query = self.db.query(CourseModel, UserModel).outerjoin(
            UserModel, UserModel.user_id == CourseModel.teacher_id
        )
        if status:
            query = query.filter(CourseModel.status == status)
        rows = query.order_by(CourseModel.create_at.desc()).all()
        return [build_course_with_teacher(course, teacher) for course, teacher in rows]

    def list_approved_courses(self) -> List[CourseWithTeacher]:
        return self.list_courses(status=ApprovalStatus.APPROVED.value)

    def list_courses_for_teacher(self, teacher_id: str) -> List[Course]:
        models = (
            self.db.query(CourseModel)
            .filter(CourseModel.teacher_id == teacher_id)
            .order_by(CourseModel.create_at.desc())
            .all()
        )
        return [model_to_course(m) for m in models]

    def update_course(
        self,
        actor: User,
        course_id: str,
        title: Optional[str] = None,
        description: Optional[str] = None,
    ) -> Course:
        """Edit a course's content as its owner.

        An approved course whose content actually changes is resubmitted for
        review (status back to pending). Pending and rejected courses keep
        their status.

        Args:
            actor: The acting user.
            course_id: Course to edit.
            title: New title, if changing.
            description: New description, if changing.

        Returns:
            Updated Course.

        Raises:
            NotFoundError: If the course does not exist.
            ForbiddenError: If the actor does not own the course.
            InvalidInputError: If the new title is blank.
        """
        model = self.get_owned_course(actor, course_id)
        if title is not None and not title.strip():
            raise InvalidInputError("Title cannot be empty")

        changed = False
        if title is not None and title.strip() != model.title:
            model.title = title.strip()
            changed = True
        if description is not None and description != model.description:
            model.description = description
            changed = True

        if changed:
            previous = model.status
            model.status = self.workflow.resubmit(previous).value
            model.update_at = datetime.now(pytz.utc).isoformat()
            self.db.commit()
            self.db.refresh(model)
            if previous != model.status:
                logger.info("Course %s resubmitted for review after edit", course_id)
        return model_to_course(model)

    def set_status(self, actor: User, course_id: str, status: str) -> CourseWithTeacher:
        """Approve or reject a course.

        Enrollments and reviews of a course that is rejected are kept; the
        course only disappears from browsing and enrollment.

        Raises:
            ForbiddenError: If the actor is not an admin.
            InvalidStatusError: If the status is not a decision value.
            NotFoundError: If the course does not exist.
        """
        self.workflow.check_decider(actor)
        self.workflow.parse_decision(status)
        model = self._get_model(course_id)

        previous = model.status
        model.status = self.workflow.decide(actor, status).value
        model.update_at = datetime.now(pytz.utc).isoformat()
        self.db.commit()
        logger.info(
            "Course %s status %s -> %s by admin %s",
            course_id, previous, model.status, actor.user_id,
        )
        return self.get_course_with_teacher(course_id)
