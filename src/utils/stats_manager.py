"""Read-side aggregation: ratings, enrollment counts, dashboards and detail views.

Nothing here mutates state. Every figure is recomputed per call; empty inputs
yield zero rather than failing, and only an unknown referenced entity raises
NotFoundError.
"""

from typing import Dict, Iterable, List

from sqlalchemy import func
from sqlalchemy.orm import Session

from config import RECENT_COURSES_LIMIT
from models.course import CourseModel
from models.enrollment import EnrollmentModel
from models.review import ReviewModel
from models.user import UserModel
from schemas.course import CourseWithEnrollmentCount, CourseWithStats
from schemas.stats import (
    AdminDashboardStats,
    CourseStats,
    StudentCourseDetail,
    StudentDetails,
    StudentDetailStats,
    TeacherCourseDetail,
    TeacherDashboard,
    TeacherDashboardStats,
    TeacherDetails,
    TeacherDetailStats,
)
from schemas.user import User
from utils.approval import ApprovalStatus
from utils.course_manager import CourseManager
from utils.enrollment_manager import EnrollmentManager
from utils.review_manager import ReviewManager
from utils.user_manager import UserManager

APPROVED = ApprovalStatus.APPROVED.value
PENDING = ApprovalStatus.PENDING.value


class StatsManager:
    """Computes derived statistics over users, courses, enrollments and reviews."""

    def __init__(self, db: Session):
        self.db = db
        self.user_manager = UserManager(db)
        self.course_manager = CourseManager(db)
        self.enrollment_manager = EnrollmentManager(db)
        self.review_manager = ReviewManager(db)

    # --- Primitive aggregates ---

    def _average_rating(self, course_ids: Iterable[str]) -> float:
        """Mean rating of approved reviews over the given courses, 0.0 if none."""
        course_ids = list(course_ids)
        if not course_ids:
            return 0.0
        avg = (
            self.db.query(func.avg(ReviewModel.rating))
            .filter(
                ReviewModel.course_id.in_(course_ids),
                ReviewModel.status == APPROVED,
            )
            .scalar()
        )
        return float(avg) if avg is not None else 0.0

    def course_average_rating(self, course_id: str) -> float:
        """Average approved rating of a course.

        Raises:
            NotFoundError: If the course does not exist.
        """
        self.course_manager.get_course(course_id)
        return self._average_rating([course_id])

    def teacher_average_rating(self, teacher_id: str) -> float:
        """Average approved rating across every course of a teacher.

        Raises:
            NotFoundError: If no teacher with this id exists.
        """
        self.user_manager.get_user_with_role(teacher_id, "teacher")
        return self._average_rating(self._course_ids_for_teacher(teacher_id))

    def _course_ids_for_teacher(self, teacher_id: str) -> List[str]:
        rows = (
            self.db.query(CourseModel.course_id)
            .filter(CourseModel.teacher_id == teacher_id)
            .all()
        )
        return [row[0] for row in rows]

    def enrollment_count(self, course_id: str) -> int:
        return (
            self.db.query(func.count(EnrollmentModel.enrollment_id))
            .filter(EnrollmentModel.course_id == course_id)
            .scalar()
        )

    def enrollment_counts(self, course_ids: Iterable[str]) -> Dict[str, int]:
        """Enrollment count per course id; courses without enrollments map to 0."""
        course_ids = list(course_ids)
        counts = {course_id: 0 for course_id in course_ids}
        if not course_ids:
            return counts
        rows = (
            self.db.query(EnrollmentModel.course_id, func.count(EnrollmentModel.enrollment_id))
            .filter(EnrollmentModel.course_id.in_(course_ids))
            .group_by(EnrollmentModel.course_id)
            .all()
        )
        counts.update({course_id: count for course_id, count in rows})
        return counts

    def _count(self, model, *criteria) -> int:
        return self.db.query(func.count()).select_from(model).filter(*criteria).scalar()

    def _course_stats(self, course_id: str, approved_reviews: int) -> CourseStats:
        return CourseStats(
            total_enrollments=self.enrollment_count(course_id),
            total_reviews=approved_reviews,
            average_rating=self._average_rating([course_id]),
        )

    # --- Dashboards ---

    def admin_dashboard(self) -> AdminDashboardStats:
        return AdminDashboardStats(
            total_students=self._count(UserModel, UserModel.role == "student"),
            total_teachers=self._count(UserModel, UserModel.role == "teacher"),
            total_admins=self._count(UserModel, UserModel.role == "admin"),
            total_courses=self._count(CourseModel),
            pending_teachers=self._count(
                UserModel, UserModel.role == "teacher", UserModel.status == PENDING
            ),
            pending_courses=self._count(CourseModel, CourseModel.status == PENDING),
            pending_reviews=self._count(ReviewModel, ReviewModel.status == PENDING),
        )

    def teacher_dashboard(self, actor: User) -> TeacherDashboard:
        """Catalog-wide figures for the acting teacher plus their recent courses."""
        courses = self.course_manager.list_courses_for_teacher(actor.user_id)
        course_ids = [c.course_id for c in courses]
        counts = self.enrollment_counts(course_ids)

        recent = [
            CourseWithStats(
                **course.model_dump(),
                students=counts[course.course_id],
                rating=self._average_rating([course.course_id]),
            )
            for course in courses[:RECENT_COURSES_LIMIT]
        ]
        stats = TeacherDashboardStats(
            total_courses=len(courses),
            pending_courses=sum(1 for c in courses if c.status == PENDING),
            approved_courses=sum(1 for c in courses if c.status == APPROVED),
            total_students=sum(counts.values()),
            average_rating=self._average_rating(course_ids),
        )
        return TeacherDashboard(stats=stats, recent_courses=recent)

    # --- Detail views ---

    def teacher_course_detail(self, actor: User, course_id: str) -> TeacherCourseDetail:
        """Owner view of one course: enrollments, approved reviews and stats.

        Raises:
            NotFoundError: If the course does not exist.
            ForbiddenError: If the actor does not own it.
        """
        self.course_manager.get_owned_course(actor, course_id)
        course = self.course_manager.get_course_with_teacher(course_id)
        reviews = self.review_manager.list_approved_for_course(course_id)
        return TeacherCourseDetail(
            course=course,
            enrollments=self.enrollment_manager.list_for_course(course_id),
            reviews=reviews,
            stats=self._course_stats(course_id, len(reviews)),
        )

    def student_course_detail(self, actor: User, course_id: str) -> StudentCourseDetail:
        """Public view of an approved course with the caller's own state.

        Raises:
            NotFoundError: If the course does not exist or is not approved.
        """
        self.course_manager.get_approved_course(course_id)
        course = self.course_manager.get_course_with_teacher(course_id)
        reviews = self.review_manager.list_approved_for_course(course_id)
        enrollment = self.enrollment_manager.get_enrollment_for(actor.user_id, course_id)
        return StudentCourseDetail(
            course=course,
            reviews=reviews,
            is_enrolled=enrollment is not None,
            has_reviewed=self.review_manager.has_reviewed(actor.user_id, course_id),
            enrollment=enrollment,
            stats=self._course_stats(course_id, len(reviews)),
        )

    def teacher_details(self, teacher_id: str) -> TeacherDetails:
        """Admin view of a teacher, their courses and the reviews they received.

        Raises:
            NotFoundError: If no teacher with this id exists.
        """
        teacher = self.user_manager.get_user_with_role(teacher_id, "teacher")
        courses = self.course_manager.list_courses_for_teacher(teacher_id)
        course_ids = [c.course_id for c in courses]
        counts = self.enrollment_counts(course_ids)

        return TeacherDetails(
            teacher=teacher.public(),
            courses=[
                CourseWithEnrollmentCount(
                    **course.model_dump(), enrollment_count=counts[course.course_id]
                )
                for course in courses
            ],
            reviews=self.review_manager.list_for_courses(course_ids, approved_only=False),
            stats=TeacherDetailStats(
                total_courses=len(courses),
                total_students=sum(counts.values()),
                average_rating=self._average_rating(course_ids),
            ),
        )

    def student_details(self, student_id: str) -> StudentDetails:
        """Admin view of a student's enrollments and reviews.

        Raises:
            NotFoundError: If no student with this id exists.
        """
        student = self.user_manager.get_user_with_role(student_id, "student")
        enrollments = self.enrollment_manager.list_for_student(student_id, approved_only=False)
        reviews = self.review_manager.list_for_student(student_id)
        return StudentDetails(
            student=student.public(),
            enrollments=enrollments,
            reviews=reviews,
            stats=StudentDetailStats(
                total_enrollments=len(enrollments),
                total_reviews=len(reviews),
            ),
        )
