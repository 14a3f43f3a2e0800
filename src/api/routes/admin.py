"""Admin routes.

Moderation of teachers, courses and reviews, user listings and the admin
dashboard. Every endpoint requires the admin role.
"""

from typing import List, Optional

from fastapi import APIRouter, Query

from api.routes.auth import AdminUser
from core.dependencies import (
    CourseManagerDep,
    ReviewManagerDep,
    StatsManagerDep,
    UserManagerDep,
)
from schemas.course import CourseWithTeacher
from schemas.review import ReviewWithRefs
from schemas.stats import AdminDashboardStats, StudentDetails, TeacherDetails
from schemas.user import UpdateProfileRequest, UpdateStatusRequest, UserPublic

router = APIRouter(prefix="/api/admin", tags=["Admin"])


@router.get("/profile", response_model=UserPublic, summary="Get own profile")
def get_profile(current_user: AdminUser) -> UserPublic:
    return current_user.public()


@router.patch("/profile", response_model=UserPublic, summary="Update own profile")
def update_profile(
    req: UpdateProfileRequest,
    user_manager: UserManagerDep,
    current_user: AdminUser,
) -> UserPublic:
    user = user_manager.update_profile(
        current_user, name=req.name, bio=req.bio, avatar_url=req.avatar_url
    )
    return user.public()


@router.get("/stats", response_model=AdminDashboardStats, summary="Dashboard counts")
def get_dashboard_stats(
    stats_manager: StatsManagerDep,
    current_user: AdminUser,
) -> AdminDashboardStats:
    return stats_manager.admin_dashboard()


@router.get("/users", response_model=List[UserPublic], summary="List users")
def list_users(
    user_manager: UserManagerDep,
    current_user: AdminUser,
    role: Optional[str] = None,
    status_filter: Optional[str] = Query(default=None, alias="status"),
) -> List[UserPublic]:
    """List users filtered by role and approval status."""
    return [u.public() for u in user_manager.list_users(role=role, status=status_filter)]


@router.get("/teachers", response_model=List[UserPublic], summary="List teachers")
def list_teachers(
    user_manager: UserManagerDep,
    current_user: AdminUser,
    status_filter: Optional[str] = Query(default=None, alias="status"),
) -> List[UserPublic]:
    return [
        u.public()
        for u in user_manager.list_users(role="teacher", status=status_filter)
    ]


@router.patch(
    "/teachers/{teacher_id}/status",
    response_model=UserPublic,
    summary="Approve or reject a teacher",
)
def update_teacher_status(
    teacher_id: str,
    req: UpdateStatusRequest,
    user_manager: UserManagerDep,
    current_user: AdminUser,
) -> UserPublic:
    """Approve or reject a teacher account.

    Args:
        teacher_id: User ID of the teacher.
        req: Body with the target status ('approved' or 'rejected').
        user_manager: Injected UserManager instance.
        current_user: Acting admin.

    Returns:
        The updated teacher profile.
    """
    return user_manager.set_teacher_status(current_user, teacher_id, req.status).public()


@router.get(
    "/teachers/{teacher_id}/details",
    response_model=TeacherDetails,
    summary="Teacher detail view",
)
def get_teacher_details(
    teacher_id: str,
    stats_manager: StatsManagerDep,
    current_user: AdminUser,
) -> TeacherDetails:
    return stats_manager.teacher_details(teacher_id)


@router.get("/students", response_model=List[UserPublic], summary="List students")
def list_students(
    user_manager: UserManagerDep,
    current_user: AdminUser,
) -> List[UserPublic]:
    return [u.public() for u in user_manager.list_users(role="student")]


@router.get(
    "/students/{student_id}/details",
    response_model=StudentDetails,
    summary="Student detail view",
)
def get_student_details(
    student_id: str,
    stats_manager: StatsManagerDep,
    current_user: AdminUser,
) -> StudentDetails:
    return stats_manager.student_details(student_id)


@router.get("/courses", response_model=List[CourseWithTeacher], summary="List courses")
def list_courses(
    course_manager: CourseManagerDep,
    current_user: AdminUser,
    status_filter: Optional[str] = Query(default=None, alias="status"),
) -> List[CourseWithTeacher]:
    return course_manager.list_courses(status=status_filter)


@router.patch(
    "/courses/{course_id}/status",
    response_model=CourseWithTeacher,
    summary="Approve or reject a course",
)
def update_course_status(
    course_id: str,
    req: UpdateStatusRequest,
    course_manager: CourseManagerDep,
    current_user: AdminUser,
) -> CourseWithTeacher:
    return course_manager.set_status(current_user, course_id, req.status)


@router.get("/reviews", response_model=List[ReviewWithRefs], summary="List reviews")
def list_reviews(
    review_manager: ReviewManagerDep,
    current_user: AdminUser,
    status_filter: Optional[str] = Query(default=None, alias="status"),
) -> List[ReviewWithRefs]:
    return review_manager.list_reviews(status=status_filter)


@router.patch(
    "/reviews/{review_id}/status",
    response_model=ReviewWithRefs,
    summary="Approve or reject a review",
)
def update_review_status(
    review_id: str,
    req: UpdateStatusRequest,
    review_manager: ReviewManagerDep,
    current_user: AdminUser,
) -> ReviewWithRefs:
    return review_manager.set_status(current_user, review_id, req.status)
