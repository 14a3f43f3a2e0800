"""Teacher routes.

Course authoring, the teacher's own profile and dashboard. Pending and
rejected teachers never get here: they are refused by the authentication
gate before the role check runs.
"""

from typing import List

from fastapi import APIRouter, status

from api.routes.auth import TeacherUser
from core.dependencies import CourseManagerDep, StatsManagerDep, UserManagerDep
from schemas.course import Course, CreateCourseRequest, UpdateCourseRequest
from schemas.stats import TeacherCourseDetail, TeacherDashboard
from schemas.user import UpdateProfileRequest, UserPublic

router = APIRouter(prefix="/api/teacher", tags=["Teacher"])


@router.get("/profile", response_model=UserPublic, summary="Get own profile")
def get_profile(current_user: TeacherUser) -> UserPublic:
    return current_user.public()


@router.patch("/profile", response_model=UserPublic, summary="Update own profile")
def update_profile(
    req: UpdateProfileRequest,
    user_manager: UserManagerDep,
    current_user: TeacherUser,
) -> UserPublic:
    user = user_manager.update_profile(
        current_user, name=req.name, bio=req.bio, avatar_url=req.avatar_url
    )
    return user.public()


@router.get("/stats", response_model=TeacherDashboard, summary="Dashboard stats")
def get_teacher_stats(
    stats_manager: StatsManagerDep,
    current_user: TeacherUser,
) -> TeacherDashboard:
    return stats_manager.teacher_dashboard(current_user)


@router.post(
    "/courses",
    response_model=Course,
    status_code=status.HTTP_201_CREATED,
    summary="Create a course",
)
def create_course(
    req: CreateCourseRequest,
    course_manager: CourseManagerDep,
    current_user: TeacherUser,
) -> Course:
    """Create a course. New courses wait for admin approval."""
    return course_manager.create_course(current_user, req.title, req.description)


@router.get("/courses", response_model=List[Course], summary="List own courses")
def list_my_courses(
    course_manager: CourseManagerDep,
    current_user: TeacherUser,
) -> List[Course]:
    return course_manager.list_courses_for_teacher(current_user.user_id)


@router.get(
    "/courses/{course_id}",
    response_model=TeacherCourseDetail,
    summary="Own course with enrollments and reviews",
)
def get_course(
    course_id: str,
    stats_manager: StatsManagerDep,
    current_user: TeacherUser,
) -> TeacherCourseDetail:
    return stats_manager.teacher_course_detail(current_user, course_id)


@router.patch("/courses/{course_id}", response_model=Course, summary="Edit own course")
def update_course(
    course_id: str,
    req: UpdateCourseRequest,
    course_manager: CourseManagerDep,
    current_user: TeacherUser,
) -> Course:
    """Edit title or description.

    Changing an approved course sends it back to pending until an admin
    approves it again.
    """
    return course_manager.update_course(
        current_user, course_id, title=req.title, description=req.description
    )
