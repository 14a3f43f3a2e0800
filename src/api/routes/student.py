"""Student routes.

Browsing approved courses, enrolling, tracking progress and reviewing.
"""

from typing import List

from fastapi import APIRouter, status

from api.routes.auth import StudentUser
from core.dependencies import (
    CourseManagerDep,
    EnrollmentManagerDep,
    ReviewManagerDep,
    StatsManagerDep,
    UserManagerDep,
)
from schemas.course import CourseWithTeacher
from schemas.enrollment import Enrollment, EnrollmentWithCourse, UpdateProgressRequest
from schemas.review import Review, ReviewWithRefs, SubmitReviewRequest
from schemas.stats import StudentCourseDetail
from schemas.user import UpdateProfileRequest, UserPublic

router = APIRouter(prefix="/api/student", tags=["Student"])


@router.get("/profile", response_model=UserPublic, summary="Get own profile")
def get_profile(current_user: StudentUser) -> UserPublic:
    return current_user.public()


@router.patch("/profile", response_model=UserPublic, summary="Update own profile")
def update_profile(
    req: UpdateProfileRequest,
    user_manager: UserManagerDep,
    current_user: StudentUser,
) -> UserPublic:
    user = user_manager.update_profile(
        current_user, name=req.name, bio=req.bio, avatar_url=req.avatar_url
    )
    return user.public()


@router.get("/courses", response_model=List[CourseWithTeacher], summary="Browse courses")
def list_courses(
    course_manager: CourseManagerDep,
    current_user: StudentUser,
) -> List[CourseWithTeacher]:
    """List approved courses only."""
    return course_manager.list_approved_courses()


@router.get(
    "/courses/{course_id}",
    response_model=StudentCourseDetail,
    summary="Course detail with enrollment and review state",
)
def get_course_detail(
    course_id: str,
    stats_manager: StatsManagerDep,
    current_user: StudentUser,
) -> StudentCourseDetail:
    return stats_manager.student_course_detail(current_user, course_id)


@router.post(
    "/courses/{course_id}/enroll",
    response_model=Enrollment,
    status_code=status.HTTP_201_CREATED,
    summary="Enroll in a course",
)
def enroll_course(
    course_id: str,
    enrollment_manager: EnrollmentManagerDep,
    current_user: StudentUser,
) -> Enrollment:
    return enrollment_manager.enroll(current_user, course_id)


@router.get(
    "/enrollments",
    response_model=List[EnrollmentWithCourse],
    summary="List own enrollments",
)
def list_enrollments(
    enrollment_manager: EnrollmentManagerDep,
    current_user: StudentUser,
) -> List[EnrollmentWithCourse]:
    """List enrollments in courses that are still approved."""
    return enrollment_manager.list_for_student(current_user.user_id)


@router.patch(
    "/courses/{course_id}/progress",
    response_model=Enrollment,
    summary="Update progress in a course",
)
def update_course_progress(
    course_id: str,
    req: UpdateProgressRequest,
    enrollment_manager: EnrollmentManagerDep,
    current_user: StudentUser,
) -> Enrollment:
    return enrollment_manager.update_progress_for_course(
        current_user, course_id, req.progress
    )


@router.patch(
    "/enrollments/{enrollment_id}/progress",
    response_model=Enrollment,
    summary="Update progress of an enrollment",
)
def update_enrollment_progress(
    enrollment_id: str,
    req: UpdateProgressRequest,
    enrollment_manager: EnrollmentManagerDep,
    current_user: StudentUser,
) -> Enrollment:
    return enrollment_manager.update_progress(current_user, enrollment_id, req.progress)


@router.post(
    "/courses/{course_id}/reviews",
    response_model=Review,
    status_code=status.HTTP_201_CREATED,
    summary="Submit a review",
)
def submit_review(
    course_id: str,
    req: SubmitReviewRequest,
    review_manager: ReviewManagerDep,
    current_user: StudentUser,
) -> Review:
    """Submit a review. It stays pending until an admin approves it."""
    return review_manager.submit_review(current_user, course_id, req.rating, req.comment)


@router.get("/reviews", response_model=List[ReviewWithRefs], summary="List own reviews")
def list_my_reviews(
    review_manager: ReviewManagerDep,
    current_user: StudentUser,
) -> List[ReviewWithRefs]:
    return review_manager.list_for_student(current_user.user_id)
