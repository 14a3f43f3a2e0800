"""Aggregated views: dashboards and detail pages."""

from typing import List, Optional

from pydantic import BaseModel, Field

from schemas.course import CourseWithEnrollmentCount, CourseWithStats, CourseWithTeacher
from schemas.enrollment import Enrollment, EnrollmentWithCourse, EnrollmentWithStudent
from schemas.review import ReviewWithRefs
from schemas.user import UserPublic


class AdminDashboardStats(BaseModel):
    total_students: int
    total_teachers: int
    total_admins: int
    total_courses: int
    pending_teachers: int
    pending_courses: int
    pending_reviews: int


class CourseStats(BaseModel):
    total_enrollments: int = 0
    total_reviews: int = Field(default=0, description="Number of approved reviews.")
    average_rating: float = Field(default=0.0, description="0.0 when no approved review exists.")


class TeacherDashboardStats(BaseModel):
    total_courses: int
    pending_courses: int
    approved_courses: int
    total_students: int
    average_rating: float


class TeacherDashboard(BaseModel):
    stats: TeacherDashboardStats
    recent_courses: List[CourseWithStats]


class StudentCourseDetail(BaseModel):
    course: CourseWithTeacher
    reviews: List[ReviewWithRefs]
    is_enrolled: bool
    has_reviewed: bool
    enrollment: Optional[Enrollment] = None
    stats: CourseStats


class TeacherCourseDetail(BaseModel):
    course: CourseWithTeacher
    enrollments: List[EnrollmentWithStudent]
    reviews: List[ReviewWithRefs]
    stats: CourseStats


class TeacherDetailStats(BaseModel):
    total_courses: int
    total_students: int
    average_rating: float


class TeacherDetails(BaseModel):
    teacher: UserPublic
    courses: List[CourseWithEnrollmentCount]
    reviews: List[ReviewWithRefs]
    stats: TeacherDetailStats


class StudentDetailStats(BaseModel):
    total_enrollments: int
    total_reviews: int


class StudentDetails(BaseModel):
    student: UserPublic
    enrollments: List[EnrollmentWithCourse]
    reviews: List[ReviewWithRefs]
    stats: StudentDetailStats
