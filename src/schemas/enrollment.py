"""Enrollment schema definitions."""

from typing import Optional

from pydantic import BaseModel, Field, StrictInt

from schemas.course import CourseWithTeacher
from schemas.user import UserRef


class Enrollment(BaseModel):
    enrollment_id: str
    student_id: str
    course_id: str
    progress: int = Field(description="Progress percentage, 0 to 100.", default=0)
    completed: bool = Field(description="True once progress reaches 100.", default=False)
    joined_at: str
    last_accessed_at: str


class EnrollmentWithCourse(Enrollment):
    course: Optional[CourseWithTeacher] = None


class EnrollmentWithStudent(Enrollment):
    student: Optional[UserRef] = None


class UpdateProgressRequest(BaseModel):
    # Strict so JSON booleans are refused; range is checked by EnrollmentManager
    progress: StrictInt
