"""Course schema definitions."""

from typing import Optional

from pydantic import BaseModel, Field

from schemas.user import UserRef


class Course(BaseModel):
    course_id: str
    title: str
    description: Optional[str] = None
    teacher_id: str = Field(description="The user_id of the owning teacher.")
    status: str
    create_at: str
    update_at: str


class CourseWithTeacher(Course):
    """Course joined with its teacher's public fields."""

    teacher: Optional[UserRef] = None


class CourseWithEnrollmentCount(Course):
    enrollment_count: int = 0


class CourseWithStats(Course):
    """Course enriched for the teacher dashboard."""

    students: int = 0
    rating: float = 0.0


class CourseRef(BaseModel):
    course_id: str
    title: str
    description: Optional[str] = None
    status: Optional[str] = None


class CreateCourseRequest(BaseModel):
    title: str
    description: Optional[str] = None


class UpdateCourseRequest(BaseModel):
    title: Optional[str] = None
    description: Optional[str] = None
