"""Review schema definitions."""

from typing import Optional

from pydantic import BaseModel, StrictInt

from schemas.course import CourseRef
from schemas.user import UserRef


class Review(BaseModel):
    review_id: str
    course_id: str
    student_id: str
    rating: int
    comment: Optional[str] = None
    status: str
    create_at: str
    update_at: str


class ReviewWithRefs(Review):
    """Review joined with its author and course."""

    student: Optional[UserRef] = None
    course: Optional[CourseRef] = None


class SubmitReviewRequest(BaseModel):
    rating: StrictInt
    comment: Optional[str] = None
