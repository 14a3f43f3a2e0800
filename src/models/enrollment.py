from sqlalchemy import Boolean, Column, Integer, String, ForeignKey, UniqueConstraint
from .base import Base


class EnrollmentModel(Base):
    __tablename__ = "enrollments"
    # One enrollment per student per course, enforced by the store
    __table_args__ = (
        UniqueConstraint("student_id", "course_id", name="uq_enrollments_student_course"),
    )

    enrollment_id = Column(String, primary_key=True, index=True)
    student_id = Column(String, ForeignKey("users.user_id"), index=True, nullable=False)
    course_id = Column(String, ForeignKey("courses.course_id"), index=True, nullable=False)
    progress = Column(Integer, nullable=False, default=0)
    completed = Column(Boolean, nullable=False, default=False)
    joined_at = Column(String, nullable=False)
    last_accessed_at = Column(String, nullable=False)
