from sqlalchemy import CheckConstraint, Column, Integer, String, Text, ForeignKey, UniqueConstraint
from .base import Base


class ReviewModel(Base):
    __tablename__ = "reviews"
    __table_args__ = (
        UniqueConstraint("student_id", "course_id", name="uq_reviews_student_course"),
        CheckConstraint("rating >= 1 AND rating <= 5", name="ck_reviews_rating_1_5"),
    )

    review_id = Column(String, primary_key=True, index=True)
    course_id = Column(String, ForeignKey("courses.course_id"), index=True, nullable=False)
    student_id = Column(String, ForeignKey("users.user_id"), index=True, nullable=False)
    rating = Column(Integer, nullable=False)
    comment = Column(Text, nullable=True)
    status = Column(String, nullable=False, default="pending", index=True)
    create_at = Column(String, nullable=False)
    update_at = Column(String, nullable=False)
