from sqlalchemy import Column, String, Text, ForeignKey
from sqlalchemy.orm import relationship
from .base import Base


class CourseModel(Base):
    __tablename__ = "courses"

    course_id = Column(String, primary_key=True, index=True)
    title = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    teacher_id = Column(String, ForeignKey("users.user_id"), index=True, nullable=False)
    status = Column(String, nullable=False, default="pending", index=True)
    create_at = Column(String, nullable=False)
    update_at = Column(String, nullable=False)

    teacher = relationship("UserModel")
