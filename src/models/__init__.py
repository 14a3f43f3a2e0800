from .base import Base
from .user import UserModel
from .course import CourseModel
from .enrollment import EnrollmentModel
from .review import ReviewModel

__all__ = [
    "Base", "UserModel", "CourseModel", "EnrollmentModel", "ReviewModel",
]
