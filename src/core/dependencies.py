"""Dependency injection module for FastAPI.

This module provides dependency injection functions for FastAPI routes.
Every manager is bound to the request-scoped DB session.
"""

from typing import Annotated

from fastapi import Depends
from sqlalchemy.orm import Session

from core.database import get_db
from utils import course_manager
from utils import enrollment_manager
from utils import review_manager
from utils import stats_manager
from utils import user_manager


def get_user_manager(db: Session = Depends(get_db)) -> user_manager.UserManager:
    """Get UserManager instance with request-scoped DB session.

    Args:
        db: Database session.

    Returns:
        UserManager instance.
    """
    return user_manager.UserManager(db)


def get_course_manager(db: Session = Depends(get_db)) -> course_manager.CourseManager:
    """Get CourseManager instance with request-scoped DB session."""
    return course_manager.CourseManager(db)


def get_enrollment_manager(
    db: Session = Depends(get_db),
) -> enrollment_manager.EnrollmentManager:
    """Get EnrollmentManager instance with request-scoped DB session."""
    return enrollment_manager.EnrollmentManager(db)


def get_review_manager(db: Session = Depends(get_db)) -> review_manager.ReviewManager:
    """Get ReviewManager instance with request-scoped DB session."""
    return review_manager.ReviewManager(db)


def get_stats_manager(db: Session = Depends(get_db)) -> stats_manager.StatsManager:
    """Get StatsManager instance with request-scoped DB session."""
    return stats_manager.StatsManager(db)


# Type aliases for dependency injection
UserManagerDep = Annotated[
    user_manager.UserManager, Depends(get_user_manager)
]
CourseManagerDep = Annotated[
    course_manager.CourseManager, Depends(get_course_manager)
]
EnrollmentManagerDep = Annotated[
    enrollment_manager.EnrollmentManager, Depends(get_enrollment_manager)
]
ReviewManagerDep = Annotated[
    review_manager.ReviewManager, Depends(get_review_manager)
]
StatsManagerDep = Annotated[
    stats_manager.StatsManager, Depends(get_stats_manager)
]
