"""User database model.

This module defines the User database model using SQLAlchemy.
"""

from sqlalchemy import Column, String, Text
from .base import Base


class UserModel(Base):
    """User database model."""

    __tablename__ = "users"

    user_id = Column(String, primary_key=True, index=True)
    name = Column(String, nullable=False)
    email = Column(String, unique=True, index=True, nullable=False)  # lower-cased
    password_hash = Column(String, nullable=False)
    role = Column(String, nullable=False)  # 'admin', 'teacher', or 'student'
    status = Column(String, nullable=False, default="pending", index=True)
    bio = Column(Text, nullable=True)
    avatar_url = Column(String, nullable=True)
    create_at = Column(String, nullable=False)  # ISO format string
    update_at = Column(String, nullable=False)  # ISO format string
