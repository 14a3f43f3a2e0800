"""User schema definitions.

This module defines the User data model and the request/response models of
the authentication and profile endpoints.
"""

import uuid
from datetime import datetime
from typing import Optional

import pytz
from pydantic import BaseModel, EmailStr, Field


class User(BaseModel):
    """Full user record, including the password hash. Never serialized to clients."""

    user_id: str = Field(
        description="The unique identifier for the user.",
        default_factory=lambda: str(uuid.uuid4()),
    )
    name: str = Field(description="Display name.")
    email: str = Field(description="Lower-cased email address, unique.")
    password_hash: str = Field(description="Bcrypt hash of the password.")
    role: str = Field(description="'admin', 'teacher' or 'student'. Immutable.")
    status: str = Field(description="'pending', 'approved' or 'rejected'.")
    bio: Optional[str] = None
    avatar_url: Optional[str] = None
    create_at: str = Field(
        description="The time when the user registered.",
        default_factory=lambda: datetime.now(pytz.utc).isoformat(),
    )
    update_at: str = Field(
        description="The time when the user was last updated.",
        default_factory=lambda: datetime.now(pytz.utc).isoformat(),
    )

    def public(self) -> "UserPublic":
        """Return the sanitized view of this user."""
        return UserPublic(**self.model_dump(exclude={"password_hash"}))


class UserPublic(BaseModel):
    """User profile as returned by the API."""

    user_id: str
    name: str
    email: str
    role: str
    status: str
    bio: Optional[str] = None
    avatar_url: Optional[str] = None
    create_at: str
    update_at: str


class UserRef(BaseModel):
    """Related-user fields joined into course, enrollment and review views."""

    user_id: str
    name: str
    email: Optional[str] = None
    bio: Optional[str] = None
    avatar_url: Optional[str] = None


class RegisterRequest(BaseModel):
    name: str = Field(min_length=1)
    email: EmailStr
    password: str = Field(min_length=1)
    role: str
    admin_token: Optional[str] = Field(
        default=None,
        description="Required for role 'admin' when ADMIN_TOKEN is configured.",
    )


class RegisterResponse(BaseModel):
    id: str
    role: str
    status: str


class LoginRequest(BaseModel):
    # Plain str: a malformed address is just another failed login (401)
    email: str
    password: str
    role: Optional[str] = Field(
        default=None,
        description="The role the user claims to log in as. Must match when given.",
    )


class LoginResponse(BaseModel):
    token: str
    user: UserPublic


class UpdateProfileRequest(BaseModel):
    """Only these profile fields are writable by their owner."""

    name: Optional[str] = None
    bio: Optional[str] = None
    avatar_url: Optional[str] = None


class UpdateStatusRequest(BaseModel):
    """Admin decision body for teachers, courses and reviews."""

    status: str
