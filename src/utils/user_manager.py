"""User management utilities.

This module provides user management functionality including user storage,
password hashing, credential checks, profile updates and the admin decision
on teacher accounts.
"""

import logging
from datetime import datetime
from typing import List, Optional

import bcrypt
import pytz
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from config import BCRYPT_ROUNDS, ROLES
from core.exceptions import (
    ConflictError,
    InvalidInputError,
    NotFoundError,
    UnauthenticatedError,
)
from models.user import UserModel
from schemas.user import User
from utils.approval import TEACHER_WORKFLOW, ApprovalStatus, initial_status_for_role
from utils.converters import model_to_user, user_to_model

logger = logging.getLogger(__name__)

# bcrypt only looks at the first 72 bytes of a password
BCRYPT_MAX_BYTES = 72


def normalize_email(email: str) -> str:
    """Emails are unique case-insensitively; store them lower-cased."""
    return email.strip().lower()


class UserManager:
    """Manages user data persistence and operations using SQLAlchemy."""

    workflow = TEACHER_WORKFLOW

    def __init__(self, db: Session):
        """Initialize UserManager.

        Args:
            db: SQLAlchemy Session.
        """
        self.db = db

    def hash_password(self, password: str) -> str:
        """Hash a password using bcrypt.

        Args:
            password: Plain text password.

        Returns:
            Hashed password (bcrypt hash string).
        """
        password_bytes = password.encode("utf-8")[:BCRYPT_MAX_BYTES]
        salt = bcrypt.gensalt(rounds=BCRYPT_ROUNDS)
        return bcrypt.hashpw(password_bytes, salt).decode("utf-8")

    def verify_password(self, plain_password: str, hashed_password: str) -> bool:
        """Verify a password against a bcrypt hash.

        Args:
            plain_password: Plain text password to verify.
            hashed_password: Bcrypt hash string to verify against.

        Returns:
            True if password matches, False otherwise.
        """
        password_bytes = plain_password.encode("utf-8")[:BCRYPT_MAX_BYTES]
        try:
            return bcrypt.checkpw(password_bytes, hashed_password.encode("utf-8"))
        except ValueError as e:
            logger.error("Password verification error: %s", e)
            return False

    def create_user(
        self,
        name: str,
        email: str,
        password: str,
        role: str,
    ) -> User:
        """Create a new user.

        Admins and students are approved at creation, teachers start pending.

        Args:
            name: Display name.
            email: Email address, unique case-insensitively.
            password: Plain text password.
            role: User role ('admin', 'teacher', or 'student').

        Returns:
            Created User object.

        Raises:
            InvalidInputError: If the role is unknown or the name is blank.
            ConflictError: If the email is already registered.
        """
        if role not in ROLES:
            raise InvalidInputError(
                f"Invalid role: {role}. Must be 'admin', 'teacher', or 'student'."
            )
        if not name or not name.strip():
            raise InvalidInputError("Name is required")

        email = normalize_email(email)
        if self._get_model_by_email(email) is not None:
            raise ConflictError("User already exists with this email")

        user = User(
            name=name.strip(),
            email=email,
            password_hash=self.hash_password(password),
            role=role,
            status=initial_status_for_role(role).value,
        )

        # The unique index on email catches a concurrent registration that
        # passed the check above
        try:
            self.db.add(user_to_model(user))
            self.db.commit()
        except IntegrityError as e:
            self.db.rollback()
            raise ConflictError("User already exists with this email") from e

        logger.info("Created %s user %s (status=%s)", role, user.user_id, user.status)
        return user

    def _get_model(self, user_id: str) -> Optional[UserModel]:
        return self.db.query(UserModel).filter(UserModel.user_id == user_id).first()

    def _get_model_by_email(self, email: str) -> Optional[UserModel]:
        return (
            self.db.query(UserModel)
            .filter(UserModel.email == normalize_email(email))
            .first()
        )

    def get_user_by_id(self, user_id: str) -> Optional[User]:
        """Get a user by user ID.

        Args:
            user_id: User ID to look up.

        Returns:
            User object if found, None otherwise.
        """
        model = self._get_model(user_id)
        if model:
            return model_to_user(model)
        return None

    def get_user_by_email(self, email: str) -> Optional[User]:
        model = self._get_model_by_email(email)
        if model:
            return model_to_user(model)
        return None

    def get_user_with_role(self, user_id: str, role: str) -> User:
        """Get a user that must hold the given role.

        Raises:
            NotFoundError: If no user with this id and role exists.
        """
        model = (
            self.db.query(UserModel)
            .filter(UserModel.user_id == user_id, UserModel.role == role)
            .first()
        )
        if not model:
            raise NotFoundError(role.capitalize(), user_id)
        return model_to_user(model)

    def authenticate_credentials(
        self, email: str, password: str, role: Optional[str] = None
    ) -> User:
        """Check login credentials.

        Args:
            email: Email address.
            password: Plain text password.
            role: Role the caller claims; must match the stored role when given.

        Returns:
            The authenticated User.

        Raises:
            UnauthenticatedError: On unknown email, wrong password, role
                mismatch, or an account that is not approved.
        """
        model = self._get_model_by_email(email)
        if model is None or not self.verify_password(password, model.password_hash):
            logger.warning("Rejected login for %s: invalid credentials", normalize_email(email))
            raise UnauthenticatedError("Invalid credentials")

        if role is not None and model.role != role:
            raise UnauthenticatedError(
                f"Invalid role. You are not registered as a {role}"
            )

        if model.status == ApprovalStatus.PENDING.value:
            raise UnauthenticatedError(
                "Your account is pending approval. Please contact admin."
            )
        if model.status != ApprovalStatus.APPROVED.value:
            raise UnauthenticatedError("Your account has been rejected.")

        return model_to_user(model)

    def list_users(
        self, role: Optional[str] = None, status: Optional[str] = None
    ) -> List[User]:
        """List users, newest first.

        Args:
            role: Optional role filter.
            status: Optional approval status filter.

        Returns:
            List of User objects.
        """
        query = self.db.query(UserModel)
        if role:
            query = query.filter(UserModel.role == role)
        if status:
            query = query.filter(UserModel.status == status)
        models = query.order_by(UserModel.create_at.desc()).all()
        return [model_to_user(m) for m in models]

    def update_profile(
        self,
        actor: User,
        name: Optional[str] = None,
        bio: Optional[str] = None,
        avatar_url: Optional[str] = None,
    ) -> User:
        """Update the acting user's own profile.

        Only name, bio and avatar_url are writable. A blank name and an empty
        avatar_url are ignored; bio may be cleared with an empty string.

        Args:
            actor: The acting user.
            name: New display name.
            bio: New bio.
            avatar_url: New avatar reference.

        Returns:
            Updated User object.

        Raises:
            NotFoundError: If the acting user no longer exists.
        """
        model = self._get_model(actor.user_id)
        if not model:
            raise NotFoundError("User", actor.user_id)

        if name and name.strip():
            model.name = name.strip()
        if bio is not None:
            model.bio = bio
        if avatar_url:
            model.avatar_url = avatar_url
        model.update_at = datetime.now(pytz.utc).isoformat()
        self.db.commit()
        self.db.refresh(model)
        return model_to_user(model)

    def set_teacher_status(self, actor: User, teacher_id: str, status: str) -> User:
        """Approve or reject a teacher account.

        Approved teachers pass the global access gate and may create courses;
        rejected ones stay locked out.

        Args:
            actor: The acting user, must be an admin.
            teacher_id: User ID of the teacher.
            status: 'approved' or 'rejected'.

        Returns:
            Updated teacher.

        Raises:
            ForbiddenError: If the actor is not an admin.
            InvalidStatusError: If the status is not a decision value.
            NotFoundError: If no teacher with this id exists.
        """
        self.workflow.check_decider(actor)
        self.workflow.parse_decision(status)

        model = (
            self.db.query(UserModel)
            .filter(UserModel.user_id == teacher_id, UserModel.role == "teacher")
            .first()
        )
        if not model:
            raise NotFoundError("Teacher", teacher_id)

        previous = model.status
        model.status = self.workflow.decide(actor, status).value
        model.update_at = datetime.now(pytz.utc).isoformat()
        self.db.commit()
        self.db.refresh(model)
        logger.info(
            "Teacher %s status %s -> %s by admin %s",
            teacher_id, previous, model.status, actor.user_id,
        )
        return model_to_user(model)
