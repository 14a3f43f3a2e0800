"""Authentication routes.

This module handles HTTP endpoints for registration and login, and provides
the ``get_current_user`` / ``require_roles`` dependencies that gate every
other router.
"""

import logging
from typing import Annotated, Optional

from fastapi import APIRouter, Depends, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from config import ADMIN_TOKEN
from core.dependencies import UserManagerDep
from core.exceptions import ForbiddenError
from core.security import issue_token
from schemas.user import (
    LoginRequest,
    LoginResponse,
    RegisterRequest,
    RegisterResponse,
    User,
    UserPublic,
)
from utils.access_control import authenticate, authorize

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["Auth"])

# Missing or non-bearer headers are reported by authenticate() as 401
security = HTTPBearer(auto_error=False)


def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    user_manager: UserManagerDep = None,
) -> User:
    """Get current authenticated user.

    Args:
        credentials: HTTP Bearer token credentials, if any.
        user_manager: Injected UserManager instance.

    Returns:
        Current User object.

    Raises:
        UnauthenticatedError: If the token is missing or invalid, or the user
            is unknown or not approved.
    """
    token = credentials.credentials if credentials else None
    return authenticate(token, user_manager)


def require_roles(*roles: str):
    """Build a dependency that admits only the given roles."""

    def dependency(current_user: User = Depends(get_current_user)) -> User:
        return authorize(current_user, roles)

    return dependency


AdminUser = Annotated[User, Depends(require_roles("admin"))]
TeacherUser = Annotated[User, Depends(require_roles("teacher"))]
StudentUser = Annotated[User, Depends(require_roles("student"))]


@router.post(
    "/register",
    response_model=RegisterResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Register a user",
)
def register(
    req: RegisterRequest,
    user_manager: UserManagerDep,
) -> RegisterResponse:
    """Register a new user.

    Admins and students are approved immediately; teachers wait for an admin
    decision. When ADMIN_TOKEN is configured, admin registration requires it.

    Args:
        req: Registration request with name, email, password and role.
        user_manager: Injected UserManager instance.

    Returns:
        RegisterResponse with the new id, role and status.

    Raises:
        ForbiddenError: If the admin token does not match.
        ConflictError: If the email is already registered.
    """
    if req.role == "admin" and ADMIN_TOKEN and req.admin_token != ADMIN_TOKEN:
        logger.warning("Admin registration refused for %s: bad admin token", req.email)
        raise ForbiddenError("Invalid admin token")

    user = user_manager.create_user(
        name=req.name,
        email=req.email,
        password=req.password,
        role=req.role,
    )
    return RegisterResponse(id=user.user_id, role=user.role, status=user.status)


@router.post("/login", response_model=LoginResponse, summary="Log in")
def login(
    req: LoginRequest,
    user_manager: UserManagerDep,
) -> LoginResponse:
    """Login with email and password.

    Args:
        req: Login request with email, password and the claimed role.
        user_manager: Injected UserManager instance.

    Returns:
        LoginResponse with the bearer token and the sanitized user.

    Raises:
        UnauthenticatedError: On bad credentials, a wrong role claim or an
            account that is not approved.
    """
    user = user_manager.authenticate_credentials(req.email, req.password, req.role)
    token = issue_token(user.user_id, user.role)
    logger.info("User %s logged in as %s", user.user_id, user.role)
    return LoginResponse(token=token, user=user.public())


@router.post("/logout", summary="Log out")
def logout() -> dict:
    """Logout endpoint.

    Note: Since we're using stateless JWT tokens, logout is handled
    client-side by removing the token. This endpoint exists for API
    consistency.
    """
    return {"success": True, "message": "Logged out successfully"}


@router.get("/me", response_model=UserPublic, summary="Current user profile")
def get_current_user_info(
    current_user: User = Depends(get_current_user),
) -> UserPublic:
    """Return the caller's profile without the password hash."""
    return current_user.public()
