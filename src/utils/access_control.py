"""Per-request access control.

``authenticate`` resolves a bearer token to an approved user; ``authorize``
checks the user's role. Ownership is not implied by a role match and is
checked again by each manager operation.
"""

import logging
from typing import Iterable, Optional

from core.exceptions import ForbiddenError, UnauthenticatedError
from core.security import decode_access_token
from schemas.user import User
from utils.approval import ApprovalStatus
from utils.user_manager import UserManager

logger = logging.getLogger(__name__)


def authenticate(token: Optional[str], user_manager: UserManager) -> User:
    """Resolve the acting user from a bearer token.

    Any user whose status is not approved is refused here, whatever route
    is being called. Pending and rejected teachers are therefore locked out
    of every authenticated route, not only teacher routes.

    Args:
        token: Raw bearer token, or None when the header is missing.
        user_manager: UserManager bound to the request session.

    Returns:
        The acting User.

    Raises:
        UnauthenticatedError: If the token is missing, invalid or expired,
            its subject does not exist, or the user is not approved.
    """
    if not token:
        raise UnauthenticatedError("No token, authorization denied")

    payload = decode_access_token(token)
    user = user_manager.get_user_by_id(payload["sub"])
    if user is None:
        raise UnauthenticatedError("User not found")
    if user.status != ApprovalStatus.APPROVED.value:
        logger.info("Blocked %s user %s with status %s", user.role, user.user_id, user.status)
        raise UnauthenticatedError("Your account is not approved")
    return user


def authorize(user: User, allowed_roles: Iterable[str]) -> User:
    """Check that the user's role is allowed.

    Raises:
        ForbiddenError: If the role is not in allowed_roles.
    """
    if user.role not in allowed_roles:
        raise ForbiddenError(
            f"User role {user.role} is not authorized to access this resource"
        )
    return user
