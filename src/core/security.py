"""Bearer token issuance and verification.

Tokens are HS256 JWTs carrying the user id in ``sub`` and the role in
``role``. Anything that fails to decode is reported as unauthenticated.
"""

from datetime import datetime, timedelta
from typing import Optional

import pytz
from jose import JWTError, jwt

from config import ACCESS_TOKEN_EXPIRE_MINUTES, JWT_ALGORITHM, JWT_SECRET_KEY
from core.exceptions import UnauthenticatedError


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    """Create a JWT access token.

    Args:
        data: Data to encode in the token.
        expires_delta: Optional expiration time delta.

    Returns:
        Encoded JWT token string.
    """
    to_encode = data.copy()
    if expires_delta:
        expire = datetime.now(pytz.utc) + expires_delta
    else:
        expire = datetime.now(pytz.utc) + timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES)
    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, JWT_SECRET_KEY, algorithm=JWT_ALGORITHM)


def issue_token(user_id: str, role: str) -> str:
    """Issue a token for a user."""
    return create_access_token({"sub": user_id, "role": role})


def decode_access_token(token: str) -> dict:
    """Verify a token and return its payload.

    Args:
        token: Encoded JWT.

    Returns:
        Decoded token payload.

    Raises:
        UnauthenticatedError: If the token is invalid, expired or has no subject.
    """
    try:
        payload = jwt.decode(token, JWT_SECRET_KEY, algorithms=[JWT_ALGORITHM])
    except JWTError:
        raise UnauthenticatedError("Token is not valid")
    if payload.get("sub") is None:
        raise UnauthenticatedError("Token is not valid")
    return payload
