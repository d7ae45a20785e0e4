"""
JWT token utilities for authentication.

Provides functions for creating and decoding JWT tokens using HS256 algorithm.
"""

from datetime import datetime, timedelta, timezone
from typing import Dict, Optional
import jwt
from jwt.exceptions import InvalidTokenError

from league_api import config


def create_access_token(user_id, role: str, additional_claims: Optional[Dict] = None) -> str:
    """
    Create a JWT access token.

    Args:
        user_id: The user's id (stored as a string subject)
        role: The user's role ('coach' or 'player')
        additional_claims: Optional additional claims to include in the token

    Returns:
        Encoded JWT token string
    """
    now = datetime.now(timezone.utc)
    payload = {
        "sub": str(user_id),
        "role": role,
        "type": "access",
        "exp": now + timedelta(hours=config.ACCESS_TOKEN_EXPIRE_HOURS),
        "iat": now
    }

    if additional_claims:
        payload.update(additional_claims)

    return jwt.encode(payload, config.JWT_SECRET, algorithm=config.JWT_ALGORITHM)


def create_refresh_token(user_id) -> str:
    """Create a JWT refresh token."""
    now = datetime.now(timezone.utc)
    payload = {
        "sub": str(user_id),
        "type": "refresh",
        "exp": now + timedelta(days=config.REFRESH_TOKEN_EXPIRE_DAYS),
        "iat": now
    }

    return jwt.encode(payload, config.JWT_SECRET, algorithm=config.JWT_ALGORITHM)


def decode_token(token: str) -> Dict:
    """
    Decode and validate a JWT token.

    Raises:
        InvalidTokenError: If the token is invalid or expired
    """
    try:
        return jwt.decode(token, config.JWT_SECRET, algorithms=[config.JWT_ALGORITHM])
    except InvalidTokenError as e:
        raise InvalidTokenError(f"Invalid token: {str(e)}")
