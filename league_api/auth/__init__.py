"""
Authentication module for the league API.

This module provides authentication functionality including:
- JWT token generation and validation
- Password hashing and verification
- FastAPI dependencies for resolving the acting user
"""

from .jwt import create_access_token, create_refresh_token, decode_token
from .password import hash_password, verify_password
from .dependencies import (
    get_current_user,
    get_current_user_optional,
    resolve_acting_user
)

__all__ = [
    "create_access_token",
    "create_refresh_token",
    "decode_token",
    "hash_password",
    "verify_password",
    "get_current_user",
    "get_current_user_optional",
    "resolve_acting_user",
]
