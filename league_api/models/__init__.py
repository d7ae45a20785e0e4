"""
Pydantic models for request/response validation.
"""

from .user import (
    RegisterRequest,
    UserLogin,
    RefreshTokenRequest,
    UserResponse,
    TokenResponse
)

from .join_request import (
    JoinRequestCreate,
    JoinRequestDecision
)

from .player import ProfileUpdate

from .qr import QrScanRequest

__all__ = [
    # User models
    "RegisterRequest",
    "UserLogin",
    "RefreshTokenRequest",
    "UserResponse",
    "TokenResponse",

    # Join request models
    "JoinRequestCreate",
    "JoinRequestDecision",

    # Player models
    "ProfileUpdate",

    # QR models
    "QrScanRequest"
]
