"""
Pydantic models for registration and authentication.
"""

from typing import Optional
from datetime import datetime
from pydantic import BaseModel, Field, field_validator

from .base import blank_to_none


class RegisterRequest(BaseModel):
    """
    Request model for account registration.

    Player-only fields use the camelCase names the registration form sends.
    Required-field checks happen in the registration service so the client
    gets the specific message for each missing field.
    """
    username: Optional[str] = Field(None, max_length=50)
    email: Optional[str] = Field(None, max_length=255)
    password: Optional[str] = None
    role: Optional[str] = Field(None, description="'player' or 'coach'")
    player_name: Optional[str] = Field(None, alias="playerName", max_length=100)
    position: Optional[str] = Field(None, max_length=20)
    jersey_number: Optional[int] = Field(None, alias="jerseyNumber")

    class Config:
        populate_by_name = True

    @field_validator("jersey_number", mode="before")
    @classmethod
    def jersey_blank(cls, v):
        return blank_to_none(v)


class UserLogin(BaseModel):
    """Request model for username/password login."""
    username: str = Field(..., min_length=1, description="Username or email")
    password: str = Field(..., min_length=1, description="Password")


class RefreshTokenRequest(BaseModel):
    """Request model for refreshing access token."""
    refresh_token: str = Field(..., description="Refresh token")


class UserResponse(BaseModel):
    """Response model for user data."""
    id: int
    username: str
    email: str
    role: str
    status: str
    created_at: datetime
    last_login_at: Optional[datetime] = None


class TokenResponse(BaseModel):
    """Response model for authentication tokens."""
    success: bool = True
    access_token: str = Field(..., description="JWT access token")
    refresh_token: str = Field(..., description="JWT refresh token")
    token_type: str = Field(default="bearer", description="Token type")
    user: UserResponse = Field(..., description="User information")
