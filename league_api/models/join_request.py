"""
Pydantic models for team join and transfer requests.
"""

from typing import Optional
from pydantic import BaseModel, Field, field_validator

from .base import blank_to_none


class JoinRequestCreate(BaseModel):
    """Request model for a player asking to join or transfer to a team."""
    player_user_id: Optional[int] = None
    player_id: Optional[int] = None
    team_id: Optional[int] = None
    player_name: Optional[str] = Field(None, max_length=100)
    position: Optional[str] = Field(None, max_length=20)
    jersey_number: Optional[int] = None
    phone: Optional[str] = Field(None, max_length=30)
    message: Optional[str] = Field(None, max_length=1000)
    is_transfer: Optional[bool] = False
    from_team_id: Optional[int] = None

    @field_validator(
        "player_user_id", "player_id", "team_id", "jersey_number", "from_team_id",
        mode="before"
    )
    @classmethod
    def ids_blank(cls, v):
        return blank_to_none(v)


class JoinRequestDecision(BaseModel):
    """Request model for a coach accepting or rejecting a join request."""
    id: Optional[int] = None
    status: Optional[str] = Field(None, description="'accepted' or 'rejected'")
    coach_user_id: Optional[int] = None
