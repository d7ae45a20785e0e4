"""
Pydantic models for player profile requests.
"""

from typing import Optional, Union
from pydantic import BaseModel, Field, field_validator

from .base import blank_to_none


class ProfileUpdate(BaseModel):
    """
    Request model for updating a player's profile.

    Uses the public field names of the profile form; ``emergency_contact``
    and ``emergency_phone`` map to the ``emergency_contact_*`` columns.
    """
    user_id: Optional[int] = None
    birth_date: Optional[str] = None
    phone: Optional[str] = Field(None, max_length=30)
    personal_email: Optional[str] = Field(None, max_length=255)
    address: Optional[str] = Field(None, max_length=500)
    emergency_contact: Optional[str] = Field(None, max_length=100)
    emergency_phone: Optional[str] = Field(None, max_length=30)
    blood_type: Optional[str] = Field(None, max_length=5)
    seasons_played: Optional[int] = Field(None, ge=0)
    playing_since: Optional[Union[int, str]] = None
    medical_conditions: Optional[str] = None
    cedula_url: Optional[str] = None
    photo_url: Optional[str] = None

    @field_validator("user_id", "seasons_played", mode="before")
    @classmethod
    def numbers_blank(cls, v):
        return blank_to_none(v)
