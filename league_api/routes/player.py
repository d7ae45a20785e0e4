"""
Player profile routes.

Players read and edit their own personal and medical data. The data is
shared by every team the player belongs to.
"""

from typing import Optional
from fastapi import APIRouter, Depends, Request

from league_api.auth import get_current_user_optional, resolve_acting_user
from league_api.database import get_store
from league_api.models.player import ProfileUpdate
from league_api.services import profile
from league_api.store import LeagueStore

router = APIRouter(prefix="/player", tags=["Player"])


@router.get("/profile")
async def get_profile(
    request: Request,
    user_id: Optional[int] = None,
    store: LeagueStore = Depends(get_store),
    token_user: Optional[dict] = Depends(get_current_user_optional)
):
    """Get the acting user's profile and the teams they play on."""
    acting_id = resolve_acting_user(user_id, token_user, request)
    result = await profile.get_profile(store, acting_id)
    return {"success": True, **result}


@router.put("/profile")
async def update_profile(
    body: ProfileUpdate,
    request: Request,
    store: LeagueStore = Depends(get_store),
    token_user: Optional[dict] = Depends(get_current_user_optional)
):
    """
    Update the acting user's profile.

    Only the fields present in the body change, and every player row of the
    user receives them.
    """
    acting_id = resolve_acting_user(body.user_id, token_user, request)
    result = await profile.update_profile(store, body, acting_id)
    return {"success": True, **result}
