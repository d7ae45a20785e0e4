"""
Public player page routes.
"""

from fastapi import APIRouter, Depends

from league_api.database import get_store
from league_api.errors import ValidationFailed
from league_api.services import players
from league_api.store import LeagueStore

router = APIRouter(prefix="/players", tags=["Players"])


@router.get("/{player_id}")
async def get_player(player_id: str, store: LeagueStore = Depends(get_store)):
    """Public card for a player: team, attendance and stat totals."""
    if not player_id.isdigit():
        raise ValidationFailed("ID invalido")

    data = await players.public_player(store, int(player_id))
    return {"success": True, "data": data}
