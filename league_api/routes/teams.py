"""
Teams routes.

Lists league teams (with their category branch) and team rosters.
"""

from fastapi import APIRouter, Depends

from league_api.database import get_store
from league_api.services import players
from league_api.store import LeagueStore

router = APIRouter(prefix="/teams", tags=["Teams"])


@router.get("")
async def list_teams(store: LeagueStore = Depends(get_store)):
    """List all teams ordered by name."""
    return {"success": True, "data": await players.list_teams(store)}


@router.get("/{team_id}/players")
async def get_roster(team_id: int, store: LeagueStore = Depends(get_store)):
    """Players on a team, ordered by jersey number."""
    return {"success": True, "data": await players.team_roster(store, team_id)}
