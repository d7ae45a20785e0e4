"""
Team join request routes.

Players create requests to join (or transfer to) a team; the team's coach
accepts or rejects them.
"""

from typing import Optional
from fastapi import APIRouter, Depends, Request

from league_api.auth import get_current_user_optional, resolve_acting_user
from league_api.database import get_store
from league_api.models.join_request import JoinRequestCreate, JoinRequestDecision
from league_api.services import join_requests
from league_api.store import LeagueStore

router = APIRouter(prefix="/team-join-requests", tags=["Join Requests"])


@router.get("")
async def list_join_requests(
    team_id: Optional[int] = None,
    player_user_id: Optional[int] = None,
    store: LeagueStore = Depends(get_store)
):
    """
    List join requests, newest first.

    ``team_id`` gives a coach the requests for their team;
    ``player_user_id`` gives a player their own requests.
    """
    data = await join_requests.list_requests(store, team_id=team_id, player_user_id=player_user_id)
    return {"success": True, "data": data}


@router.post("")
async def create_join_request(
    body: JoinRequestCreate,
    request: Request,
    store: LeagueStore = Depends(get_store),
    token_user: Optional[dict] = Depends(get_current_user_optional)
):
    """Create a join or transfer request for the acting player."""
    body.player_user_id = resolve_acting_user(body.player_user_id, token_user, request)
    result = await join_requests.create_request(store, body)
    return {"success": True, **result}


@router.put("")
async def decide_join_request(
    body: JoinRequestDecision,
    request: Request,
    store: LeagueStore = Depends(get_store),
    token_user: Optional[dict] = Depends(get_current_user_optional)
):
    """Accept or reject a join request as the target team's coach."""
    body.coach_user_id = resolve_acting_user(body.coach_user_id, token_user, request)
    result = await join_requests.decide_request(store, body, request=request)
    return {"success": True, **result}
