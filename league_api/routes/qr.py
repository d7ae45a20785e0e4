"""
QR code routes.

Provides endpoints to:
- Get the QR payload for one player or for a whole team
- Register game attendance from a scanned code
"""

from typing import Optional
from fastapi import APIRouter, Depends, Request

from league_api.database import get_store
from league_api.models.qr import QrScanRequest
from league_api.services import qr
from league_api.store import LeagueStore

router = APIRouter(prefix="/qr", tags=["QR"])


@router.get("/generate")
async def generate_qr(
    player_id: Optional[int] = None,
    team_id: Optional[int] = None,
    store: LeagueStore = Depends(get_store)
):
    """
    QR payloads to render.

    ``team_id`` returns every player of the team; otherwise ``player_id``
    is required. Each player carries ``qr_code`` (the text to encode) and
    ``profile_url``.
    """
    data = await qr.generate(store, player_id=player_id, team_id=team_id)
    return {"success": True, "data": data}


@router.post("/scan")
async def scan_qr(
    body: QrScanRequest,
    request: Request,
    store: LeagueStore = Depends(get_store)
):
    """Register attendance for the player in a scanned QR code."""
    result = await qr.register_scan(store, body.qr_data, body.game_id, request=request)
    return {"success": True, **result}
