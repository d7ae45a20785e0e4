"""
Player QR identity and game attendance.

A player's QR code encodes the URL of their public profile page. Codes
printed before that switch carry a JSON payload such as
``{"type": "player_attendance", "player_id": 12, ...}``; scanners may also
produce a bare id. ``decode_player_id`` accepts all three forms.
"""

import json
import logging
import re
from typing import Any, Optional

from fastapi import Request

from league_api import config
from league_api.errors import NotFound, ValidationFailed
from league_api.store import LeagueStore
from league_api.utils.audit_log import log_roster_change

logger = logging.getLogger(__name__)

PROFILE_PATH = re.compile(r"/(?:perfil|players)/(\d+)(?:[/?#]|$)")
BARE_ID = re.compile(r"^\d+$")


def profile_url(player_id: int) -> str:
    return f"{config.PUBLIC_BASE_URL}/perfil/{player_id}"


def encode_player(player_id: int) -> str:
    """Text to encode into the player's QR code."""
    return profile_url(player_id)


def _positive_int(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value if value > 0 else None
    if isinstance(value, str) and BARE_ID.match(value.strip()):
        number = int(value.strip())
        return number if number > 0 else None
    return None


def decode_player_id(qr_data: Any) -> Optional[int]:
    """
    Extract a player id from scanned QR content.

    Tried in order: a profile URL path, a JSON payload with ``player_id``,
    a bare number. Returns None when nothing matches.
    """
    if isinstance(qr_data, dict):
        return _positive_int(qr_data.get("player_id"))
    if isinstance(qr_data, bool) or not isinstance(qr_data, (str, int)):
        return None
    if isinstance(qr_data, int):
        return _positive_int(qr_data)

    text = qr_data.strip()

    match = PROFILE_PATH.search(text)
    if match:
        return _positive_int(match.group(1))

    try:
        payload = json.loads(text)
    except ValueError:
        payload = None
    if isinstance(payload, dict):
        player_id = _positive_int(payload.get("player_id"))
        if player_id:
            return player_id

    return _positive_int(text)


def with_qr(player: dict) -> dict:
    return {
        **player,
        "qr_code": encode_player(player["id"]),
        "profile_url": profile_url(player["id"]),
    }


async def generate(store: LeagueStore, player_id: Optional[int] = None,
                   team_id: Optional[int] = None):
    """QR payloads for a whole team (when team_id is given) or one player."""
    if team_id:
        players = await store.list_team_players(team_id)
        return [with_qr(p) for p in players]

    if not player_id:
        raise ValidationFailed("player_id o team_id es requerido")

    player = await store.get_player_with_team(player_id)
    if not player:
        raise NotFound("Jugador no encontrado")
    return with_qr(player)


async def register_scan(store: LeagueStore, qr_data: Any, game_id: Optional[int],
                        request: Optional[Request] = None) -> dict:
    """
    Mark the scanned player as present at a game.

    Scanning a player who is already marked present changes nothing and
    reports ``already_registered``.
    """
    if not qr_data or not game_id:
        raise ValidationFailed("qr_data y game_id son requeridos")

    player_id = decode_player_id(qr_data)
    if not player_id:
        raise ValidationFailed("QR invalido - no es un QR de jugador")

    player = await store.get_player_with_team(player_id)
    if not player:
        raise NotFound("Jugador no encontrado en la base de datos")

    game = await store.get_game(game_id)
    if not game:
        raise NotFound("Partido no encontrado")

    existing = await store.get_attendance(game_id, player_id)
    if existing and existing.get("attended"):
        return {
            "already_registered": True,
            "message": f"{player['name']} ya tiene asistencia registrada",
            "data": {"player": player, "game": game, "attended": True},
        }

    attendance = await store.mark_attended(game_id, player_id)
    log_roster_change("attendance_registered", request=request, game_id=game_id, player_id=player_id)

    return {
        "already_registered": False,
        "message": f"Asistencia registrada para {player['name']}",
        "data": {"player": player, "game": game, "attended": True, "attendance": attendance},
    }
