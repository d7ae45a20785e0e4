"""
Player profile reads and updates.

A player account may own several player rows, one per team. Personal and
medical data is shared: updates are written to every row the user owns, and
reads present the row that has a team (or the earliest one) as the profile.
"""

import re
from dataclasses import dataclass, fields as dataclass_fields
from datetime import date
from typing import Any, Dict, List, Optional, Tuple

from league_api.errors import NotFound, ValidationFailed
from league_api.models.player import ProfileUpdate
from league_api.store import LeagueStore

YEAR_ONLY = re.compile(r"^\d{4}$")


def normalize_playing_since(value: Any) -> date:
    """
    Parse 'playing since' input into a date.

    A bare year such as "2023" becomes January 1st of that year.
    """
    text = str(value).strip()
    if YEAR_ONLY.match(text):
        text = f"{text}-01-01"
    try:
        return date.fromisoformat(text[:10])
    except ValueError:
        raise ValidationFailed("Fecha invalida para 'jugando desde'")


def parse_date(value: str) -> date:
    try:
        return date.fromisoformat(str(value).strip()[:10])
    except ValueError:
        raise ValidationFailed("Fecha de nacimiento invalida")


@dataclass
class ProfilePatch:
    """
    Sparse set of storage-column changes for a player profile.

    ``None`` means "leave unchanged". Only the fields that are set are
    written, and ``profile_completed`` is always written as true.
    """

    birth_date: Optional[date] = None
    phone: Optional[str] = None
    personal_email: Optional[str] = None
    address: Optional[str] = None
    emergency_contact_name: Optional[str] = None
    emergency_contact_phone: Optional[str] = None
    blood_type: Optional[str] = None
    seasons_played: Optional[int] = None
    playing_since: Optional[date] = None
    medical_conditions: Optional[str] = None
    cedula_url: Optional[str] = None
    photo_url: Optional[str] = None

    @classmethod
    def from_update(cls, update: ProfileUpdate) -> "ProfilePatch":
        """Translate the public update body into storage columns."""
        patch = cls()
        # Text fields: empty strings count as not provided
        if update.birth_date:
            patch.birth_date = parse_date(update.birth_date)
        if update.phone:
            patch.phone = update.phone
        if update.personal_email:
            patch.personal_email = update.personal_email
        if update.address:
            patch.address = update.address
        if update.emergency_contact:
            patch.emergency_contact_name = update.emergency_contact
        if update.emergency_phone:
            patch.emergency_contact_phone = update.emergency_phone
        if update.blood_type:
            patch.blood_type = update.blood_type
        if update.playing_since:
            patch.playing_since = normalize_playing_since(update.playing_since)
        if update.cedula_url:
            patch.cedula_url = update.cedula_url
        if update.photo_url:
            patch.photo_url = update.photo_url

        provided = update.model_fields_set
        if "seasons_played" in provided and update.seasons_played is not None:
            patch.seasons_played = int(update.seasons_played)
        if "medical_conditions" in provided and update.medical_conditions is not None:
            patch.medical_conditions = update.medical_conditions
        return patch

    def to_columns(self) -> Dict[str, Any]:
        columns = {
            f.name: getattr(self, f.name)
            for f in dataclass_fields(self)
            if getattr(self, f.name) is not None
        }
        columns["profile_completed"] = True
        return columns


def present_profile(row: dict) -> dict:
    """Add the public field names the profile page uses."""
    playing_since = row.get("playing_since")
    return {
        **row,
        "emergency_contact": row.get("emergency_contact_name") or "",
        "emergency_phone": row.get("emergency_contact_phone") or "",
        "playing_since": str(playing_since)[:4] if playing_since else "",
    }


def summarize_memberships(rows: List[dict]) -> Tuple[Optional[dict], List[dict]]:
    """Pick the primary row and list the user's team memberships."""
    if not rows:
        return None, []
    primary = next((r for r in rows if r.get("team_id") is not None), rows[0])
    player_teams = [
        {
            "player_row_id": r["id"],
            "team_id": r["team_id"],
            "team": r["team"],
            "position": r.get("position"),
            "jersey_number": r.get("jersey_number"),
        }
        for r in rows
        if r.get("team_id") is not None and r.get("team")
    ]
    return primary, player_teams


async def get_profile(store: LeagueStore, user_id: Optional[int]) -> dict:
    if not user_id:
        raise ValidationFailed("ID de usuario requerido")

    rows = await store.list_players_for_user(user_id)
    primary, player_teams = summarize_memberships(rows)
    if primary is None:
        raise NotFound("Perfil de jugador no encontrado")

    return {"data": present_profile(primary), "playerTeams": player_teams}


async def update_profile(store: LeagueStore, update: ProfileUpdate, user_id: Optional[int]) -> dict:
    """
    Apply a sparse profile update to every player row of a user.

    Returns:
        Same shape as ``get_profile`` plus a success message
    """
    if not user_id:
        raise ValidationFailed("ID de usuario requerido")

    if not await store.find_earliest_player_for_user(user_id):
        raise NotFound("Jugador no encontrado")

    patch = ProfilePatch.from_update(update)
    await store.update_players_for_user(user_id, patch.to_columns())

    rows = await store.list_players_for_user(user_id)
    primary, player_teams = summarize_memberships(rows)

    return {
        "data": present_profile(primary) if primary else None,
        "playerTeams": player_teams,
        "message": "Perfil actualizado exitosamente",
    }
