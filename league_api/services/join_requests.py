"""
Team join and transfer requests.

A player asks to join a team (or to transfer from another one); the target
team's coach accepts or rejects. Transfers between teams of the same category
branch are routed to ``pending_coordinator`` and need the league coordinator's
sign-off in addition to the coach's.

None of these steps run in a transaction. The duplicate-request check is a
plain read before the insert, so two concurrent creates for the same player
and team can both succeed.
"""

import logging
from typing import Optional

from fastapi import Request

from league_api.errors import Forbidden, NotFound, SchemaDrift, ValidationFailed
from league_api.models.join_request import JoinRequestCreate, JoinRequestDecision
from league_api.store import LeagueStore
from league_api.utils.audit_log import log_authorization_failure, log_roster_change

logger = logging.getLogger(__name__)

STATUS_PENDING = "pending"
STATUS_PENDING_COORDINATOR = "pending_coordinator"
STATUS_ACCEPTED = "accepted"
STATUS_REJECTED = "rejected"

DECISION_STATUSES = (STATUS_ACCEPTED, STATUS_REJECTED)
OPEN_STATUSES = (STATUS_PENDING, STATUS_PENDING_COORDINATOR)

BRANCHES = ("femenil", "varonil", "mixto", "teens")
UNKNOWN_BRANCH = "unknown"

# Profile columns copied onto the new player row when a player joins an additional team
CLONED_PROFILE_FIELDS = (
    "photo_url", "phone", "personal_email", "birth_date", "address",
    "emergency_contact_name", "emergency_contact_phone", "blood_type",
    "seasons_played", "playing_since", "medical_conditions", "cedula_url",
)


def category_branch(category: Optional[str]) -> str:
    """Map a team category such as 'Varonil A' to its branch."""
    if not category:
        return UNKNOWN_BRANCH
    lowered = category.lower()
    for branch in BRANCHES:
        if lowered.startswith(branch):
            return branch
    return UNKNOWN_BRANCH


def requires_coordinator_approval(from_category: Optional[str], to_category: Optional[str]) -> bool:
    """Same-branch transfers need the coordinator; both categories must be set."""
    if not from_category or not to_category:
        return False
    return category_branch(from_category) == category_branch(to_category)


async def list_requests(store: LeagueStore, team_id: Optional[int] = None,
                        player_user_id: Optional[int] = None) -> list:
    return await store.list_join_requests(team_id=team_id, player_user_id=player_user_id)


async def _already_on_team(store: LeagueStore, user_id: Optional[int], name: str, team_id: int) -> Optional[dict]:
    """Find the player's row on a team by account, falling back to name."""
    existing = None
    if user_id:
        existing = await store.find_team_player_by_user(user_id, team_id)
    if not existing:
        existing = await store.find_team_player_by_name(name, team_id)
    return existing


async def create_request(store: LeagueStore, body: JoinRequestCreate) -> dict:
    """
    Create a join or transfer request.

    Returns:
        Dict with the stored request under ``data`` and a ``message``

    Raises:
        ValidationFailed: Missing fields, a ``player_id`` owned by another
            user, already on the team, or a pending request for the same
            team already exists
    """
    if (not body.player_user_id or not body.team_id or not body.player_name
            or not body.position or not body.jersey_number):
        raise ValidationFailed("Faltan campos requeridos")

    player_name = body.player_name.strip()

    if body.player_id:
        player = await store.get_player(body.player_id)
        if not player or player["user_id"] != body.player_user_id:
            raise ValidationFailed("El jugador no pertenece a este usuario")

    if await _already_on_team(store, body.player_user_id, player_name, body.team_id):
        raise ValidationFailed("Ya perteneces a este equipo.")

    if await store.find_pending_join_request(body.player_user_id, body.team_id):
        raise ValidationFailed("Ya tienes una solicitud pendiente para este equipo")

    is_transfer = bool(body.is_transfer)
    needs_coordinator = False
    if is_transfer and body.from_team_id:
        from_team = await store.get_team(body.from_team_id)
        to_team = await store.get_team(body.team_id)
        needs_coordinator = requires_coordinator_approval(
            from_team["category"] if from_team else None,
            to_team["category"] if to_team else None
        )

    base_fields = {
        "player_user_id": body.player_user_id,
        "player_id": body.player_id or None,
        "team_id": body.team_id,
        "player_name": player_name,
        "position": body.position,
        "jersey_number": body.jersey_number,
        "phone": body.phone or None,
        "message": body.message or None,
    }
    fields = dict(
        base_fields,
        status=STATUS_PENDING_COORDINATOR if needs_coordinator else STATUS_PENDING,
        is_transfer=is_transfer,
        from_team_id=body.from_team_id or None,
        requires_coordinator_approval=needs_coordinator,
    )

    degraded = not store.transfer_columns
    if not degraded:
        try:
            created = await store.create_join_request(fields)
        except SchemaDrift as e:
            logger.warning("Join request insert hit schema drift, retrying without transfer columns: %s", e)
            degraded = True

    if degraded:
        # Older schema: transfer data and coordinator routing are dropped
        created = await store.create_join_request(dict(base_fields, status=STATUS_PENDING))
        return {
            "data": created,
            "message": (
                "Solicitud de transferencia enviada exitosamente"
                if is_transfer else "Solicitud enviada exitosamente"
            ),
        }

    if needs_coordinator:
        message = (
            "Solicitud de transferencia enviada. "
            "Requiere aprobacion del coordinador de liga y ambos capitanes."
        )
    elif is_transfer:
        message = "Solicitud de transferencia enviada exitosamente"
    else:
        message = "Solicitud enviada exitosamente"

    return {"data": created, "message": message}


async def _assign_to_team(store: LeagueStore, join_request: dict) -> Optional[dict]:
    """
    Place the requesting player on the request's team.

    Resolution order:
      1. Already on the team (by account or by name): refresh position and
         jersey, and link the account if the row has none.
      2. Transfer of a known player row: move that row to the new team.
      3. Otherwise copy the player's profile onto a new row for the team.
    """
    team_id = join_request["team_id"]
    user_id = join_request.get("player_user_id")

    existing = await _already_on_team(store, user_id, join_request["player_name"], team_id)
    if existing:
        patch = {
            "position": join_request["position"],
            "jersey_number": join_request["jersey_number"],
        }
        if not existing.get("user_id") and user_id:
            patch["user_id"] = user_id
        return await store.update_player(existing["id"], patch)

    if join_request.get("is_transfer") and join_request.get("player_id"):
        return await store.update_player(join_request["player_id"], {
            "team_id": team_id,
            "position": join_request["position"],
            "jersey_number": join_request["jersey_number"],
        })

    original = None
    if join_request.get("player_id"):
        original = await store.get_player(join_request["player_id"])
    if not original and user_id:
        original = await store.find_earliest_player_for_user(user_id)

    original = original or {}
    new_row = {
        "name": original.get("name") or join_request["player_name"],
        "team_id": team_id,
        "position": join_request["position"],
        "jersey_number": join_request["jersey_number"],
        "user_id": original.get("user_id") or user_id,
        "profile_completed": bool(original.get("profile_completed")),
    }
    for field in CLONED_PROFILE_FIELDS:
        new_row[field] = original.get(field)
    return await store.create_player(new_row)


async def decide_request(
    store: LeagueStore,
    body: JoinRequestDecision,
    request: Optional[Request] = None
) -> dict:
    """
    Accept or reject a join request as the target team's coach.

    The status update and the roster change are separate writes. A failure
    while assigning the player is logged and the request stays accepted.
    Other pending requests by the same player are left untouched, since a
    player may belong to several teams.
    """
    if not body.id or not body.status or not body.coach_user_id:
        raise ValidationFailed("Faltan campos requeridos")

    if body.status not in DECISION_STATUSES:
        raise ValidationFailed("Estado invalido")

    join_request = await store.get_join_request(body.id)
    if not join_request:
        raise NotFound("Solicitud no encontrada")

    team = await store.get_team(join_request["team_id"])
    if not team or team["coach_id"] != body.coach_user_id:
        log_authorization_failure(
            actor_id=body.coach_user_id,
            resource=f"team_join_request:{body.id}",
            action=body.status,
            request=request,
            reason="coach does not own the target team"
        )
        raise Forbidden("No tienes permisos para gestionar solicitudes de este equipo")

    # accepted and rejected are final
    if join_request["status"] not in OPEN_STATUSES:
        raise ValidationFailed("La solicitud ya fue procesada")

    await store.update_join_request_status(body.id, body.status)

    is_transfer = bool(join_request.get("is_transfer"))

    if body.status == STATUS_ACCEPTED:
        try:
            await _assign_to_team(store, join_request)
        except Exception:
            logger.exception("Error assigning player for join request %s", body.id)

    log_roster_change(
        f"join_request_{body.status}",
        actor_id=body.coach_user_id,
        request=request,
        request_id=body.id,
        team_id=join_request["team_id"],
        player_user_id=join_request.get("player_user_id"),
        transfer=is_transfer,
    )

    if body.status == STATUS_ACCEPTED:
        message = (
            "Transferencia completada exitosamente"
            if is_transfer else "Jugador aceptado al equipo exitosamente"
        )
    else:
        message = "Solicitud rechazada"

    return {"message": message}
