"""
Account registration.

Creates a user and, for players, the team-less player row they will later
use to request a spot on a team.
"""

import logging
from typing import Optional

from league_api.auth.password import hash_password
from league_api.errors import Conflict, PersistenceError, ValidationFailed
from league_api.models.user import RegisterRequest
from league_api.services.saga import Saga
from league_api.store import LeagueStore

logger = logging.getLogger(__name__)

DEFAULT_POSITION = "QB"

PLAYER_CREATED_MESSAGE = (
    "Cuenta de jugador creada exitosamente. "
    "Ya puedes iniciar sesion y solicitar unirte a un equipo."
)
COACH_CREATED_MESSAGE = "Usuario registrado exitosamente. Ya puedes iniciar sesion."


def normalize_role(role: Optional[str]) -> str:
    """Anything other than 'player' registers as a coach."""
    return "player" if role == "player" else "coach"


def validate_registration(request: RegisterRequest) -> str:
    """
    Check required fields and return the normalized role.

    Raises:
        ValidationFailed: On missing credentials or invalid player fields
    """
    if not request.username or not request.email or not request.password:
        raise ValidationFailed("Todos los campos son requeridos.")

    role = normalize_role(request.role)
    if role == "player":
        if not request.player_name or not request.player_name.strip():
            raise ValidationFailed("El nombre completo es requerido para jugadores.")
        if request.jersey_number is None or not 1 <= request.jersey_number <= 99:
            raise ValidationFailed("El numero de jersey debe ser entre 1 y 99.")
    return role


async def register_account(store: LeagueStore, request: RegisterRequest) -> dict:
    """
    Register a coach or player account.

    For players the user insert and the player insert form a two-step saga:
    if the player row cannot be created the user is deleted again.

    Returns:
        Dict with the created ``user`` (no password hash), the ``player`` row
        (players only) and the success ``message``
    """
    role = validate_registration(request)

    existing = await store.find_user_by_email_or_username(request.email, request.username)
    if existing:
        raise Conflict("El usuario o email ya existe.")

    password_hash = hash_password(request.password)
    saga = Saga("register")

    try:
        user = await saga.step(
            lambda: store.create_user(request.username, request.email, password_hash, role),
            compensation=lambda created: store.delete_user(created["id"])
        )
    except Conflict:
        # Lost a race with a concurrent registration for the same account
        raise
    except Exception:
        logger.exception("Error creating user %s", request.username)
        raise PersistenceError("Error al crear el usuario.")

    player = None
    if role == "player":
        player_fields = {
            "name": request.player_name.strip(),
            "position": request.position or DEFAULT_POSITION,
            "jersey_number": request.jersey_number,
            "user_id": user["id"],
        }
        try:
            player = await saga.step(lambda: store.create_player(player_fields))
        except Exception as e:
            logger.error("Error creating player record for user %s: %s", user["id"], e)
            raise PersistenceError(f"Error al crear el perfil de jugador: {e}")

    return {
        "user": user,
        "player": player,
        "message": PLAYER_CREATED_MESSAGE if role == "player" else COACH_CREATED_MESSAGE,
    }
