"""
FastAPI dependencies for authentication and caller identity.

Clients send the acting user's id in request bodies and query strings. When a
bearer token accompanies the request, the token's user is the acting user and
a disagreeing id is rejected. Without a token the supplied id is used as-is,
unless REQUIRE_AUTH_TOKEN is enabled.
"""

from typing import Optional
from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jwt.exceptions import InvalidTokenError

from league_api import config
from league_api.database import get_store
from league_api.errors import Forbidden, Unauthorized
from league_api.store import LeagueStore
from league_api.utils.audit_log import log_authorization_failure
from .jwt import decode_token

# HTTP Bearer token scheme
security = HTTPBearer(auto_error=False)


async def _load_token_user(token: str, store: LeagueStore) -> dict:
    try:
        payload = decode_token(token)
    except InvalidTokenError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Token invalido o expirado",
            headers={"WWW-Authenticate": "Bearer"},
        )

    if payload.get("type") != "access" or not str(payload.get("sub", "")).isdigit():
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Token invalido",
            headers={"WWW-Authenticate": "Bearer"},
        )

    user = await store.get_user(int(payload["sub"]))
    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Usuario no encontrado",
            headers={"WWW-Authenticate": "Bearer"},
        )

    if user["status"] == "suspended":
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Cuenta suspendida"
        )

    return user


async def get_current_user_optional(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    store: LeagueStore = Depends(get_store)
) -> Optional[dict]:
    """
    Get the user behind the bearer token, if one was sent.

    A token that is present but invalid is an error, not an anonymous call.
    """
    if not credentials:
        return None
    return await _load_token_user(credentials.credentials, store)


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    store: LeagueStore = Depends(get_store)
) -> dict:
    """
    Get the current authenticated user (required).

    Raises:
        HTTPException: 401 if no valid token is provided
    """
    if not credentials:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="No autenticado",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return await _load_token_user(credentials.credentials, store)


def resolve_acting_user(
    claimed_id: Optional[int],
    token_user: Optional[dict],
    request: Optional[Request] = None
) -> Optional[int]:
    """
    Decide which user id a request acts as.

    Args:
        claimed_id: Id sent by the client in the body or query string
        token_user: User behind the bearer token, if any
        request: Used for audit logging

    Returns:
        The acting user id (may be None if neither is given)

    Raises:
        Forbidden: Token user and claimed id disagree
        Unauthorized: No token while REQUIRE_AUTH_TOKEN is enabled
    """
    if token_user:
        if claimed_id and claimed_id != token_user["id"]:
            log_authorization_failure(
                actor_id=token_user["id"],
                resource=f"user:{claimed_id}",
                action="act_as",
                request=request,
                reason="claimed user id does not match token"
            )
            raise Forbidden("La identidad enviada no coincide con la sesion")
        return token_user["id"]

    if config.REQUIRE_AUTH_TOKEN:
        raise Unauthorized("No autenticado")
    return claimed_id
