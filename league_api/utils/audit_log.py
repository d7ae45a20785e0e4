"""
Audit trail for the league API.

Entries go to the ``audit`` logger as one pipe-separated line each:
account events (register, login, token refresh), ownership failures and
roster or attendance changes. Output is handled by the application's logging
configuration.
"""

import logging
from typing import Optional
from fastapi import Request

audit_logger = logging.getLogger("audit")
audit_logger.setLevel(logging.INFO)


def client_ip(request: Optional[Request]) -> str:
    """First X-Forwarded-For hop, else the socket peer."""
    if not request:
        return "unknown"

    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        return forwarded.split(",")[0].strip()

    return request.client.host if request.client else "unknown"


def _record(tag: str, request: Optional[Request], level: int = logging.INFO, **fields):
    parts = [tag]
    parts.extend(f"{key}={value}" for key, value in fields.items() if value is not None)
    parts.append(f"ip={client_ip(request)}")
    audit_logger.log(level, " | ".join(parts))


def log_auth_event(
    event_type: str,
    user_id: Optional[str],
    username: Optional[str],
    success: bool,
    request: Optional[Request] = None,
    details: Optional[str] = None
):
    """
    Record a register, login or token_refresh attempt.

    Failures are logged at WARNING so repeated bad logins stand out.
    """
    _record(
        f"AUTH_EVENT | {event_type.upper()} | {'SUCCESS' if success else 'FAILURE'}",
        request,
        logging.INFO if success else logging.WARNING,
        user_id=user_id or "N/A",
        username=username or "N/A",
        details=details,
    )


def log_authorization_failure(
    actor_id: int,
    resource: str,
    action: str,
    request: Optional[Request] = None,
    reason: Optional[str] = None
):
    """Record a 403, e.g. resource="team_join_request:12" action="accepted"."""
    _record("AUTHZ_FAILURE", request, logging.WARNING,
            actor_id=actor_id, resource=resource, action=action, reason=reason)


def log_roster_change(
    operation: str,
    actor_id: Optional[int] = None,
    request: Optional[Request] = None,
    **details
):
    """Record a join request decision or an attendance mark."""
    _record(f"ROSTER_CHANGE | {operation.upper()}", request, actor_id=actor_id or "N/A", **details)
