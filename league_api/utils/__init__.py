"""
Utility modules for the league API.
"""

from .audit_log import log_auth_event, log_authorization_failure, log_roster_change

__all__ = [
    "log_auth_event",
    "log_authorization_failure",
    "log_roster_change"
]
