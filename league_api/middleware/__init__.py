"""
Middleware modules for the league API.
"""

from .security_headers import SecurityHeadersMiddleware

__all__ = [
    "SecurityHeadersMiddleware"
]
