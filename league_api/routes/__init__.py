"""
API route modules.
"""

from .auth import router as auth_router
from .join_requests import router as join_requests_router
from .player import router as player_router
from .players import router as players_router
from .qr import router as qr_router
from .teams import router as teams_router

__all__ = [
    "auth_router",
    "join_requests_router",
    "player_router",
    "players_router",
    "qr_router",
    "teams_router"
]
