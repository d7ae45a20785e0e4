"""
Database pool and request-scoped store dependency.
"""

import logging
from typing import AsyncIterator, Optional
import asyncpg

from league_api.store import LeagueStore

logger = logging.getLogger(__name__)

# Set by the application lifespan
db_pool: Optional[asyncpg.Pool] = None

# Whether migration 002 (join request transfer columns) is present
transfer_columns_available = True


def set_db_pool(pool):
    """Set the global database pool used by request handlers."""
    global db_pool
    db_pool = pool


async def detect_transfer_columns(conn: asyncpg.Connection) -> bool:
    """Check once whether team_join_requests has the transfer columns."""
    count = await conn.fetchval(
        """
        SELECT COUNT(*) FROM information_schema.columns
        WHERE table_schema = current_schema()
          AND table_name = 'team_join_requests'
          AND column_name IN ('is_transfer', 'from_team_id', 'requires_coordinator_approval')
        """
    )
    return count == 3


async def inspect_schema(pool: asyncpg.Pool) -> None:
    """Record optional schema capabilities at startup."""
    global transfer_columns_available
    async with pool.acquire() as conn:
        transfer_columns_available = await detect_transfer_columns(conn)

    if not transfer_columns_available:
        logger.warning(
            "team_join_requests lacks transfer columns; run migrations. "
            "Join requests will be stored without transfer data."
        )


async def get_store() -> AsyncIterator[LeagueStore]:
    """FastAPI dependency yielding a store bound to a pooled connection."""
    if db_pool is None:
        raise RuntimeError("Database pool is not initialized")
    async with db_pool.acquire() as conn:
        yield LeagueStore(conn, transfer_columns=transfer_columns_available)
