"""Apply the SQL files under ``migrations/`` in version order.

Applied versions are tracked in ``schema_migrations`` so re-running is a no-op.

Usage:
    python -m league_api.migrate
    python -m league_api.migrate --dry-run
    python -m league_api.migrate --status
"""
import argparse
import asyncio
import logging
import sys
from pathlib import Path
from typing import List, NamedTuple

import asyncpg

from league_api import config

logger = logging.getLogger("league_api.migrate")

DEFAULT_MIGRATIONS_DIR = Path(__file__).resolve().parent.parent / "migrations"


class Migration(NamedTuple):
    version: str
    path: Path

    @property
    def description(self) -> str:
        return self.path.stem.split("_", 1)[1].replace("_", " ")


def discover(migrations_dir: Path) -> List[Migration]:
    """Return migration files named ``<version>_<words>.sql``, sorted by version."""
    if not migrations_dir.is_dir():
        logger.warning("Migrations directory not found: %s", migrations_dir)
        return []

    found = []
    for path in sorted(migrations_dir.glob("*.sql")):
        version, sep, _ = path.stem.partition("_")
        if not sep or not version.isdigit():
            logger.warning("Skipping migration with unexpected name: %s", path.name)
            continue
        found.append(Migration(version, path))
    return found


async def applied_versions(conn: asyncpg.Connection) -> set:
    await conn.execute(
        """
        CREATE TABLE IF NOT EXISTS schema_migrations (
            version TEXT PRIMARY KEY,
            description TEXT,
            applied_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
        )
        """
    )
    rows = await conn.fetch("SELECT version FROM schema_migrations")
    return {row["version"] for row in rows}


async def apply_pending(conn: asyncpg.Connection, migrations_dir: Path = DEFAULT_MIGRATIONS_DIR, dry_run: bool = False) -> List[Migration]:
    """Apply every migration not yet recorded, each in its own transaction."""
    done = await applied_versions(conn)
    pending = [m for m in discover(migrations_dir) if m.version not in done]

    for migration in pending:
        if dry_run:
            logger.info("Would apply %s (%s)", migration.version, migration.description)
            continue

        logger.info("Applying %s (%s)", migration.version, migration.description)
        async with conn.transaction():
            await conn.execute(migration.path.read_text())
            await conn.execute(
                "INSERT INTO schema_migrations (version, description) VALUES ($1, $2)",
                migration.version,
                migration.description
            )

    return pending


async def run(database_url: str, migrations_dir: Path, dry_run: bool, status_only: bool) -> None:
    logger.info("Database: %s", database_url.split("@")[-1])
    conn = await asyncpg.connect(database_url)
    try:
        if status_only:
            done = await applied_versions(conn)
            for migration in discover(migrations_dir):
                state = "applied" if migration.version in done else "pending"
                logger.info("%s %-8s %s", migration.version, state, migration.description)
            return

        pending = await apply_pending(conn, migrations_dir, dry_run=dry_run)
        if not pending:
            logger.info("Schema is up to date")
        elif not dry_run:
            logger.info("Applied %d migration(s)", len(pending))
    finally:
        await conn.close()


def main():
    parser = argparse.ArgumentParser(description="Apply league database migrations")
    parser.add_argument("--dry-run", action="store_true", help="List pending migrations without applying them")
    parser.add_argument("--status", action="store_true", help="Show applied and pending migrations")
    parser.add_argument("--database-url", default=config.DATABASE_URL, help="Defaults to DATABASE_URL")
    parser.add_argument("--migrations-dir", type=Path, default=DEFAULT_MIGRATIONS_DIR)
    args = parser.parse_args()

    logging.basicConfig(level=config.LOG_LEVEL, format="%(levelname)s %(message)s")

    try:
        asyncio.run(run(args.database_url, args.migrations_dir, args.dry_run, args.status))
    except (OSError, asyncpg.PostgresError) as e:
        logger.error("Migration failed: %s: %s", type(e).__name__, e)
        sys.exit(1)


if __name__ == "__main__":
    main()
