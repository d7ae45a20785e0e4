"""
SQL access for the league database.

``LeagueStore`` wraps a single pooled asyncpg connection. Services only talk
to the database through it, so every query the application issues lives in
this module. Rows are returned as plain dicts; related teams are nested under
a ``team`` (or ``teams`` for join requests) key.
"""

from typing import Dict, List, Optional, Any
import asyncpg

from league_api.errors import Conflict, SchemaDrift

# Columns services may write through the dynamic insert/update helpers
PLAYER_COLUMNS = frozenset({
    "name", "jersey_number", "position", "user_id", "team_id",
    "photo_url", "phone", "personal_email", "birth_date", "address",
    "emergency_contact_name", "emergency_contact_phone", "blood_type",
    "seasons_played", "playing_since", "medical_conditions", "cedula_url",
    "profile_completed", "admin_verified",
})

JOIN_REQUEST_COLUMNS = frozenset({
    "player_user_id", "player_id", "team_id", "player_name", "position",
    "jersey_number", "phone", "message", "status",
    "is_transfer", "from_team_id", "requires_coordinator_approval",
})

PLAYER_TEAM_SELECT = """
    SELECT p.*,
           t.id AS team__id, t.name AS team__name, t.category AS team__category,
           t.logo_url AS team__logo_url, t.color1 AS team__color1,
           t.color2 AS team__color2, t.coach_name AS team__coach_name
    FROM players p
    LEFT JOIN teams t ON t.id = p.team_id
"""

JOIN_REQUEST_SELECT = """
    SELECT r.*,
           t.id AS teams__id, t.name AS teams__name, t.category AS teams__category,
           t.logo_url AS teams__logo_url, t.color1 AS teams__color1,
           t.color2 AS teams__color2
    FROM team_join_requests r
    LEFT JOIN teams t ON t.id = r.team_id
"""


def _nest(row, key: str) -> Dict[str, Any]:
    """Fold ``key__*`` columns of a joined row into a nested dict."""
    prefix = f"{key}__"
    data = {}
    nested = {}
    for column, value in dict(row).items():
        if column.startswith(prefix):
            nested[column[len(prefix):]] = value
        else:
            data[column] = value
    data[key] = nested if nested.get("id") is not None else None
    return data


def _checked_columns(fields: Dict[str, Any], allowed: frozenset) -> List[str]:
    unknown = set(fields) - allowed
    if unknown:
        raise ValueError(f"Unknown columns: {', '.join(sorted(unknown))}")
    return list(fields)


class LeagueStore:
    """Queries against the league schema, bound to one connection."""

    def __init__(self, conn: asyncpg.Connection, transfer_columns: bool = True):
        self.conn = conn
        # Whether team_join_requests carries the transfer columns (migration 002)
        self.transfer_columns = transfer_columns

    # Users

    async def find_user_by_email_or_username(self, email: str, username: str) -> Optional[dict]:
        row = await self.conn.fetchrow(
            "SELECT id, username, email FROM users WHERE email = $1 OR username = $2 LIMIT 1",
            email, username
        )
        return dict(row) if row else None

    async def find_user_for_login(self, identifier: str) -> Optional[dict]:
        row = await self.conn.fetchrow(
            """
            SELECT id, username, email, password_hash, role, status, created_at, last_login_at
            FROM users
            WHERE username = $1 OR email = $1
            LIMIT 1
            """,
            identifier
        )
        return dict(row) if row else None

    async def get_user(self, user_id: int) -> Optional[dict]:
        row = await self.conn.fetchrow(
            """
            SELECT id, username, email, role, status, created_at, last_login_at
            FROM users WHERE id = $1
            """,
            user_id
        )
        return dict(row) if row else None

    async def create_user(self, username: str, email: str, password_hash: str,
                          role: str, status: str = "active") -> dict:
        try:
            row = await self.conn.fetchrow(
                """
                INSERT INTO users (username, email, password_hash, role, status)
                VALUES ($1, $2, $3, $4, $5)
                RETURNING id, username, email, role, status, created_at, last_login_at
                """,
                username, email, password_hash, role, status
            )
        except asyncpg.exceptions.UniqueViolationError:
            raise Conflict("El usuario o email ya existe.")
        return dict(row)

    async def delete_user(self, user_id: int) -> None:
        await self.conn.execute("DELETE FROM users WHERE id = $1", user_id)

    async def touch_last_login(self, user_id: int) -> None:
        await self.conn.execute("UPDATE users SET last_login_at = NOW() WHERE id = $1", user_id)

    # Teams

    async def get_team(self, team_id: int) -> Optional[dict]:
        row = await self.conn.fetchrow(
            """
            SELECT id, name, category, coach_id, coach_name, logo_url, color1, color2, created_at
            FROM teams WHERE id = $1
            """,
            team_id
        )
        return dict(row) if row else None

    async def list_teams(self) -> List[dict]:
        rows = await self.conn.fetch(
            """
            SELECT id, name, category, coach_id, coach_name, logo_url, color1, color2, created_at
            FROM teams ORDER BY name
            """
        )
        return [dict(row) for row in rows]

    # Players

    async def get_player(self, player_id: int) -> Optional[dict]:
        row = await self.conn.fetchrow("SELECT * FROM players WHERE id = $1", player_id)
        return dict(row) if row else None

    async def get_player_with_team(self, player_id: int) -> Optional[dict]:
        row = await self.conn.fetchrow(PLAYER_TEAM_SELECT + " WHERE p.id = $1", player_id)
        return _nest(row, "team") if row else None

    async def find_team_player_by_user(self, user_id: int, team_id: int) -> Optional[dict]:
        row = await self.conn.fetchrow(
            "SELECT id, user_id FROM players WHERE user_id = $1 AND team_id = $2 LIMIT 1",
            user_id, team_id
        )
        return dict(row) if row else None

    async def find_team_player_by_name(self, name: str, team_id: int) -> Optional[dict]:
        row = await self.conn.fetchrow(
            """
            SELECT id, user_id FROM players
            WHERE LOWER(name) = LOWER($1) AND team_id = $2
            LIMIT 1
            """,
            name.strip(), team_id
        )
        return dict(row) if row else None

    async def find_earliest_player_for_user(self, user_id: int) -> Optional[dict]:
        row = await self.conn.fetchrow(
            "SELECT * FROM players WHERE user_id = $1 ORDER BY created_at ASC, id ASC LIMIT 1",
            user_id
        )
        return dict(row) if row else None

    async def list_players_for_user(self, user_id: int) -> List[dict]:
        rows = await self.conn.fetch(
            PLAYER_TEAM_SELECT + " WHERE p.user_id = $1 ORDER BY p.created_at ASC, p.id ASC",
            user_id
        )
        return [_nest(row, "team") for row in rows]

    async def list_team_players(self, team_id: int) -> List[dict]:
        rows = await self.conn.fetch(
            PLAYER_TEAM_SELECT + " WHERE p.team_id = $1 ORDER BY p.jersey_number ASC NULLS LAST, p.id ASC",
            team_id
        )
        return [_nest(row, "team") for row in rows]

    async def create_player(self, fields: Dict[str, Any]) -> dict:
        columns = _checked_columns(fields, PLAYER_COLUMNS)
        placeholders = ", ".join(f"${i}" for i in range(1, len(columns) + 1))
        row = await self.conn.fetchrow(
            f"INSERT INTO players ({', '.join(columns)}) VALUES ({placeholders}) RETURNING *",
            *[fields[c] for c in columns]
        )
        return dict(row)

    async def update_player(self, player_id: int, fields: Dict[str, Any]) -> Optional[dict]:
        columns = _checked_columns(fields, PLAYER_COLUMNS)
        if not columns:
            return await self.get_player(player_id)
        assignments = ", ".join(f"{c} = ${i}" for i, c in enumerate(columns, start=1))
        row = await self.conn.fetchrow(
            f"UPDATE players SET {assignments} WHERE id = ${len(columns) + 1} RETURNING *",
            *[fields[c] for c in columns], player_id
        )
        return dict(row) if row else None

    async def update_players_for_user(self, user_id: int, fields: Dict[str, Any]) -> int:
        """Apply the same column values to every player row owned by a user."""
        columns = _checked_columns(fields, PLAYER_COLUMNS)
        if not columns:
            return 0
        assignments = ", ".join(f"{c} = ${i}" for i, c in enumerate(columns, start=1))
        result = await self.conn.execute(
            f"UPDATE players SET {assignments} WHERE user_id = ${len(columns) + 1}",
            *[fields[c] for c in columns], user_id
        )
        # asyncpg returns the command tag, e.g. "UPDATE 3"
        return int(result.split()[-1])

    # Join requests

    async def list_join_requests(self, team_id: Optional[int] = None,
                                 player_user_id: Optional[int] = None) -> List[dict]:
        conditions = []
        params = []
        if team_id is not None:
            params.append(team_id)
            conditions.append(f"r.team_id = ${len(params)}")
        if player_user_id is not None:
            params.append(player_user_id)
            conditions.append(f"r.player_user_id = ${len(params)}")

        query = JOIN_REQUEST_SELECT
        if conditions:
            query += " WHERE " + " AND ".join(conditions)
        query += " ORDER BY r.created_at DESC, r.id DESC"

        rows = await self.conn.fetch(query, *params)
        return [_nest(row, "teams") for row in rows]

    async def get_join_request(self, request_id: int) -> Optional[dict]:
        row = await self.conn.fetchrow("SELECT * FROM team_join_requests WHERE id = $1", request_id)
        return dict(row) if row else None

    async def find_pending_join_request(self, player_user_id: int, team_id: int) -> Optional[dict]:
        row = await self.conn.fetchrow(
            """
            SELECT id FROM team_join_requests
            WHERE player_user_id = $1 AND team_id = $2 AND status = 'pending'
            LIMIT 1
            """,
            player_user_id, team_id
        )
        return dict(row) if row else None

    async def create_join_request(self, fields: Dict[str, Any]) -> dict:
        columns = _checked_columns(fields, JOIN_REQUEST_COLUMNS)
        placeholders = ", ".join(f"${i}" for i in range(1, len(columns) + 1))
        try:
            row = await self.conn.fetchrow(
                f"INSERT INTO team_join_requests ({', '.join(columns)}) VALUES ({placeholders}) RETURNING *",
                *[fields[c] for c in columns]
            )
        except asyncpg.exceptions.UndefinedColumnError as e:
            raise SchemaDrift(str(e))
        return dict(row)

    async def update_join_request_status(self, request_id: int, status: str) -> Optional[dict]:
        row = await self.conn.fetchrow(
            """
            UPDATE team_join_requests
            SET status = $1, updated_at = NOW()
            WHERE id = $2
            RETURNING *
            """,
            status, request_id
        )
        return dict(row) if row else None

    # Games, attendance and stats

    async def get_game(self, game_id: int) -> Optional[dict]:
        row = await self.conn.fetchrow(
            "SELECT id, home_team, away_team, status, game_date FROM games WHERE id = $1",
            game_id
        )
        return dict(row) if row else None

    async def get_attendance(self, game_id: int, player_id: int) -> Optional[dict]:
        row = await self.conn.fetchrow(
            "SELECT * FROM game_attendance WHERE game_id = $1 AND player_id = $2",
            game_id, player_id
        )
        return dict(row) if row else None

    async def mark_attended(self, game_id: int, player_id: int) -> dict:
        row = await self.conn.fetchrow(
            """
            INSERT INTO game_attendance (game_id, player_id, attended, updated_at)
            VALUES ($1, $2, TRUE, NOW())
            ON CONFLICT (game_id, player_id)
            DO UPDATE SET attended = TRUE, updated_at = NOW()
            RETURNING *
            """,
            game_id, player_id
        )
        return dict(row)

    async def count_games_attended(self, player_id: int) -> int:
        return await self.conn.fetchval(
            "SELECT COUNT(*) FROM game_attendance WHERE player_id = $1 AND attended = TRUE",
            player_id
        )

    async def sum_player_stats(self, player_id: int) -> Dict[str, int]:
        row = await self.conn.fetchrow(
            """
            SELECT COALESCE(SUM(touchdowns), 0) AS touchdowns,
                   COALESCE(SUM(interceptions), 0) AS interceptions,
                   COALESCE(SUM(sacks), 0) AS sacks,
                   COALESCE(SUM(extra_points), 0) AS extra_points,
                   COALESCE(SUM(flags), 0) AS flags
            FROM player_game_stats
            WHERE player_id = $1
            """,
            player_id
        )
        return {key: int(value) for key, value in dict(row).items()}
