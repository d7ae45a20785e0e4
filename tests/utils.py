"""
Test utilities and helper functions.

``InMemoryStore`` mirrors ``league_api.store.LeagueStore`` method for method
so API tests can run without PostgreSQL. Seeding helpers return the stored
rows.
"""

from copy import deepcopy
from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional

from league_api.auth import hash_password
from league_api.errors import Conflict, SchemaDrift
from league_api.store import JOIN_REQUEST_COLUMNS, PLAYER_COLUMNS

TRANSFER_COLUMNS = ("is_transfer", "from_team_id", "requires_coordinator_approval")

PLAYER_DEFAULTS = {
    "jersey_number": None, "position": None, "user_id": None, "team_id": None,
    "photo_url": None, "phone": None, "personal_email": None, "birth_date": None,
    "address": None, "emergency_contact_name": None, "emergency_contact_phone": None,
    "blood_type": None, "seasons_played": None, "playing_since": None,
    "medical_conditions": None, "cedula_url": None,
    "profile_completed": False, "admin_verified": False,
}

PLAYER_TEAM_FIELDS = ("id", "name", "category", "logo_url", "color1", "color2", "coach_name")
REQUEST_TEAM_FIELDS = ("id", "name", "category", "logo_url", "color1", "color2")
STAT_FIELDS = ("touchdowns", "interceptions", "sacks", "extra_points", "flags")

BASE_TIME = datetime(2024, 1, 1, 12, 0, 0)


class InMemoryStore:
    """
    Dict-backed stand-in for ``LeagueStore``.

    Args:
        transfer_columns: What the application believes about the schema
        schema_has_transfer_columns: What the "database" actually has;
            inserting transfer columns without them raises ``SchemaDrift``
    """

    def __init__(self, transfer_columns: bool = True, schema_has_transfer_columns: Optional[bool] = None):
        self.transfer_columns = transfer_columns
        self.schema_has_transfer_columns = (
            transfer_columns if schema_has_transfer_columns is None else schema_has_transfer_columns
        )
        self.users: Dict[int, dict] = {}
        self.teams: Dict[int, dict] = {}
        self.players: Dict[int, dict] = {}
        self.join_requests: Dict[int, dict] = {}
        self.games: Dict[int, dict] = {}
        self.attendance: Dict[tuple, dict] = {}
        self.stats: List[dict] = []
        self.fail_player_inserts = False
        self._ids = 0

    def _next_id(self) -> int:
        self._ids += 1
        return self._ids

    def _now(self) -> datetime:
        # Strictly increasing so created_at ordering is deterministic
        return BASE_TIME + timedelta(seconds=self._ids)

    def _with_team(self, player: dict, key: str, fields: tuple) -> dict:
        data = deepcopy(player)
        team = self.teams.get(player.get("team_id"))
        data[key] = {f: team[f] for f in fields} if team else None
        return data

    # Seeding helpers

    def add_user(self, username: str, role: str = "player", email: Optional[str] = None,
                 password: Optional[str] = None, status: str = "active") -> dict:
        password = password or f"{username}_password_123"
        user = {
            "id": self._next_id(),
            "username": username,
            "email": email or f"{username}@example.com",
            "password_hash": hash_password(password),
            "role": role,
            "status": status,
            "created_at": self._now(),
            "last_login_at": None,
        }
        self.users[user["id"]] = user
        return {**user, "password": password}

    def add_team(self, name: str, category: Optional[str] = None, coach_id: Optional[int] = None, **extra) -> dict:
        team = {
            "id": self._next_id(),
            "name": name,
            "category": category,
            "coach_id": coach_id,
            "coach_name": extra.get("coach_name"),
            "logo_url": extra.get("logo_url"),
            "color1": extra.get("color1"),
            "color2": extra.get("color2"),
            "created_at": self._now(),
        }
        self.teams[team["id"]] = team
        return deepcopy(team)

    def add_player(self, name: str, **fields) -> dict:
        row = {**PLAYER_DEFAULTS, **fields, "name": name, "id": self._next_id()}
        row["created_at"] = self._now()
        self.players[row["id"]] = row
        return deepcopy(row)

    def add_game(self, home_team: str = "Halcones", away_team: str = "Tiburones", status: str = "scheduled") -> dict:
        game = {
            "id": self._next_id(),
            "home_team": home_team,
            "away_team": away_team,
            "status": status,
            "game_date": BASE_TIME.date(),
        }
        self.games[game["id"]] = game
        return deepcopy(game)

    def add_stats(self, game_id: int, player_id: int, **values) -> None:
        self.stats.append({"game_id": game_id, "player_id": player_id,
                           **{f: values.get(f, 0) for f in STAT_FIELDS}})

    # Users

    async def find_user_by_email_or_username(self, email, username):
        for user in self.users.values():
            if user["email"] == email or user["username"] == username:
                return {k: user[k] for k in ("id", "username", "email")}
        return None

    async def find_user_for_login(self, identifier):
        for user in self.users.values():
            if identifier in (user["username"], user["email"]):
                return deepcopy(user)
        return None

    async def get_user(self, user_id):
        user = self.users.get(user_id)
        if not user:
            return None
        return {k: v for k, v in user.items() if k != "password_hash"}

    async def create_user(self, username, email, password_hash, role, status="active"):
        if any(u["username"] == username or u["email"] == email for u in self.users.values()):
            raise Conflict("El usuario o email ya existe.")
        user = {
            "id": self._next_id(),
            "username": username,
            "email": email,
            "password_hash": password_hash,
            "role": role,
            "status": status,
            "created_at": self._now(),
            "last_login_at": None,
        }
        self.users[user["id"]] = user
        return {k: v for k, v in user.items() if k != "password_hash"}

    async def delete_user(self, user_id):
        self.users.pop(user_id, None)

    async def touch_last_login(self, user_id):
        self.users[user_id]["last_login_at"] = datetime.now()

    # Teams

    async def get_team(self, team_id):
        team = self.teams.get(team_id)
        return deepcopy(team) if team else None

    async def list_teams(self):
        return [deepcopy(t) for t in sorted(self.teams.values(), key=lambda t: t["name"])]

    # Players

    async def get_player(self, player_id):
        player = self.players.get(player_id)
        return deepcopy(player) if player else None

    async def get_player_with_team(self, player_id):
        player = self.players.get(player_id)
        return self._with_team(player, "team", PLAYER_TEAM_FIELDS) if player else None

    async def find_team_player_by_user(self, user_id, team_id):
        for p in self.players.values():
            if p["user_id"] == user_id and p["team_id"] == team_id:
                return {"id": p["id"], "user_id": p["user_id"]}
        return None

    async def find_team_player_by_name(self, name, team_id):
        wanted = name.strip().lower()
        for p in self.players.values():
            if p["name"].lower() == wanted and p["team_id"] == team_id:
                return {"id": p["id"], "user_id": p["user_id"]}
        return None

    def _user_rows(self, user_id) -> List[dict]:
        rows = [p for p in self.players.values() if p["user_id"] == user_id]
        return sorted(rows, key=lambda p: (p["created_at"], p["id"]))

    async def find_earliest_player_for_user(self, user_id):
        rows = self._user_rows(user_id)
        return deepcopy(rows[0]) if rows else None

    async def list_players_for_user(self, user_id):
        return [self._with_team(p, "team", PLAYER_TEAM_FIELDS) for p in self._user_rows(user_id)]

    async def list_team_players(self, team_id):
        rows = [p for p in self.players.values() if p["team_id"] == team_id]
        rows.sort(key=lambda p: (p["jersey_number"] is None, p["jersey_number"] or 0, p["id"]))
        return [self._with_team(p, "team", PLAYER_TEAM_FIELDS) for p in rows]

    async def create_player(self, fields):
        unknown = set(fields) - PLAYER_COLUMNS
        if unknown:
            raise ValueError(f"Unknown columns: {', '.join(sorted(unknown))}")
        if self.fail_player_inserts:
            raise RuntimeError("insert into players failed")
        return self.add_player(fields["name"], **{k: v for k, v in fields.items() if k != "name"})

    async def update_player(self, player_id, fields):
        player = self.players.get(player_id)
        if not player:
            return None
        player.update(fields)
        return deepcopy(player)

    async def update_players_for_user(self, user_id, fields):
        if not fields:
            return 0
        rows = self._user_rows(user_id)
        for row in rows:
            row.update(fields)
        return len(rows)

    # Join requests

    async def list_join_requests(self, team_id=None, player_user_id=None):
        rows = [
            r for r in self.join_requests.values()
            if (team_id is None or r["team_id"] == team_id)
            and (player_user_id is None or r["player_user_id"] == player_user_id)
        ]
        rows.sort(key=lambda r: (r["created_at"], r["id"]), reverse=True)
        return [self._with_team(r, "teams", REQUEST_TEAM_FIELDS) for r in rows]

    async def get_join_request(self, request_id):
        row = self.join_requests.get(request_id)
        return deepcopy(row) if row else None

    async def find_pending_join_request(self, player_user_id, team_id):
        for r in self.join_requests.values():
            if r["player_user_id"] == player_user_id and r["team_id"] == team_id and r["status"] == "pending":
                return {"id": r["id"]}
        return None

    async def create_join_request(self, fields: Dict[str, Any]):
        unknown = set(fields) - JOIN_REQUEST_COLUMNS
        if unknown:
            raise ValueError(f"Unknown columns: {', '.join(sorted(unknown))}")
        if not self.schema_has_transfer_columns and set(fields) & set(TRANSFER_COLUMNS):
            raise SchemaDrift('column "is_transfer" of relation "team_join_requests" does not exist')

        row = {
            "id": self._next_id(),
            "player_id": None, "phone": None, "message": None, "status": "pending",
        }
        if self.schema_has_transfer_columns:
            row.update(is_transfer=False, from_team_id=None, requires_coordinator_approval=False)
        row.update(fields)
        row["created_at"] = row["updated_at"] = self._now()
        self.join_requests[row["id"]] = row
        return deepcopy(row)

    async def update_join_request_status(self, request_id, status):
        row = self.join_requests.get(request_id)
        if not row:
            return None
        row["status"] = status
        row["updated_at"] = datetime.now()
        return deepcopy(row)

    # Games, attendance and stats

    async def get_game(self, game_id):
        game = self.games.get(game_id)
        return deepcopy(game) if game else None

    async def get_attendance(self, game_id, player_id):
        row = self.attendance.get((game_id, player_id))
        return deepcopy(row) if row else None

    async def mark_attended(self, game_id, player_id):
        key = (game_id, player_id)
        row = self.attendance.get(key)
        if row is None:
            row = {"id": self._next_id(), "game_id": game_id, "player_id": player_id,
                   "created_at": self._now()}
            self.attendance[key] = row
        row["attended"] = True
        row["updated_at"] = datetime.now()
        return deepcopy(row)

    async def count_games_attended(self, player_id):
        return sum(1 for (_, pid), row in self.attendance.items() if pid == player_id and row["attended"])

    async def sum_player_stats(self, player_id):
        rows = [s for s in self.stats if s["player_id"] == player_id]
        return {f: sum(s[f] or 0 for s in rows) for f in STAT_FIELDS}
