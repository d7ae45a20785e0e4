"""
Public player pages and team rosters.
"""

from league_api.errors import NotFound
from league_api.services.join_requests import category_branch
from league_api.store import LeagueStore

PUBLIC_PLAYER_FIELDS = (
    "id", "name", "jersey_number", "position", "photo_url", "team_id",
    "seasons_played", "playing_since", "team",
)


async def public_player(store: LeagueStore, player_id: int) -> dict:
    """Public card data: profile basics, attendance count and stat totals."""
    player = await store.get_player_with_team(player_id)
    if not player:
        raise NotFound("Jugador no encontrado")

    data = {field: player.get(field) for field in PUBLIC_PLAYER_FIELDS}
    data["games_played"] = await store.count_games_attended(player_id) or 0
    data["stats"] = await store.sum_player_stats(player_id)
    return data


async def list_teams(store: LeagueStore) -> list:
    teams = await store.list_teams()
    return [{**team, "branch": category_branch(team.get("category"))} for team in teams]


async def team_roster(store: LeagueStore, team_id: int) -> list:
    team = await store.get_team(team_id)
    if not team:
        raise NotFound("Equipo no encontrado")
    return await store.list_team_players(team_id)
