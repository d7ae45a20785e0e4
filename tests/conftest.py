"""
Pytest configuration and fixtures for testing.

Provides fixtures for:
- An in-memory store standing in for PostgreSQL
- An HTTP client bound to the app with the store dependency overridden
- Seeded league data (teams, coach, player) and access tokens
"""

import os
from typing import AsyncGenerator, Dict

# Set test environment variables before importing app
os.environ["JWT_SECRET"] = "test-secret-key-do-not-use-in-production"
os.environ["BCRYPT_WORK_FACTOR"] = "4"
os.environ["PUBLIC_BASE_URL"] = "https://liga.example.com"
os.environ["REQUIRE_AUTH_TOKEN"] = "false"

import pytest
from httpx import ASGITransport, AsyncClient

from league_api.app import app
from league_api.auth import create_access_token
from league_api.database import get_store
from tests.utils import InMemoryStore


@pytest.fixture
def store() -> InMemoryStore:
    """Fresh in-memory league data for each test."""
    return InMemoryStore()


@pytest.fixture
async def async_client(store) -> AsyncGenerator[AsyncClient, None]:
    """Create an async HTTP client for testing."""
    async def override_store():
        yield store

    app.dependency_overrides[get_store] = override_store
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client
    app.dependency_overrides.clear()


@pytest.fixture
def test_coach(store) -> Dict:
    """A coach account."""
    return store.add_user("coach1", role="coach")


@pytest.fixture
def other_coach(store) -> Dict:
    """A second coach, owning a different team."""
    return store.add_user("coach2", role="coach")


@pytest.fixture
def varonil_team(store, test_coach) -> Dict:
    return store.add_team("Halcones", category="Varonil A", coach_id=test_coach["id"], coach_name="Coach Uno")


@pytest.fixture
def varonil_b_team(store, other_coach) -> Dict:
    return store.add_team("Lobos", category="Varonil B", coach_id=other_coach["id"])


@pytest.fixture
def femenil_team(store, other_coach) -> Dict:
    return store.add_team("Panteras", category="Femenil", coach_id=other_coach["id"])


@pytest.fixture
def test_player(store) -> Dict:
    """A player account with its team-less player row, as registration leaves it."""
    user = store.add_user("player1", role="player")
    row = store.add_player(
        "Ana Lopez",
        user_id=user["id"],
        position="WR",
        jersey_number=7,
        phone="5551234567",
        blood_type="O+",
        birth_date=None,
        medical_conditions="Asma",
        profile_completed=True,
    )
    return {**user, "player": row}


@pytest.fixture
def coach_token(test_coach) -> str:
    """Create a JWT token for the test coach."""
    return create_access_token(test_coach["id"], test_coach["role"])


@pytest.fixture
def player_token(test_player) -> str:
    """Create a JWT token for the test player."""
    return create_access_token(test_player["id"], test_player["role"])
