"""Shared test fixtures."""

from datetime import UTC, datetime, timedelta

import pytest

from picklebook.core.storage import InMemoryStorage
from picklebook.models.game import Game, Location, Player
from picklebook.services.cache import CacheService
from picklebook.services.mock_api import MockApi

START = datetime(2026, 11, 2, 18, 0, tzinfo=UTC)


def make_game(game_id: str, max_players: int, players: int = 0, skill_level: str | None = None) -> Game:
    return Game(
        id=game_id,
        title=f"Test game {game_id}",
        start_time=START,
        end_time=START + timedelta(hours=2),
        location=Location(
            id=f"court-{game_id}",
            name=f"Court {game_id}",
            address="1 Baseline Rd",
            city="Austin",
            state="TX",
            zip_code="78701",
        ),
        players=[
            Player(id=f"{game_id}-p{i}", name=f"Player {i}", email=f"p{i}@example.com") for i in range(players)
        ],
        max_players=max_players,
        skill_level=skill_level,
        price=8,
    )


class FakeClock:
    """Deterministic replacement for time.time()."""

    def __init__(self, start: float = 1_790_000_000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def catalogue() -> dict[str, Game]:
    games = [
        make_game("g4", max_players=4),
        make_game("g2", max_players=2),
        make_game("busy", max_players=3, players=2),
        make_game("adv", max_players=10, skill_level="Advanced"),
    ]
    return {g.id: g for g in games}


@pytest.fixture
def storage() -> InMemoryStorage:
    return InMemoryStorage()


@pytest.fixture
def mock_api(storage, catalogue) -> MockApi:
    return MockApi(storage, games=catalogue, network_delay=0)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
async def cache(storage, clock):
    service = CacheService(storage, namespace="cache_", clock=clock)
    yield service
    await service.close()
