"""Game catalogue routes: listing with live occupancy, detail, registered players.

The listing is served through the cache; booking routes invalidate it.
"""

from fastapi import APIRouter, Depends

from picklebook.core.config import settings
from picklebook.core.dependencies import get_cache, get_mock_api
from picklebook.schemas import GameOut, RegisteredPlayer
from picklebook.services.cache import CacheConfig, CacheService
from picklebook.services.games import to_game_out
from picklebook.services.mock_api import MockApi

router = APIRouter(prefix="/games", tags=["games"])

GAMES_CACHE_KEY = "games"


async def build_listing(mock_api: MockApi) -> list[dict]:
    rows = []
    for game in mock_api.games.values():
        booked = await mock_api.get_game_bookings(game.id)
        rows.append(to_game_out(game, booked).model_dump(mode="json"))
    return rows


@router.get("", response_model=list[GameOut])
async def list_games(
    mock_api: MockApi = Depends(get_mock_api),
    cache: CacheService = Depends(get_cache),
):
    return await cache.get(
        GAMES_CACHE_KEY,
        lambda: build_listing(mock_api),
        CacheConfig(ttl=settings.games_cache_ttl_seconds),
    )


@router.get("/{game_id}", response_model=GameOut)
async def get_game(game_id: str, mock_api: MockApi = Depends(get_mock_api)):
    game = mock_api.get_game(game_id)
    return to_game_out(game, await mock_api.get_game_bookings(game_id))


@router.get("/{game_id}/players", response_model=list[RegisteredPlayer])
async def registered_players(game_id: str, mock_api: MockApi = Depends(get_mock_api)):
    mock_api.get_game(game_id)
    return await mock_api.get_registered_players(game_id)
