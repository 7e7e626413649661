"""Booking routes: create, list, cancel, clear.

Every change to occupancy invalidates the cached game listing.
"""

from fastapi import APIRouter, Depends, status

from picklebook.core.dependencies import get_cache, get_current_user, get_mock_api
from picklebook.routes.games import GAMES_CACHE_KEY
from picklebook.schemas import BookingCreate, BookingOut, UserOut
from picklebook.services.cache import CacheService
from picklebook.services.mock_api import MockApi

router = APIRouter(prefix="/bookings", tags=["bookings"])


@router.post("", response_model=BookingOut, status_code=status.HTTP_201_CREATED)
async def create_booking(
    body: BookingCreate,
    user: UserOut = Depends(get_current_user),
    mock_api: MockApi = Depends(get_mock_api),
    cache: CacheService = Depends(get_cache),
):
    game = mock_api.get_game(body.game_id)
    booking = await mock_api.book_game(user.email, game)
    await cache.invalidate(GAMES_CACHE_KEY)
    return booking


@router.get("", response_model=list[BookingOut])
async def list_my_bookings(
    user: UserOut = Depends(get_current_user),
    mock_api: MockApi = Depends(get_mock_api),
):
    return await mock_api.get_booked_games(user.email)


@router.delete("/{booking_id}", status_code=status.HTTP_204_NO_CONTENT)
async def cancel_booking(
    booking_id: str,
    user: UserOut = Depends(get_current_user),
    mock_api: MockApi = Depends(get_mock_api),
    cache: CacheService = Depends(get_cache),
):
    await mock_api.cancel_booking(user.email, booking_id)
    await cache.invalidate(GAMES_CACHE_KEY)


@router.delete("", status_code=status.HTTP_204_NO_CONTENT)
async def clear_bookings(
    user: UserOut = Depends(get_current_user),
    mock_api: MockApi = Depends(get_mock_api),
    cache: CacheService = Depends(get_cache),
):
    await mock_api.clear_booked_games(user.email)
    await cache.invalidate(GAMES_CACHE_KEY)
