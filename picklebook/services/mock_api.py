"""Mock booking engine.

Simulates, on a single device, what the real booking backend does: user
accounts, profile edits and seat-accounted game booking. State is two JSON
documents in the key/value store:

- the user map (email -> user record, each carrying its own bookings)
- the global booking index (game id -> booking ids)

Every mutation is a load-modify-save of both documents inside one lock, so
two requests interleaving in the same process can't double-book a seat.
There is no isolation between processes sharing a store.

Errors are raised as MockApiError subclasses whose message is meant for
direct display.
"""

import asyncio
import logging
import secrets
import time
from collections.abc import Mapping
from datetime import UTC, datetime
from typing import Any

from pydantic import TypeAdapter, ValidationError

from picklebook.core.config import settings
from picklebook.core.storage import StorageAdapter
from picklebook.models.booking import BookedGame, BookingStatus, BookingUserInfo
from picklebook.models.game import Game, SkillLevel
from picklebook.models.user import ProfileImage, UserRecord
from picklebook.schemas import AuthResponse, RegisteredPlayer, UserOut
from picklebook.services import booking_rules
from picklebook.services.email import send_password_reset_email, send_verification_email
from picklebook.services.errors import (
    AuthenticationError,
    ConflictError,
    InvalidRequestError,
    NotFoundError,
)
from picklebook.services.games import default_games

logger = logging.getLogger(__name__)

USERS_KEY = "mock_api_users"
GAME_BOOKINGS_KEY = "mock_api_game_bookings"

TOKEN_PREFIX = "token-"

# Fields update_profile is allowed to touch
PROFILE_FIELDS = frozenset(
    {
        "skill_level",
        "profile_image",
        "display_name",
        "phone_number",
        "date_of_birth",
        "address",
        "has_completed_profile",
    }
)

_users_adapter = TypeAdapter(dict[str, UserRecord])
_index_adapter = TypeAdapter(dict[str, list[str]])


def _now_ms() -> int:
    return int(time.time() * 1000)


def generate_token(user_id: str) -> str:
    """Opaque session token. Not signed; anyone can forge one."""
    return f"{TOKEN_PREFIX}{user_id}-{_now_ms()}"


def parse_token(token: str) -> str | None:
    """Return the user id embedded in a token, or None if it isn't one of ours."""
    if not token.startswith(TOKEN_PREFIX):
        return None
    user_id, sep, stamp = token[len(TOKEN_PREFIX):].rpartition("-")
    if not sep or not user_id or not stamp.isdigit():
        return None
    return user_id


def _normalise_email(email: str) -> str:
    return email.strip().lower()


def _seed_users() -> dict[str, UserRecord]:
    user = UserRecord(
        id="1",
        email="test@example.com",
        name="Test User",
        password="password123",
        is_verified=True,
    )
    return {user.email: user}


class MockApi:
    """In-process stand-in for the booking backend.

    Construct once at startup and share the instance; it owns the lock that
    serialises writes to `storage`.
    """

    def __init__(
        self,
        storage: StorageAdapter,
        games: Mapping[str, Game] | None = None,
        network_delay: float | None = None,
        blocked_domains: list[str] | None = None,
    ):
        self._storage = storage
        self._games: dict[str, Game] = dict(games) if games is not None else default_games()
        self._network_delay = (
            settings.mock_network_delay_seconds if network_delay is None else network_delay
        )
        domains = settings.blocked_email_domains if blocked_domains is None else blocked_domains
        self._blocked_domains = {d.lower() for d in domains}

        self._users: dict[str, UserRecord] = {}
        self._game_bookings: dict[str, list[str]] = {}
        self._loaded = False
        self._lock = asyncio.Lock()

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    async def _load(self) -> None:
        """Rehydrate both documents from storage. Unreadable data starts over from the seed."""
        raw_users = await self._storage.get_item(USERS_KEY)
        raw_index = await self._storage.get_item(GAME_BOOKINGS_KEY)

        users = None
        if raw_users:
            try:
                users = _users_adapter.validate_json(raw_users)
            except ValidationError:
                logger.exception("Stored users are unreadable, starting from seed data")
        self._users = users if users is not None else _seed_users()

        index = None
        if raw_index:
            try:
                index = _index_adapter.validate_json(raw_index)
            except ValidationError:
                logger.exception("Stored booking index is unreadable, starting empty")
        self._game_bookings = index if index is not None else {}

        self._loaded = True

    async def _ensure_loaded(self) -> None:
        if not self._loaded:
            await self._load()

    async def _save(self) -> None:
        await self._storage.set_item(USERS_KEY, _users_adapter.dump_json(self._users).decode())
        await self._storage.set_item(GAME_BOOKINGS_KEY, _index_adapter.dump_json(self._game_bookings).decode())

    async def _simulate_latency(self) -> None:
        if self._network_delay > 0:
            await asyncio.sleep(self._network_delay)

    def _require_user(self, email: str) -> UserRecord:
        user = self._users.get(_normalise_email(email))
        if user is None:
            raise NotFoundError("User not found")
        return user

    def _auth_response(self, user: UserRecord) -> AuthResponse:
        return AuthResponse(token=generate_token(user.id), user=UserOut.model_validate(user))

    def _check_email_allowed(self, email: str) -> None:
        local, sep, domain = email.rpartition("@")
        if not sep or not local or not domain:
            raise InvalidRequestError("Please enter a valid email address")
        if domain.lower() in self._blocked_domains:
            raise InvalidRequestError(f"Email addresses from {domain} are not accepted")

    # ------------------------------------------------------------------
    # Catalogue
    # ------------------------------------------------------------------

    @property
    def games(self) -> dict[str, Game]:
        return self._games

    def get_game(self, game_id: str) -> Game:
        game = self._games.get(game_id)
        if game is None:
            raise NotFoundError("Game not found")
        return game

    # ------------------------------------------------------------------
    # Auth
    # ------------------------------------------------------------------

    async def login(self, email: str, password: str) -> AuthResponse:
        await self._simulate_latency()
        async with self._lock:
            await self._ensure_loaded()
            user = self._users.get(_normalise_email(email))
            if user is None or user.password is None or user.password != password:
                raise AuthenticationError("Invalid credentials")
            return self._auth_response(user)

    async def register(self, email: str, password: str, name: str) -> AuthResponse:
        await self._simulate_latency()
        email = _normalise_email(email)
        self._check_email_allowed(email)
        async with self._lock:
            await self._ensure_loaded()
            if email in self._users:
                raise ConflictError("Email already registered")

            user = UserRecord(
                id=str(len(self._users) + 1),
                email=email,
                name=name,
                password=password,
                is_verified=True,
            )
            self._users[email] = user
            await self._save()

        logger.info("Registered mock user %s", email)
        return self._auth_response(user)

    async def verify_email(self, email: str, token: str) -> UserOut:
        await self._simulate_latency()
        async with self._lock:
            await self._ensure_loaded()
            user = self._require_user(email)
            if user.is_verified:
                return UserOut.model_validate(user)
            if not user.verification_token or not secrets.compare_digest(user.verification_token, token):
                raise InvalidRequestError("Invalid verification token")

            user.is_verified = True
            user.verification_token = None
            await self._save()
            return UserOut.model_validate(user)

    async def resend_verification_email(self, email: str) -> None:
        await self._simulate_latency()
        async with self._lock:
            await self._ensure_loaded()
            user = self._require_user(email)
            if user.is_verified:
                logger.info("%s is already verified, not resending", user.email)
                return
            user.verification_token = secrets.token_urlsafe(16)
            token = user.verification_token
            await self._save()

        await send_verification_email(user.email, token)

    async def request_password_reset(self, email: str) -> None:
        """Always succeeds so callers can't probe which emails have accounts."""
        await self._simulate_latency()
        async with self._lock:
            await self._ensure_loaded()
            user = self._users.get(_normalise_email(email))
            if user is None:
                logger.info("Password reset requested for unknown email")
                return
            user.reset_token = secrets.token_urlsafe(16)
            token = user.reset_token
            await self._save()

        await send_password_reset_email(user.email, token)

    async def reset_password(self, email: str, token: str, new_password: str) -> None:
        await self._simulate_latency()
        async with self._lock:
            await self._ensure_loaded()
            user = self._users.get(_normalise_email(email))
            if user is None or not user.reset_token or not secrets.compare_digest(user.reset_token, token):
                raise InvalidRequestError("Invalid or expired reset token")

            user.password = new_password
            user.reset_token = None
            await self._save()

    async def social_auth(self, token: str, provider: str, user: Mapping[str, Any]) -> AuthResponse:
        """Sign in with a provider identity, creating the account on first sight."""
        await self._simulate_latency()
        if not token:
            raise InvalidRequestError(f"Missing {provider} sign-in token")
        email = _normalise_email(user.get("email") or "")
        if not email:
            raise InvalidRequestError(f"{provider} did not share an email address")
        name = user.get("name") or email.split("@")[0]

        async with self._lock:
            await self._ensure_loaded()
            record = self._users.get(email)
            if record is not None:
                record.name = name
                record.is_verified = True
                record.auth_provider = provider
            else:
                record = UserRecord(
                    id=str(len(self._users) + 1),
                    email=email,
                    name=name,
                    is_verified=True,
                    auth_provider=provider,
                )
                self._users[email] = record
            await self._save()

        return self._auth_response(record)

    # ------------------------------------------------------------------
    # Users
    # ------------------------------------------------------------------

    async def get_user(self, email: str) -> UserOut:
        async with self._lock:
            await self._ensure_loaded()
            return UserOut.model_validate(self._require_user(email))

    async def get_user_by_id(self, user_id: str) -> UserOut:
        async with self._lock:
            await self._ensure_loaded()
            for user in self._users.values():
                if user.id == user_id:
                    return UserOut.model_validate(user)
        raise NotFoundError("User not found")

    async def update_profile(self, email: str, data: Mapping[str, Any]) -> UserOut:
        """Apply allow-listed profile fields. Either every field applies or none does."""
        await self._simulate_latency()
        async with self._lock:
            # Pick up writes made by anything else sharing the store
            await self._load()
            user = self._require_user(email)

            changes = {k: v for k, v in data.items() if k in PROFILE_FIELDS}
            if "skill_level" in changes:
                try:
                    changes["skill_level"] = SkillLevel.parse(changes["skill_level"])
                except ValueError:
                    raise InvalidRequestError(f"Unknown skill level: {changes['skill_level']}") from None
                violation = booking_rules.check_skill_change(user, changes["skill_level"])
                if violation:
                    raise violation

            if isinstance(changes.get("profile_image"), ProfileImage):
                changes["profile_image"] = changes["profile_image"].model_dump()
            try:
                updated = UserRecord.model_validate({**user.model_dump(), **changes})
            except ValidationError as exc:
                raise InvalidRequestError(f"Invalid profile data: {exc.errors()[0]['msg']}") from None

            self._users[user.email] = updated
            await self._save()
            return UserOut.model_validate(updated)

    # ------------------------------------------------------------------
    # Bookings
    # ------------------------------------------------------------------

    def _next_booking_id(self, game_id: str) -> str:
        """`{game_id}_{epoch_millis}`, bumped past any id already issued for the game.

        Must be called under the lock.
        """
        issued = {b.id for user in self._users.values() for b in user.booked_games if b.game_id == game_id}
        issued.update(self._game_bookings.get(game_id, []))
        stamp = _now_ms()
        while f"{game_id}_{stamp}" in issued:
            stamp += 1
        return f"{game_id}_{stamp}"

    def _count_active(self, game_id: str) -> int:
        return sum(
            1
            for user in self._users.values()
            for booking in user.booked_games
            if booking.game_id == game_id and booking.is_upcoming
        )

    async def get_game_bookings(self, game_id: str) -> int:
        """Upcoming bookings for a game across every user. Unknown ids count as 0."""
        if not game_id:
            logger.info("get_game_bookings called without a game id")
            return 0
        async with self._lock:
            await self._ensure_loaded()
            if game_id not in self._games:
                logger.info("get_game_bookings: unknown game %s", game_id)
                return 0
            return self._count_active(game_id)

    async def get_booked_games(self, email: str) -> list[BookedGame]:
        async with self._lock:
            await self._ensure_loaded()
            return list(self._require_user(email).booked_games)

    async def book_game(self, email: str, game: Game) -> BookedGame:
        await self._simulate_latency()
        async with self._lock:
            await self._ensure_loaded()
            user = self._require_user(email)
            # The catalogue is authoritative for capacity and level
            definition = self.get_game(game.id)

            violations = booking_rules.validate_booking(user, definition, self._count_active(definition.id))
            if violations:
                raise violations[0]

            image = user.profile_image
            booking = BookedGame(
                id=self._next_booking_id(definition.id),
                game_id=definition.id,
                date=datetime.now(UTC).isoformat(),
                time=definition.start_time.isoformat(),
                court_name=definition.court_name,
                location_id=definition.location.id,
                skill_level=definition.skill_level,
                price=definition.price,
                status=BookingStatus.UPCOMING,
                user_info=BookingUserInfo(
                    id=user.id,
                    name=user.display_name or user.name,
                    email=user.email,
                    profile_image=image.model_dump() if isinstance(image, ProfileImage) else image,
                    skill_level=user.skill_level,
                ),
            )

            self._game_bookings.setdefault(definition.id, []).append(booking.id)
            user.booked_games.insert(0, booking)
            await self._save()

        logger.info("%s booked game %s (%s)", user.email, definition.id, booking.id)
        return booking

    async def cancel_booking(self, email: str, booking_id: str) -> BookedGame:
        await self._simulate_latency()
        async with self._lock:
            await self._ensure_loaded()
            user = self._require_user(email)
            booking = next(
                (b for b in user.booked_games if b.id == booking_id and b.status != BookingStatus.CANCELLED),
                None,
            )
            if booking is None:
                raise NotFoundError("Booking not found")

            booking.status = BookingStatus.CANCELLED
            ids = self._game_bookings.get(booking.game_id, [])
            if booking_id in ids:
                ids.remove(booking_id)
            if not ids:
                self._game_bookings.pop(booking.game_id, None)
            await self._save()

        logger.info("%s cancelled booking %s", user.email, booking_id)
        return booking

    async def clear_booked_games(self, email: str) -> None:
        """Drop every booking the user has ever made, from their list and the index."""
        await self._simulate_latency()
        async with self._lock:
            await self._ensure_loaded()
            user = self._require_user(email)
            ids = {b.id for b in user.booked_games}
            user.booked_games = []
            for game_id in list(self._game_bookings):
                remaining = [b for b in self._game_bookings[game_id] if b not in ids]
                if remaining:
                    self._game_bookings[game_id] = remaining
                else:
                    del self._game_bookings[game_id]
            await self._save()

        logger.info("Cleared %d bookings for %s", len(ids), user.email)

    async def get_registered_players(self, game_id: str) -> list[RegisteredPlayer]:
        async with self._lock:
            await self._ensure_loaded()
            return [
                RegisteredPlayer.model_validate(user)
                for user in self._users.values()
                if any(b.game_id == game_id and b.is_upcoming for b in user.booked_games)
            ]

    def booking_ids_for_game(self, game_id: str) -> list[str]:
        """Snapshot of the global index entry for a game (loaded state only)."""
        return list(self._game_bookings.get(game_id, []))
