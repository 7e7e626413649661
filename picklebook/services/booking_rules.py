"""Booking rules enforcement.

All booking validation logic lives here, separate from the engine that
persists bookings. Each rule returns a BookingViolation or None if the rule
passes. validate_booking() runs the booking rules in order and collects
violations.
"""

from picklebook.models.booking import BookingStatus
from picklebook.models.game import Game
from picklebook.models.user import UserRecord
from picklebook.services.errors import ConflictError


class BookingViolation(ConflictError):
    """Raised when a booking rule is violated."""

    def __init__(self, rule: str, message: str):
        self.rule = rule
        super().__init__(message)


def _same_level(a: str, b: str) -> bool:
    return a.strip().lower() == b.strip().lower()


def validate_booking(user: UserRecord, game: Game, active_bookings: int) -> list[BookingViolation]:
    """Run all booking rules and return a list of violations (empty = valid)."""
    violations: list[BookingViolation] = []

    # 1. Seats left
    v = check_capacity(game, active_bookings)
    if v:
        violations.append(v)

    # 2. Skill level gate
    v = check_skill_level(user, game)
    if v:
        violations.append(v)

    # 3. One seat per user per game
    v = check_duplicate_booking(user, game.id)
    if v:
        violations.append(v)

    return violations


def check_capacity(game: Game, active_bookings: int) -> BookingViolation | None:
    """Baked-in players plus active bookings must stay below max players."""
    taken = len(game.players) + active_bookings
    if taken >= game.max_players:
        return BookingViolation(
            "game_full",
            f"This game is already full ({taken}/{game.max_players} players).",
        )
    return None


def check_skill_level(user: UserRecord, game: Game) -> BookingViolation | None:
    """When both sides declare a level they must match, ignoring case."""
    if not user.skill_level or not game.skill_level:
        return None
    if not _same_level(user.skill_level, game.skill_level):
        return BookingViolation(
            "skill_level",
            f"This game is for {game.skill_level} players. Your skill level is {user.skill_level}.",
        )
    return None


def check_duplicate_booking(user: UserRecord, game_id: str) -> BookingViolation | None:
    """A user cannot hold two upcoming bookings for the same game."""
    for booking in user.booked_games:
        if booking.game_id == game_id and booking.status == BookingStatus.UPCOMING:
            return BookingViolation("duplicate_booking", "You have already booked this game.")
    return None


def check_skill_change(user: UserRecord, new_level: str | None) -> BookingViolation | None:
    """Skill level is frozen while the user has upcoming games.

    Changing it could quietly invalidate the skill gate of games already
    joined. Setting the same level again is not a change.
    """
    if new_level == user.skill_level:
        return None
    upcoming = user.upcoming_bookings()
    if upcoming:
        return BookingViolation(
            "skill_change_locked",
            f"You can't change your skill level while you have {len(upcoming)} upcoming "
            f"game{'s' if len(upcoming) != 1 else ''} booked. Cancel them first.",
        )
    return None
