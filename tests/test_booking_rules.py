"""Unit tests: booking rules (pure functions, no storage)."""

from picklebook.models.booking import BookedGame, BookingStatus, BookingUserInfo
from picklebook.models.user import UserRecord
from picklebook.services.booking_rules import (
    check_capacity,
    check_duplicate_booking,
    check_skill_change,
    check_skill_level,
    validate_booking,
)
from tests.conftest import make_game


def _user(skill: str | None = None, bookings: list[BookedGame] | None = None) -> UserRecord:
    return UserRecord(id="7", email="u@x.com", name="U", skill_level=skill, booked_games=bookings or [])


def _booking(game_id: str, status: BookingStatus = BookingStatus.UPCOMING) -> BookedGame:
    return BookedGame(
        id=f"{game_id}_1790000000000",
        game_id=game_id,
        date="2026-11-01T10:00:00+00:00",
        time="2026-11-02T18:00:00+00:00",
        court_name="Court",
        status=status,
        user_info=BookingUserInfo(id="7", name="U", email="u@x.com"),
    )


class TestCheckCapacity:
    def test_room_left(self):
        assert check_capacity(make_game("g", max_players=4), active_bookings=3) is None

    def test_full_from_bookings(self):
        v = check_capacity(make_game("g", max_players=4), active_bookings=4)
        assert v is not None
        assert v.rule == "game_full"
        assert "already full" in v.message

    def test_full_from_baked_in_players(self):
        v = check_capacity(make_game("g", max_players=3, players=2), active_bookings=1)
        assert v is not None

    def test_overfilled_game_still_reports_full(self):
        assert check_capacity(make_game("g", max_players=2, players=3), active_bookings=0) is not None


class TestCheckSkillLevel:
    def test_match_ignores_case(self):
        assert check_skill_level(_user("ADVANCED"), make_game("g", 4, skill_level="Advanced")) is None

    def test_mismatch(self):
        v = check_skill_level(_user("Beginner"), make_game("g", 4, skill_level="Advanced"))
        assert v is not None
        assert v.rule == "skill_level"

    def test_user_without_level_passes(self):
        assert check_skill_level(_user(None), make_game("g", 4, skill_level="Advanced")) is None

    def test_game_without_level_passes(self):
        assert check_skill_level(_user("Beginner"), make_game("g", 4)) is None


class TestCheckDuplicateBooking:
    def test_upcoming_booking_blocks(self):
        v = check_duplicate_booking(_user(bookings=[_booking("g")]), "g")
        assert v is not None
        assert v.rule == "duplicate_booking"

    def test_cancelled_booking_does_not_block(self):
        assert check_duplicate_booking(_user(bookings=[_booking("g", BookingStatus.CANCELLED)]), "g") is None

    def test_other_game_does_not_block(self):
        assert check_duplicate_booking(_user(bookings=[_booking("other")]), "g") is None


class TestCheckSkillChange:
    def test_locked_with_upcoming_booking(self):
        v = check_skill_change(_user("Beginner", [_booking("g")]), "Advanced")
        assert v is not None
        assert v.rule == "skill_change_locked"
        assert "1 upcoming game booked" in v.message

    def test_same_level_is_not_a_change(self):
        assert check_skill_change(_user("Beginner", [_booking("g")]), "Beginner") is None

    def test_free_when_only_completed_or_cancelled(self):
        bookings = [_booking("a", BookingStatus.COMPLETED), _booking("b", BookingStatus.CANCELLED)]
        assert check_skill_change(_user("Beginner", bookings), "Open") is None


def test_validate_booking_collects_every_violation():
    user = _user("Beginner", [_booking("g")])
    game = make_game("g", max_players=1, players=1, skill_level="Open")
    rules = [v.rule for v in validate_booking(user, game, active_bookings=0)]
    assert rules == ["game_full", "skill_level", "duplicate_booking"]


def test_validate_booking_passes_clean_request():
    assert validate_booking(_user(), make_game("g", 4), active_bookings=0) == []
