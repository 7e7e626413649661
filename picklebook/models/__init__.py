"""Domain records and the SQL key/value table."""

from picklebook.models.base import Base
from picklebook.models.booking import BookedGame, BookingStatus, BookingUserInfo
from picklebook.models.game import Coordinates, Game, GameStatus, Location, Player, SkillLevel
from picklebook.models.key_value import KeyValue
from picklebook.models.user import Address, GameResult, ProfileImage, UserRecord

__all__ = [
    "Base",
    "KeyValue",
    "Game",
    "GameStatus",
    "Location",
    "Coordinates",
    "Player",
    "SkillLevel",
    "BookedGame",
    "BookingStatus",
    "BookingUserInfo",
    "UserRecord",
    "ProfileImage",
    "Address",
    "GameResult",
]
