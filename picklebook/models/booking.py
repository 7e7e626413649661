"""Booking records kept by the mock booking engine.

A booking is a seat in a catalogue game held by one user. Time, court and
price are snapshotted from the game when the booking is made, and the
booking user's public details are copied into `user_info` so other players
can see who has joined without loading every profile.
"""

import enum

from pydantic import BaseModel


class BookingStatus(enum.StrEnum):
    UPCOMING = "upcoming"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class BookingUserInfo(BaseModel):
    id: str
    name: str
    email: str
    profile_image: str | dict | None = None
    skill_level: str | None = None


class BookedGame(BaseModel):
    id: str  # "{game_id}_{epoch_millis}"
    game_id: str
    date: str  # ISO timestamp of when the booking was made
    time: str
    court_name: str
    location_id: str | None = None
    skill_level: str | None = None
    price: float = 0
    status: BookingStatus = BookingStatus.UPCOMING
    user_info: BookingUserInfo

    @property
    def is_upcoming(self) -> bool:
        return self.status == BookingStatus.UPCOMING

    def __repr__(self) -> str:
        return f"<BookedGame {self.id} {self.status}>"
