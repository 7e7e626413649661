"""User records kept by the mock booking engine.

Passwords are plaintext: the mock engine is a development stand-in for the
real auth backend and never leaves the device.
"""

from typing import Literal

from pydantic import BaseModel, Field, field_validator

from picklebook.models.booking import BookedGame
from picklebook.models.game import SkillLevel


class ProfileImage(BaseModel):
    uri: str
    base64: str
    timestamp: int  # epoch millis of capture


class Address(BaseModel):
    street: str | None = None
    city: str | None = None
    state: str | None = None
    zip_code: str | None = None
    country: str | None = None


class GameResult(BaseModel):
    id: str
    date: str
    result: Literal["win", "loss"]
    score: str
    opponent: str


class UserRecord(BaseModel):
    id: str
    email: str
    name: str
    password: str | None = None
    is_verified: bool = False
    verification_token: str | None = None
    reset_token: str | None = None
    auth_provider: str | None = None

    # Profile
    skill_level: SkillLevel | None = None
    profile_image: ProfileImage | str | None = None
    display_name: str | None = None
    phone_number: str | None = None
    date_of_birth: str | None = None
    address: Address | None = None
    has_completed_profile: bool = False

    games_played: list[GameResult] = Field(default_factory=list)
    booked_games: list[BookedGame] = Field(default_factory=list)

    @field_validator("skill_level", mode="before")
    @classmethod
    def validate_skill_level(cls, v):
        return SkillLevel.parse(v)

    def upcoming_bookings(self) -> list[BookedGame]:
        return [b for b in self.booked_games if b.is_upcoming]

    def __repr__(self) -> str:
        return f"<UserRecord {self.email}>"
