"""Game catalogue models.

A Game is a static definition of a scheduled session at a location. Its
`players` list holds people already signed up outside the booking engine;
they count towards `max_players` alongside bookings made through MockApi.
"""

import enum
from datetime import datetime

from pydantic import BaseModel, Field, field_validator


class SkillLevel(enum.StrEnum):
    BEGINNER = "Beginner"
    INTERMEDIATE = "Intermediate"
    ADVANCED = "Advanced"
    OPEN = "Open"

    @classmethod
    def parse(cls, value: "str | SkillLevel | None") -> "SkillLevel | None":
        """Match a level ignoring case and surrounding space. Raises ValueError for unknown levels."""
        if value is None or isinstance(value, cls):
            return value
        if isinstance(value, str):
            folded = value.strip().lower()
            for level in cls:
                if level.value.lower() == folded:
                    return level
        raise ValueError(f"skill_level must be one of {', '.join(cls)}, got {value!r}")


class GameStatus(enum.StrEnum):
    UPCOMING = "Upcoming"
    IN_PROGRESS = "InProgress"
    COMPLETED = "Completed"
    CANCELLED = "Cancelled"


class Coordinates(BaseModel):
    latitude: float
    longitude: float


class Location(BaseModel):
    id: str
    name: str
    address: str
    city: str
    state: str
    zip_code: str
    coordinates: Coordinates | None = None
    image_url: str | None = None


class Player(BaseModel):
    id: str
    name: str
    email: str
    skill_level: SkillLevel | None = None
    rating: float | None = None

    @field_validator("skill_level", mode="before")
    @classmethod
    def validate_skill_level(cls, v):
        return SkillLevel.parse(v)


class Game(BaseModel):
    id: str
    title: str
    description: str = ""
    start_time: datetime
    end_time: datetime
    location: Location
    host: Player | None = None
    players: list[Player] = Field(default_factory=list)
    max_players: int
    skill_level: SkillLevel | None = None
    price: float = 0
    image_url: str | None = None
    status: GameStatus = GameStatus.UPCOMING

    @field_validator("skill_level", mode="before")
    @classmethod
    def validate_skill_level(cls, v):
        return SkillLevel.parse(v)

    @property
    def court_name(self) -> str:
        return self.location.name

    def __repr__(self) -> str:
        return f"<Game {self.id} {self.title!r} max={self.max_players}>"
