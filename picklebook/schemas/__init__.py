"""Pydantic schemas for API serialisation."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, EmailStr, field_validator

from picklebook.models.booking import BookingStatus, BookingUserInfo
from picklebook.models.game import GameStatus, Location, Player, SkillLevel
from picklebook.models.user import Address, GameResult, ProfileImage

# --- Auth ---


class LoginRequest(BaseModel):
    email: EmailStr
    password: str


class RegisterRequest(BaseModel):
    email: EmailStr
    password: str
    name: str


class VerifyEmailRequest(BaseModel):
    email: EmailStr
    token: str


class EmailRequest(BaseModel):
    email: EmailStr


class ResetPasswordRequest(BaseModel):
    email: EmailStr
    token: str
    new_password: str


class SocialAuthRequest(BaseModel):
    token: str
    provider: str
    email: EmailStr
    name: str


class MessageResponse(BaseModel):
    message: str


# --- Bookings ---


class BookingCreate(BaseModel):
    game_id: str


class BookingOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    game_id: str
    date: str
    time: str
    court_name: str
    location_id: str | None
    skill_level: str | None
    price: float
    status: BookingStatus
    user_info: BookingUserInfo


# --- User ---


class UserOut(BaseModel):
    """A user record with password and tokens stripped."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    email: str
    name: str
    is_verified: bool
    auth_provider: str | None = None
    skill_level: SkillLevel | None = None
    profile_image: ProfileImage | str | None = None
    display_name: str | None = None
    phone_number: str | None = None
    date_of_birth: str | None = None
    address: Address | None = None
    has_completed_profile: bool = False
    games_played: list[GameResult] = []
    booked_games: list[BookingOut] = []


class AuthResponse(BaseModel):
    token: str
    token_type: str = "bearer"
    user: UserOut


class ProfileUpdate(BaseModel):
    """Only these fields can be changed through update_profile."""

    skill_level: SkillLevel | None = None
    profile_image: ProfileImage | str | None = None
    display_name: str | None = None
    phone_number: str | None = None
    date_of_birth: str | None = None
    address: Address | None = None
    has_completed_profile: bool | None = None

    @field_validator("skill_level", mode="before")
    @classmethod
    def validate_skill_level(cls, v):
        return SkillLevel.parse(v)


class RegisteredPlayer(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    email: str
    display_name: str | None = None
    skill_level: SkillLevel | None = None
    profile_image: ProfileImage | str | None = None


# --- Games ---


class GameOut(BaseModel):
    id: str
    title: str
    description: str
    start_time: datetime
    end_time: datetime
    location: Location
    host: Player | None
    players: list[Player]
    max_players: int
    skill_level: SkillLevel | None
    price: float
    status: GameStatus
    booked_count: int
    spots_left: int
