"""Static game catalogue for development.

These are the games the mock booking engine books against. Start times are
relative to the moment the catalogue is built so the demo data never goes
stale.
"""

from datetime import UTC, datetime, timedelta

from picklebook.models.game import Coordinates, Game, GameStatus, Location, Player, SkillLevel
from picklebook.schemas import GameOut


def _player(pid: str, name: str, email: str, level: SkillLevel) -> Player:
    return Player(id=pid, name=name, email=email, skill_level=level)


def default_games(now: datetime | None = None) -> dict[str, Game]:
    """Build the demo catalogue keyed by game id."""
    now = now or datetime.now(UTC)
    today_5pm = now.replace(hour=17, minute=0, second=0, microsecond=0)

    games = [
        Game(
            id="1",
            title="Evening Game at Givens",
            description="Join us for a fun evening game at Givens Court",
            start_time=now,
            end_time=now + timedelta(hours=1),
            location=Location(
                id="givens-1",
                name="Givens Court",
                address="1100 Springdale Rd",
                city="Austin",
                state="TX",
                zip_code="78721",
                coordinates=Coordinates(latitude=30.2729, longitude=-97.6841),
            ),
            host=_player("host-1", "John Smith", "john@example.com", SkillLevel.ADVANCED),
            players=[
                _player("player-1", "Sarah Johnson", "sarah@example.com", SkillLevel.INTERMEDIATE),
                _player("player-2", "Mike Wilson", "mike@example.com", SkillLevel.INTERMEDIATE),
                _player("player-3", "Emily Brown", "emily@example.com", SkillLevel.ADVANCED),
            ],
            max_players=15,
            skill_level=SkillLevel.INTERMEDIATE,
            price=10,
            status=GameStatus.UPCOMING,
        ),
        Game(
            id="2",
            title="Morning Game at Dove Springs",
            description="Early morning game at Dove Springs Recreation Center",
            start_time=now + timedelta(days=1),
            end_time=now + timedelta(days=1, hours=1),
            location=Location(
                id="dove-1",
                name="Dove Springs",
                address="5701 Ainez Drive",
                city="Austin",
                state="TX",
                zip_code="78744",
                coordinates=Coordinates(latitude=30.1971, longitude=-97.7141),
            ),
            host=_player("host-2", "Jane Doe", "jane@example.com", SkillLevel.ADVANCED),
            players=[
                _player("player-4", "Tom Brown", "tom@example.com", SkillLevel.ADVANCED),
                _player("player-5", "Lisa Chen", "lisa@example.com", SkillLevel.ADVANCED),
                _player("player-6", "David Park", "david@example.com", SkillLevel.ADVANCED),
            ],
            max_players=15,
            skill_level=SkillLevel.ADVANCED,
            price=12,
            status=GameStatus.UPCOMING,
        ),
        Game(
            id="3",
            title="Afternoon Game at Hancock",
            description="Join us for a competitive afternoon game at Hancock Recreation Center",
            start_time=today_5pm,
            end_time=today_5pm + timedelta(hours=2),
            location=Location(
                id="hancock-1",
                name="Hancock Park",
                address="1300 Hancock",
                city="Austin",
                state="TX",
                zip_code="78756",
                coordinates=Coordinates(latitude=30.3008, longitude=-97.7247),
            ),
            host=_player("host-3", "Alex Thompson", "alex@example.com", SkillLevel.ADVANCED),
            players=[
                _player("player-7", "Chris Martinez", "chris@example.com", SkillLevel.ADVANCED),
                _player("player-8", "Pat Lee", "pat@example.com", SkillLevel.ADVANCED),
            ],
            max_players=15,
            skill_level=SkillLevel.ADVANCED,
            price=10,
            status=GameStatus.UPCOMING,
        ),
    ]
    return {g.id: g for g in games}


def to_game_out(game: Game, booked_count: int) -> GameOut:
    """Listing row: the game plus live occupancy."""
    taken = len(game.players) + booked_count
    return GameOut(
        **game.model_dump(exclude={"image_url"}),
        booked_count=booked_count,
        spots_left=max(game.max_players - taken, 0),
    )
