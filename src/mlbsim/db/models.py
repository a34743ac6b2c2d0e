"""Table-name constants and column-value enums."""

from enum import Enum


class Table:
    """Database table names."""

    GAMES = "games"
    TEAM_STATS = "team_stats"
    PARK_FACTORS = "park_factors"
    WEATHER_DATA = "weather_data"
    GAME_PREDICTIONS = "game_predictions"
    SCHEMA_MIGRATIONS = "schema_migrations"


class GameStatus(str, Enum):
    """Game status."""

    SCHEDULED = "scheduled"
    LIVE = "live"
    FINAL = "final"
    POSTPONED = "postponed"


class Side(str, Enum):
    """Which team a key factor favours."""

    HOME = "home"
    AWAY = "away"


class ParkCategory(str, Enum):
    """Qualitative run environment of a venue."""

    HITTER_FRIENDLY = "hitter_friendly"
    PITCHER_FRIENDLY = "pitcher_friendly"
    NEUTRAL = "neutral"


class WindDirection(str, Enum):
    """Wind direction relative to the field."""

    IN = "in"
    OUT = "out"
    CROSSWIND = "crosswind"
    CALM = "calm"
    UNKNOWN = "unknown"

    @classmethod
    def parse(cls, value: str | None) -> "WindDirection":
        """Map a stored wind direction to a member.

        Compass points (``"NE"``) say nothing about the field orientation and
        map to UNKNOWN, as does anything unrecognised.
        """
        if not value:
            return cls.UNKNOWN
        normalized = value.strip().lower().replace("-", "").replace(" ", "")
        if normalized in ("out", "blowingout", "outfield"):
            return cls.OUT
        if normalized in ("in", "blowingin", "infield"):
            return cls.IN
        if normalized in ("crosswind", "cross", "lefttoright", "righttoleft"):
            return cls.CROSSWIND
        if normalized in ("calm", "none", "still"):
            return cls.CALM
        return cls.UNKNOWN
