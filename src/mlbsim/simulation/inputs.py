"""Immutable input records for a single game simulation."""

import math
from dataclasses import dataclass

from mlbsim.db.models import WindDirection
from mlbsim.simulation.errors import InvalidParameterError


def _require(condition: bool, message: str) -> None:
    if not condition:
        raise InvalidParameterError(message)


def _finite(*values: float) -> bool:
    return all(isinstance(v, (int, float)) and math.isfinite(v) for v in values)


@dataclass(frozen=True)
class TeamSeasonStats:
    """Season aggregates for one team."""

    wins: int
    losses: int
    runs_scored: float
    runs_allowed: float
    era: float
    batting_average: float
    on_base_percentage: float
    slugging_percentage: float

    def __post_init__(self):
        _require(
            _finite(
                self.wins,
                self.losses,
                self.runs_scored,
                self.runs_allowed,
                self.era,
                self.batting_average,
                self.on_base_percentage,
                self.slugging_percentage,
            ),
            "team stats must be finite numbers",
        )
        _require(self.wins >= 0 and self.losses >= 0, "wins and losses must be >= 0")
        _require(self.runs_scored >= 0 and self.runs_allowed >= 0, "runs must be >= 0")
        _require(self.era >= 0, "era must be >= 0")
        _require(0.0 <= self.batting_average <= 1.0, "batting_average must be in [0, 1]")
        _require(0.0 <= self.on_base_percentage <= 1.0, "on_base_percentage must be in [0, 1]")
        _require(self.slugging_percentage >= 0, "slugging_percentage must be >= 0")

    @property
    def games_played(self) -> int:
        return self.wins + self.losses

    @property
    def record_differential(self) -> int:
        """Wins minus losses."""
        return self.wins - self.losses

    @property
    def runs_per_game(self) -> float:
        """Baseline expected runs per game; requires games_played > 0."""
        return self.runs_scored / self.games_played


@dataclass(frozen=True)
class ParkFactors:
    """Multiplicative venue adjustments centered at 1.0."""

    runs_factor: float
    home_run_factor: float
    hits_factor: float

    def __post_init__(self):
        _require(
            _finite(self.runs_factor, self.home_run_factor, self.hits_factor),
            "park factors must be finite numbers",
        )
        _require(
            self.runs_factor > 0 and self.home_run_factor > 0 and self.hits_factor > 0,
            "park factors must be > 0",
        )


@dataclass(frozen=True)
class WeatherConditions:
    """Game-time weather."""

    temperature_f: float
    wind_speed_mph: float
    wind_direction: WindDirection
    condition: str

    def __post_init__(self):
        _require(
            _finite(self.temperature_f, self.wind_speed_mph),
            "temperature and wind speed must be finite numbers",
        )
        _require(self.wind_speed_mph >= 0, "wind_speed_mph must be >= 0")
        if not isinstance(self.wind_direction, WindDirection):
            # Accept raw strings from stores and callers
            object.__setattr__(self, "wind_direction", WindDirection.parse(self.wind_direction))


@dataclass(frozen=True)
class GameContext:
    """Everything the simulator needs for one game.

    Inputs are optional at construction so that absent data reaches the
    simulator's gate and is reported as a MissingDataError.
    """

    game_id: int
    home_team_stats: TeamSeasonStats | None
    away_team_stats: TeamSeasonStats | None
    park_factors: ParkFactors | None
    weather: WeatherConditions | None
