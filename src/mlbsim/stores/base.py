"""Store interfaces and the lookup result type shared by all stores."""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import date
from typing import Generic, TypeVar, Union

from mlbsim.simulation.errors import MissingDataError, MissingDataReason
from mlbsim.simulation.inputs import ParkFactors, TeamSeasonStats, WeatherConditions

T = TypeVar("T")


@dataclass(frozen=True)
class Resolved(Generic[T]):
    """A store found usable data."""

    value: T


@dataclass(frozen=True)
class Missing:
    """A store has no usable data; ``reason`` names the upstream gap."""

    reason: MissingDataReason
    detail: str = ""


Lookup = Union[Resolved[T], Missing]


def require(lookup: "Lookup[T]") -> T:
    """Unwrap a lookup or raise MissingDataError."""
    if isinstance(lookup, Missing):
        raise MissingDataError(lookup.reason, lookup.detail)
    return lookup.value


@dataclass(frozen=True)
class GameRecord:
    """Schedule row for a game."""

    game_id: int
    game_date: date
    home_team_id: int
    away_team_id: int
    venue_name: str | None
    status: str = "scheduled"


class GameStore(ABC):
    """Read access to the schedule."""

    @abstractmethod
    async def fetch_game(self, game_id: int) -> GameRecord | None:
        """Return the game, or None if it does not exist."""

    @abstractmethod
    async def list_scheduled_games(
        self,
        start: date,
        end: date,
        game_ids: list[int] | None = None,
    ) -> list[GameRecord]:
        """Scheduled games with start <= game_date <= end.

        When ``game_ids`` is given the date range is ignored and only those
        games are returned (still restricted to scheduled status).
        """


class TeamStatsStore(ABC):
    """Team season aggregates keyed by (team_id, season)."""

    @abstractmethod
    async def fetch_team_stats(self, team_id: int, season: int) -> Lookup[TeamSeasonStats]:
        pass


class ParkFactorsStore(ABC):
    """Venue factors keyed by (venue_name, season)."""

    @abstractmethod
    async def fetch_park_factors(self, venue_name: str, season: int) -> Lookup[ParkFactors]:
        pass


class WeatherStore(ABC):
    """Game-time weather keyed by game_id."""

    @abstractmethod
    async def fetch_weather(self, game_id: int) -> Lookup[WeatherConditions]:
        pass
