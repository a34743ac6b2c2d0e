"""Read access to team stats, park factors, weather and the schedule."""

from mlbsim.stores.base import (
    GameRecord,
    GameStore,
    Lookup,
    Missing,
    ParkFactorsStore,
    Resolved,
    TeamStatsStore,
    WeatherStore,
    require,
)
from mlbsim.stores.context import Stores, build_game_context, postgres_stores

__all__ = [
    "GameRecord",
    "GameStore",
    "TeamStatsStore",
    "ParkFactorsStore",
    "WeatherStore",
    "Lookup",
    "Resolved",
    "Missing",
    "require",
    "Stores",
    "build_game_context",
    "postgres_stores",
]
