"""Monte Carlo game outcome simulator.

Consumes a GameContext (team season stats, park factors, weather) and
produces a SimulationResult, which callers persist with upsert_prediction().
"""

from mlbsim.simulation.engine import (
    DEFAULT_ITERATIONS,
    Adjustments,
    SimulationParams,
    SimulationResult,
    simulate_game,
)
from mlbsim.simulation.errors import (
    GameNotFoundError,
    InvalidParameterError,
    MissingDataError,
    MissingDataReason,
    SimulationError,
)
from mlbsim.simulation.factors import Insights, KeyFactors
from mlbsim.simulation.inputs import (
    GameContext,
    ParkFactors,
    TeamSeasonStats,
    WeatherConditions,
)
from mlbsim.simulation.persistence import fetch_prediction_date, upsert_prediction

__all__ = [
    "DEFAULT_ITERATIONS",
    "simulate_game",
    "SimulationParams",
    "SimulationResult",
    "Adjustments",
    "KeyFactors",
    "Insights",
    "GameContext",
    "TeamSeasonStats",
    "ParkFactors",
    "WeatherConditions",
    "SimulationError",
    "InvalidParameterError",
    "MissingDataError",
    "MissingDataReason",
    "GameNotFoundError",
    "upsert_prediction",
    "fetch_prediction_date",
]
