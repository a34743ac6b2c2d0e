"""Monte Carlo simulation kernel for game outcomes.

Each trial draws a run total per team from a normal distribution around the
team's season runs-per-game, floors it at zero, applies park, weather and
home-field adjustments, and rounds to whole runs. Trials are drawn as numpy
arrays and reduced with order-independent sums.

The kernel is pure: no I/O, no global random state. Pass ``seed`` or ``rng``
for reproducible output.
"""

import logging
import math
import numbers
from dataclasses import dataclass
from datetime import datetime, timezone

import numpy as np

from mlbsim.config.settings import AppConfig
from mlbsim.db.models import WindDirection
from mlbsim.simulation.errors import (
    InvalidParameterError,
    MissingDataError,
    MissingDataReason,
)
from mlbsim.simulation.factors import Insights, KeyFactors, derive_insights, derive_key_factors
from mlbsim.simulation.inputs import (
    GameContext,
    ParkFactors,
    TeamSeasonStats,
    WeatherConditions,
)

logger = logging.getLogger(__name__)

DEFAULT_ITERATIONS = 10_000

# Weather adjustments (additive on a 1.0 base)
WIND_OUT_BONUS = 0.05
STRONG_WIND_MPH = 15.0
COLD_PENALTY = 0.03
COLD_TEMPERATURE_F = 50.0

# Static over/under heuristic, used only when SimulationParams.static_over_under
STATIC_FAVORED_PROB = 0.52

MAX_CONFIDENCE = 0.95


@dataclass(frozen=True)
class SimulationParams:
    """Tunable constants of the run-scoring model.

    ``home_field_win_rate`` is the historical home win rate. It is a prior on
    outcomes, not a run multiplier; the run multiplier applied to the home
    side is ``home_run_factor``, derived as ``home_field_win_rate / 0.5``
    unless set explicitly. ``home_run_factor=0.54`` reproduces the legacy
    model that multiplied home runs by the win rate itself.
    """

    run_std_dev: float = 2.0
    home_field_win_rate: float = 0.54
    home_run_factor: float | None = None
    static_over_under: bool = False

    @property
    def effective_home_run_factor(self) -> float:
        if self.home_run_factor is not None:
            return self.home_run_factor
        return self.home_field_win_rate / 0.5

    @classmethod
    def from_config(cls, config: AppConfig) -> "SimulationParams":
        return cls(
            run_std_dev=config.run_std_dev,
            home_field_win_rate=config.home_field_win_rate,
            home_run_factor=config.home_run_factor,
            static_over_under=config.static_over_under,
        )


@dataclass(frozen=True)
class Adjustments:
    """Multipliers actually applied to simulated run totals."""

    park: float
    weather: float
    home_field: float


@dataclass(frozen=True)
class SimulationResult:
    """Prediction for one game, aggregated over all trials."""

    game_id: int
    home_win_probability: float
    away_win_probability: float
    predicted_home_score: int
    predicted_away_score: int
    avg_home_score: float  # 1 decimal
    avg_away_score: float  # 1 decimal
    predicted_total_runs: float  # 1 decimal
    over_under_line: float  # multiple of 0.5
    over_probability: float
    under_probability: float
    push_probability: float
    confidence_score: float
    key_factors: KeyFactors
    insights: Insights
    adjustments: Adjustments
    simulation_count: int
    generated_at: datetime


def round_half_up(value: float, ndigits: int = 0) -> float:
    """Round halves up for non-negative values (2.5 -> 3.0, not 2.0)."""
    scale = 10 ** ndigits
    return math.floor(value * scale + 0.5) / scale


def validate_iterations(iterations) -> int:
    """Return ``iterations`` as an int, or raise InvalidParameterError.

    Accepts integral numbers >= 1. Booleans, NaN, infinities and
    non-integral values are rejected.
    """
    if isinstance(iterations, bool) or not isinstance(iterations, numbers.Real):
        raise InvalidParameterError(f"iterations must be a number, got {iterations!r}")
    if not math.isfinite(iterations):
        raise InvalidParameterError(f"iterations must be finite, got {iterations!r}")
    if iterations != int(iterations):
        raise InvalidParameterError(f"iterations must be a whole number, got {iterations!r}")
    if iterations < 1:
        raise InvalidParameterError(f"iterations must be >= 1, got {iterations!r}")
    return int(iterations)


def _require_inputs(
    context: GameContext,
) -> tuple[TeamSeasonStats, TeamSeasonStats, ParkFactors, WeatherConditions]:
    """Single gate for absent inputs; never falls back to league averages."""
    if context.home_team_stats is None:
        raise MissingDataError(
            MissingDataReason.INSUFFICIENT_BATTING_DATA, "home team season stats not available"
        )
    if context.away_team_stats is None:
        raise MissingDataError(
            MissingDataReason.INSUFFICIENT_BATTING_DATA, "away team season stats not available"
        )
    if context.park_factors is None:
        raise MissingDataError(MissingDataReason.MISSING_PARK_FACTORS, "park factors not available")
    if context.weather is None:
        raise MissingDataError(MissingDataReason.MISSING_WEATHER_DATA, "weather not available")

    for side, stats in (("home", context.home_team_stats), ("away", context.away_team_stats)):
        if stats.games_played == 0:
            raise MissingDataError(
                MissingDataReason.INSUFFICIENT_BATTING_DATA,
                f"{side} team has no games played this season",
            )

    return (
        context.home_team_stats,
        context.away_team_stats,
        context.park_factors,
        context.weather,
    )


def park_adjustment(park: ParkFactors) -> float:
    """Average of the runs and home-run factors."""
    return (park.runs_factor + park.home_run_factor) / 2


def weather_adjustment(weather: WeatherConditions) -> float:
    """Additive weather multiplier around 1.0.

    +0.05 when the wind blows out or exceeds 15 mph (counted once), -0.03
    below 50°F. Both may apply.
    """
    adjustment = 1.0
    if weather.wind_direction is WindDirection.OUT or weather.wind_speed_mph > STRONG_WIND_MPH:
        adjustment += WIND_OUT_BONUS
    if weather.temperature_f < COLD_TEMPERATURE_F:
        adjustment -= COLD_PENALTY
    return adjustment


def _sample_runs(
    rng: np.random.Generator, baseline: float, std_dev: float, multiplier: float, n: int
) -> np.ndarray:
    """Draw n adjusted, whole-run totals for one team."""
    draws = np.maximum(rng.normal(baseline, std_dev, size=n), 0.0)
    return np.floor(draws * multiplier + 0.5).astype(np.int64)


def _over_under(
    totals: np.ndarray, line: float, mean_total: float, n: int, static: bool
) -> tuple[float, float, float]:
    """Return (over, under, push) probabilities for ``line``."""
    if static:
        favored, other = STATIC_FAVORED_PROB, round(1 - STATIC_FAVORED_PROB, 3)
        if mean_total > line:
            return favored, other, 0.0
        return other, favored, 0.0

    over = int(np.count_nonzero(totals > line)) / n
    under = int(np.count_nonzero(totals < line)) / n
    over = round_half_up(over, 3)
    under = round_half_up(under, 3)
    push = max(0.0, round(1.0 - over - under, 3))
    return over, under, push


def confidence_score(home: TeamSeasonStats, away: TeamSeasonStats) -> float:
    """0.5 plus one point per game of season record gap, capped at 0.95."""
    gap = abs(home.record_differential - away.record_differential)
    return round_half_up(min(MAX_CONFIDENCE, 0.5 + gap / 100), 3)


def simulate_game(
    context: GameContext,
    iterations: int = DEFAULT_ITERATIONS,
    *,
    seed: int | None = None,
    rng: np.random.Generator | None = None,
    params: SimulationParams | None = None,
    generated_at: datetime | None = None,
) -> SimulationResult:
    """Run the Monte Carlo simulation for one game.

    Args:
        context: Resolved inputs for the game
        iterations: Number of trials (N); must be an integer >= 1
        seed: Seed for a fresh generator (ignored when ``rng`` is given)
        rng: Random generator to consume; one is created per call otherwise
        params: Model constants (defaults to SimulationParams())
        generated_at: Result timestamp (defaults to now, UTC)

    Returns:
        SimulationResult with simulation_count == iterations

    Raises:
        InvalidParameterError: If iterations is not an integer >= 1
        MissingDataError: If any input is absent or a team has no games played
    """
    n = validate_iterations(iterations)
    home, away, park, weather = _require_inputs(context)
    params = params or SimulationParams()
    if rng is None:
        rng = np.random.default_rng(seed)

    park_adj = park_adjustment(park)
    weather_adj = weather_adjustment(weather)
    home_field = params.effective_home_run_factor

    # Home first, then away: the draw order keeps seeded runs comparable
    home_runs = _sample_runs(
        rng, home.runs_per_game, params.run_std_dev, park_adj * weather_adj * home_field, n
    )
    away_runs = _sample_runs(rng, away.runs_per_game, params.run_std_dev, park_adj * weather_adj, n)

    # Ties count for neither side but remain in N
    home_wins = int(np.count_nonzero(home_runs > away_runs))
    home_win_probability = round_half_up(home_wins / n, 3)

    avg_home = round_half_up(float(home_runs.sum()) / n, 1)
    avg_away = round_half_up(float(away_runs.sum()) / n, 1)
    total_runs = round_half_up(avg_home + avg_away, 1)
    line = round_half_up(total_runs * 2) / 2

    over, under, push = _over_under(
        home_runs + away_runs, line, total_runs, n, params.static_over_under
    )

    result = SimulationResult(
        game_id=context.game_id,
        home_win_probability=home_win_probability,
        away_win_probability=1 - home_win_probability,
        predicted_home_score=int(round_half_up(avg_home)),
        predicted_away_score=int(round_half_up(avg_away)),
        avg_home_score=avg_home,
        avg_away_score=avg_away,
        predicted_total_runs=total_runs,
        over_under_line=line,
        over_probability=over,
        under_probability=under,
        push_probability=push,
        confidence_score=confidence_score(home, away),
        key_factors=derive_key_factors(home, away, park, weather, params.home_field_win_rate),
        insights=derive_insights(home, away, park, weather_adj, avg_home, avg_away),
        adjustments=Adjustments(park=park_adj, weather=weather_adj, home_field=home_field),
        simulation_count=n,
        generated_at=generated_at or datetime.now(timezone.utc),
    )

    logger.debug(
        "Simulated game %s over %d trials: home %.3f, score %.1f-%.1f, line %.1f",
        context.game_id,
        n,
        result.home_win_probability,
        avg_home,
        avg_away,
        line,
    )
    return result
