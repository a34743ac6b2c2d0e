"""Key factors and qualitative insights attached to a prediction.

Pure functions over the simulator inputs and aggregates. The key factors are
a closed structure: exactly one field per factor kind, no free-form keys.
"""

from dataclasses import asdict, dataclass

from mlbsim.db.models import ParkCategory, Side
from mlbsim.simulation.inputs import ParkFactors, TeamSeasonStats, WeatherConditions

# Home win rate above which home field counts as an advantage
HOME_ADVANTAGE_THRESHOLD = 0.52

# Park runs_factor band around 1.0 treated as neutral
PARK_NEUTRAL_BAND = 0.05

# Weather multiplier band around 1.0 treated as neutral
WEATHER_NEUTRAL_BAND = 0.02

# Predicted-score margin (runs) needed to call an offensive edge
OFFENSE_MARGIN = 0.5

# Season record gap (games) that drives confidence on its own
RECORD_GAP_DRIVER = 10


@dataclass(frozen=True)
class KeyFactors:
    """Structured explanation of a prediction."""

    home_advantage: bool
    pitching_edge: Side
    offensive_edge: Side
    park_category: ParkCategory
    weather_summary: str

    def to_dict(self) -> dict:
        data = asdict(self)
        data["pitching_edge"] = self.pitching_edge.value
        data["offensive_edge"] = self.offensive_edge.value
        data["park_category"] = self.park_category.value
        return data


@dataclass(frozen=True)
class Insights:
    """Human-readable summary lines for display."""

    pitching_matchup: str
    offensive_edge: str
    environmental_impact: str
    confidence_drivers: tuple[str, ...]

    def to_dict(self) -> dict:
        data = asdict(self)
        data["confidence_drivers"] = list(self.confidence_drivers)
        return data


def park_category(park: ParkFactors) -> ParkCategory:
    """Classify a venue by its runs factor."""
    if park.runs_factor > 1.0 + PARK_NEUTRAL_BAND:
        return ParkCategory.HITTER_FRIENDLY
    if park.runs_factor < 1.0 - PARK_NEUTRAL_BAND:
        return ParkCategory.PITCHER_FRIENDLY
    return ParkCategory.NEUTRAL


def weather_summary(weather: WeatherConditions) -> str:
    """Format weather as ``"Clear, 72°F"``."""
    return f"{weather.condition}, {weather.temperature_f:g}°F"


def derive_key_factors(
    home: TeamSeasonStats,
    away: TeamSeasonStats,
    park: ParkFactors,
    weather: WeatherConditions,
    home_field_win_rate: float,
) -> KeyFactors:
    """Derive the key factors from season stats and the game environment.

    Ties in ERA or runs scored go to the away side.
    """
    return KeyFactors(
        home_advantage=home_field_win_rate > HOME_ADVANTAGE_THRESHOLD,
        pitching_edge=Side.HOME if home.era < away.era else Side.AWAY,
        offensive_edge=Side.HOME if home.runs_scored > away.runs_scored else Side.AWAY,
        park_category=park_category(park),
        weather_summary=weather_summary(weather),
    )


def derive_insights(
    home: TeamSeasonStats,
    away: TeamSeasonStats,
    park: ParkFactors,
    weather_adjustment: float,
    avg_home_score: float,
    avg_away_score: float,
) -> Insights:
    """Build display text from inputs and simulated average scores."""
    pitching_matchup = f"Home staff ERA {home.era:.2f} vs away staff ERA {away.era:.2f}"

    if avg_home_score > avg_away_score + OFFENSE_MARGIN:
        offensive_edge = "Home team has offensive advantage"
    elif avg_away_score > avg_home_score + OFFENSE_MARGIN:
        offensive_edge = "Away team has offensive advantage"
    else:
        offensive_edge = "Balanced offensive capabilities"

    category = park_category(park)
    if category is ParkCategory.HITTER_FRIENDLY:
        environmental_impact = "Hitter-friendly park boosts offense"
    elif category is ParkCategory.PITCHER_FRIENDLY:
        environmental_impact = "Pitcher-friendly park suppresses offense"
    else:
        environmental_impact = "Neutral conditions"

    if weather_adjustment > 1.0 + WEATHER_NEUTRAL_BAND:
        environmental_impact += ". Weather favors offense"
    elif weather_adjustment < 1.0 - WEATHER_NEUTRAL_BAND:
        environmental_impact += ". Weather favors pitching"

    drivers = [
        "Season stats for both teams",
        "Park factors included",
        "Weather conditions included",
    ]
    gap = abs(home.record_differential - away.record_differential)
    if gap >= RECORD_GAP_DRIVER:
        drivers.append(f"Season record gap of {gap} games")

    return Insights(
        pitching_matchup=pitching_matchup,
        offensive_edge=offensive_edge,
        environmental_impact=environmental_impact,
        confidence_drivers=tuple(drivers),
    )
