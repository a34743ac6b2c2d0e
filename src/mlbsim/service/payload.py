"""JSON response bodies for the simulation endpoint."""

from datetime import datetime, timezone
from typing import Any

from mlbsim.simulation.engine import SimulationResult
from mlbsim.simulation.errors import MissingDataError


def result_payload(result: SimulationResult) -> dict[str, Any]:
    """Success body: simulation_stats, factors, key_factors and key_insights."""
    return {
        "success": True,
        "game_id": result.game_id,
        "iterations": result.simulation_count,
        "simulation_stats": {
            "home_win_probability": result.home_win_probability,
            "away_win_probability": round(result.away_win_probability, 3),
            "predicted_home_score": result.predicted_home_score,
            "predicted_away_score": result.predicted_away_score,
            "predicted_total_runs": result.predicted_total_runs,
            "over_under_line": result.over_under_line,
            "over_probability": result.over_probability,
            "under_probability": result.under_probability,
            "push_probability": result.push_probability,
            "confidence_score": result.confidence_score,
            "sample_size": result.simulation_count,
        },
        "factors": {
            "park_factor": result.adjustments.park,
            "weather_impact": result.adjustments.weather,
            "home_advantage": result.adjustments.home_field,
        },
        "key_factors": result.key_factors.to_dict(),
        "key_insights": result.insights.to_dict(),
        "timestamp": result.generated_at.isoformat(),
    }


def error_payload(code: str, message: str, action: str | None = None) -> dict[str, Any]:
    """Failure body; ``action`` tells the client what to run before retrying."""
    error: dict[str, Any] = {"code": code, "message": message}
    if action:
        error["action"] = action
    return {
        "success": False,
        "error": error,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }


def missing_data_payload(exc: MissingDataError) -> dict[str, Any]:
    return error_payload(exc.reason.value, str(exc), exc.reason.action)
