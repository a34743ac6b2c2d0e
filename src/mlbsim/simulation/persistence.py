"""Prediction store writes.

One row per game in game_predictions; a new simulation replaces the previous
prediction for that game.
"""

import json
from datetime import datetime

import asyncpg

from mlbsim.db.models import Table
from mlbsim.simulation.engine import SimulationResult


async def upsert_prediction(conn: asyncpg.Connection, result: SimulationResult) -> int:
    """Insert or replace the prediction for ``result.game_id``.

    Args:
        conn: Database connection
        result: Output of simulate_game()

    Returns:
        id of the game_predictions row

    Raises:
        asyncpg.PostgresError: If the write fails (e.g. unknown game_id)
    """
    key_factors = {
        **result.key_factors.to_dict(),
        "insights": result.insights.to_dict(),
        "adjustments": {
            "park": result.adjustments.park,
            "weather": result.adjustments.weather,
            "home_field": result.adjustments.home_field,
        },
    }

    return await conn.fetchval(
        f"""
        INSERT INTO {Table.GAME_PREDICTIONS} (
            game_id,
            home_win_probability,
            away_win_probability,
            predicted_home_score,
            predicted_away_score,
            over_under_line,
            over_probability,
            under_probability,
            confidence_score,
            key_factors,
            simulation_count,
            prediction_date,
            last_updated
        )
        VALUES ($1, $2, $3, $4, $5, $6, $7, $8, $9, $10::jsonb, $11, $12, $12)
        ON CONFLICT (game_id) DO UPDATE SET
            home_win_probability = EXCLUDED.home_win_probability,
            away_win_probability = EXCLUDED.away_win_probability,
            predicted_home_score = EXCLUDED.predicted_home_score,
            predicted_away_score = EXCLUDED.predicted_away_score,
            over_under_line = EXCLUDED.over_under_line,
            over_probability = EXCLUDED.over_probability,
            under_probability = EXCLUDED.under_probability,
            confidence_score = EXCLUDED.confidence_score,
            key_factors = EXCLUDED.key_factors,
            simulation_count = EXCLUDED.simulation_count,
            prediction_date = EXCLUDED.prediction_date,
            last_updated = EXCLUDED.last_updated
        RETURNING id
        """,
        result.game_id,
        result.home_win_probability,
        result.away_win_probability,
        result.predicted_home_score,
        result.predicted_away_score,
        result.over_under_line,
        result.over_probability,
        result.under_probability,
        result.confidence_score,
        json.dumps(key_factors),
        result.simulation_count,
        result.generated_at,
    )


async def fetch_prediction_date(conn: asyncpg.Connection, game_id: int) -> datetime | None:
    """Timestamp of the stored prediction for a game, or None."""
    return await conn.fetchval(
        f"SELECT prediction_date FROM {Table.GAME_PREDICTIONS} WHERE game_id = $1",
        game_id,
    )
