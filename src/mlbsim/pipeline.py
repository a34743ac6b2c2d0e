"""Batch prediction run for upcoming games.

For each scheduled game (explicit ids, or the next few days):
    1. Skip it if its stored prediction is still fresh
    2. Resolve inputs from the stores
    3. Simulate
    4. Upsert the prediction

A failure on one game is logged and counted; the run continues.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

import asyncpg

from mlbsim.config.settings import AppConfig, get_config
from mlbsim.simulation.engine import SimulationParams, simulate_game
from mlbsim.simulation.errors import MissingDataError
from mlbsim.simulation.persistence import fetch_prediction_date, upsert_prediction
from mlbsim.stores.context import Stores, build_game_context, postgres_stores

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PredictionRunSummary:
    """Counts for one batch run."""

    processed: int
    skipped: int
    errors: int


def is_fresh(prediction_date: datetime | None, now: datetime, refresh_hours: float) -> bool:
    """True if a stored prediction is younger than ``refresh_hours``."""
    if prediction_date is None:
        return False
    return now - prediction_date < timedelta(hours=refresh_hours)


async def predict_games(
    pool: asyncpg.Pool,
    game_ids: list[int] | None = None,
    *,
    stores: Stores | None = None,
    config: AppConfig | None = None,
    iterations: int | None = None,
    now: datetime | None = None,
) -> PredictionRunSummary:
    """Generate and store predictions for scheduled games.

    Args:
        pool: Pool used for freshness checks and upserts
        game_ids: Games to predict; None means every scheduled game from
            today through ``prediction_window_days`` ahead
        stores: Input stores (default: Postgres stores on ``pool``)
        config: Application config (default: get_config())
        iterations: Trials per game (default: config.default_sim_n)
        now: Reference time (default: now, UTC)

    Returns:
        PredictionRunSummary
    """
    config = config or get_config()
    stores = stores or postgres_stores(pool)
    now = now or datetime.now(timezone.utc)
    iterations = iterations or config.default_sim_n
    params = SimulationParams.from_config(config)

    today = now.date()
    games = await stores.games.list_scheduled_games(
        today, today + timedelta(days=config.prediction_window_days), game_ids
    )
    logger.info("Predicting %d scheduled game(s)", len(games))

    processed = skipped = errors = 0

    for game in games:
        try:
            async with pool.acquire() as conn:
                last = await fetch_prediction_date(conn, game.game_id)
            if is_fresh(last, now, config.prediction_refresh_hours):
                logger.info("Skipping game %s: prediction from %s is fresh", game.game_id, last)
                skipped += 1
                continue

            context = await build_game_context(game.game_id, stores, game=game)
            result = simulate_game(context, iterations, params=params, generated_at=now)

            async with pool.acquire() as conn:
                await upsert_prediction(conn, result)
            processed += 1
            logger.info(
                "Predicted game %s: home %.3f, line %.1f",
                game.game_id,
                result.home_win_probability,
                result.over_under_line,
            )
        except MissingDataError as e:
            logger.warning("Game %s not predicted: %s (%s)", game.game_id, e, e.reason.action)
            errors += 1
        except Exception as e:  # noqa: BLE001
            logger.error("Game %s failed: %s", game.game_id, e)
            errors += 1

    summary = PredictionRunSummary(processed=processed, skipped=skipped, errors=errors)
    logger.info(
        "Prediction run complete: %d processed, %d skipped, %d errors",
        summary.processed,
        summary.skipped,
        summary.errors,
    )
    return summary
