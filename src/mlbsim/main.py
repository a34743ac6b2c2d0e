"""Command-line entry point.

Usage:
    mlbsim simulate --game-id 745123 [--iterations 20000] [--seed 7] [--no-persist]
    mlbsim predict [--game-id 745123 --game-id 745124]
    mlbsim serve
    mlbsim migrate
"""

import argparse
import asyncio
import json
import logging
import sys

from mlbsim.config import get_config
from mlbsim.db.pool import close_pool, get_pool
from mlbsim.db.schema.migrate import run_migrations
from mlbsim.pipeline import predict_games
from mlbsim.service.payload import result_payload
from mlbsim.service.server import serve
from mlbsim.simulation.engine import SimulationParams, simulate_game
from mlbsim.simulation.errors import (
    GameNotFoundError,
    InvalidParameterError,
    MissingDataError,
)
from mlbsim.simulation.persistence import upsert_prediction
from mlbsim.stores.context import build_game_context, postgres_stores

logger = logging.getLogger(__name__)


async def run_simulate(game_id: int, iterations: int, seed: int | None, persist: bool) -> dict:
    """Simulate one game and optionally store the prediction."""
    config = get_config()
    pool = await get_pool()
    try:
        context = await build_game_context(game_id, postgres_stores(pool))
        result = simulate_game(
            context, iterations, seed=seed, params=SimulationParams.from_config(config)
        )
        if persist:
            async with pool.acquire() as conn:
                await upsert_prediction(conn, result)
            logger.info("Stored prediction for game %s", game_id)
        return result_payload(result)
    finally:
        await close_pool()


async def run_predict(game_ids: list[int] | None) -> None:
    pool = await get_pool()
    try:
        await predict_games(pool, game_ids)
    finally:
        await close_pool()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="mlbsim",
        description="MLB game outcome simulator",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    simulate = sub.add_parser("simulate", help="Simulate one game and print the prediction")
    simulate.add_argument("--game-id", type=int, required=True)
    simulate.add_argument(
        "--iterations",
        type=int,
        default=None,
        help="Trials to run (default: DEFAULT_SIM_N, bounded by MIN_SIM_N and MAX_SIM_N)",
    )
    simulate.add_argument("--seed", type=int, default=None, help="Seed for reproducible output")
    simulate.add_argument(
        "--no-persist",
        action="store_true",
        help="Print the prediction without writing it to the prediction store",
    )

    predict = sub.add_parser("predict", help="Predict upcoming scheduled games")
    predict.add_argument(
        "--game-id",
        type=int,
        action="append",
        dest="game_ids",
        help="Restrict the run to this game (repeatable)",
    )

    sub.add_parser("serve", help="Run the HTTP simulation service")
    sub.add_parser("migrate", help="Apply pending database migrations")
    return parser


def main(argv: list[str] | None = None) -> None:
    """Main entry point with logging configuration."""
    parser = build_parser()
    args = parser.parse_args(argv)

    config = get_config()
    logging.basicConfig(
        level=config.log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    if args.command == "simulate" and args.iterations is None:
        args.iterations = config.default_sim_n

    if args.command == "simulate" and not config.min_sim_n <= args.iterations <= config.max_sim_n:
        parser.error(f"--iterations must be between {config.min_sim_n} and {config.max_sim_n}")

    try:
        if args.command == "simulate":
            payload = asyncio.run(
                run_simulate(args.game_id, args.iterations, args.seed, not args.no_persist)
            )
            print(json.dumps(payload, indent=2))
        elif args.command == "predict":
            asyncio.run(run_predict(args.game_ids))
        elif args.command == "serve":
            asyncio.run(serve())
        elif args.command == "migrate":
            asyncio.run(run_migrations())
    except MissingDataError as e:
        logger.error("%s. %s", e, e.reason.action)
        sys.exit(2)
    except (GameNotFoundError, InvalidParameterError) as e:
        logger.error("%s", e)
        sys.exit(2)
    except KeyboardInterrupt:
        logging.info("Interrupted by user")
        sys.exit(0)


if __name__ == "__main__":
    main()
