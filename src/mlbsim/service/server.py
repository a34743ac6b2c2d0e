"""HTTP boundary for on-demand game simulations.

Routes:
    POST /simulate  {"game_id": int, "iterations"?: int, "seed"?: int}
    GET  /health
"""

import asyncio
import json
import logging
import signal
from typing import Optional

import asyncpg
from aiohttp import web

from mlbsim.config.settings import AppConfig, get_config
from mlbsim.db.pool import close_pool, get_pool
from mlbsim.service.payload import error_payload, missing_data_payload, result_payload
from mlbsim.simulation.engine import SimulationParams, simulate_game, validate_iterations
from mlbsim.simulation.errors import (
    GameNotFoundError,
    InvalidParameterError,
    MissingDataError,
)
from mlbsim.simulation.persistence import upsert_prediction
from mlbsim.stores.context import Stores, build_game_context, postgres_stores

logger = logging.getLogger(__name__)

INVALID_PARAMETER = "INVALID_PARAMETER"
GAME_NOT_FOUND = "GAME_NOT_FOUND"


def _is_int(value) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _parse_request(body, config: AppConfig) -> tuple[int, int, int | None]:
    """Validate a request body; return (game_id, iterations, seed)."""
    if not isinstance(body, dict):
        raise InvalidParameterError("request body must be a JSON object")

    game_id = body.get("game_id")
    if not _is_int(game_id):
        raise InvalidParameterError("game_id is required and must be an integer")

    iterations = validate_iterations(body.get("iterations", config.default_sim_n))
    if not config.min_sim_n <= iterations <= config.max_sim_n:
        raise InvalidParameterError(
            f"iterations must be between {config.min_sim_n} and {config.max_sim_n}"
        )

    seed = body.get("seed")
    if seed is not None and not (_is_int(seed) and seed >= 0):
        raise InvalidParameterError("seed must be a non-negative integer")

    return game_id, iterations, seed


async def simulate_endpoint(request: web.Request) -> web.Response:
    """Handle POST /simulate.

    Resolves the game's inputs, runs the simulation, upserts the prediction
    (when the app has a pool) and returns the result.
    """
    config: AppConfig = request.app["config"]
    stores: Stores = request.app["stores"]

    try:
        body = await request.json()
    except (json.JSONDecodeError, UnicodeDecodeError):
        return web.json_response(
            error_payload(INVALID_PARAMETER, "request body is not valid UTF-8 JSON"), status=400
        )

    try:
        game_id, iterations, seed = _parse_request(body, config)
        context = await build_game_context(game_id, stores)
        result = simulate_game(
            context,
            iterations,
            seed=seed,
            params=SimulationParams.from_config(config),
        )
    except InvalidParameterError as e:
        return web.json_response(error_payload(INVALID_PARAMETER, str(e)), status=400)
    except GameNotFoundError as e:
        return web.json_response(error_payload(GAME_NOT_FOUND, str(e)), status=404)
    except MissingDataError as e:
        logger.warning("Refusing to simulate game %s: %s", body.get("game_id"), e)
        return web.json_response(missing_data_payload(e), status=422)

    pool: Optional[asyncpg.Pool] = request.app.get("pool")
    if pool is not None:
        async with pool.acquire() as conn:
            await upsert_prediction(conn, result)

    logger.info(
        "Simulated game %s (%d trials): home %.3f, %d-%d, line %.1f",
        result.game_id,
        result.simulation_count,
        result.home_win_probability,
        result.predicted_home_score,
        result.predicted_away_score,
        result.over_under_line,
    )
    return web.json_response(result_payload(result))


async def health_endpoint(request: web.Request) -> web.Response:
    return web.json_response({"status": "ok"})


def create_app(
    stores: Stores,
    config: AppConfig,
    pool: Optional[asyncpg.Pool] = None,
) -> web.Application:
    """Create the aiohttp application.

    Args:
        stores: Where game inputs are read from
        config: Application config (iteration bounds, model constants)
        pool: Pool for prediction upserts; None disables persistence
    """
    app = web.Application()
    app["stores"] = stores
    app["config"] = config
    if pool is not None:
        app["pool"] = pool
    app.router.add_post("/simulate", simulate_endpoint)
    app.router.add_get("/health", health_endpoint)
    return app


async def run_server(shutdown_event: Optional[asyncio.Event] = None) -> None:
    """Serve until ``shutdown_event`` is set (forever if None)."""
    config = get_config()
    pool = await get_pool()
    app = create_app(postgres_stores(pool), config, pool)

    runner = web.AppRunner(app)
    await runner.setup()
    site = web.TCPSite(runner, config.server_host, config.server_port)
    await site.start()
    logger.info("Simulation service listening on %s:%d", config.server_host, config.server_port)

    try:
        await (shutdown_event or asyncio.Event()).wait()
    finally:
        logger.info("Shutting down simulation service...")
        await runner.cleanup()
        await close_pool()


async def serve() -> None:
    """Run the server and stop on SIGTERM/SIGINT."""
    shutdown_event = asyncio.Event()
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGTERM, signal.SIGINT):
        loop.add_signal_handler(sig, shutdown_event.set)
    await run_server(shutdown_event)


def main() -> None:
    """Run the simulation service as a standalone process."""
    config = get_config()
    logging.basicConfig(
        level=config.log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    asyncio.run(serve())


if __name__ == "__main__":
    main()
