"""Shared asyncpg pool for the statistics stores and the prediction store."""

import asyncio
import logging
from typing import Optional

import asyncpg

from mlbsim.config import get_config

logger = logging.getLogger(__name__)

CONNECT_TIMEOUT_SECONDS = 5.0

_pool: Optional[asyncpg.Pool] = None


async def get_pool() -> asyncpg.Pool:
    """
    Return the process-wide pool, creating it on first use.

    A new pool must answer ``SELECT 1`` before it is handed out; a pool that
    fails the check is closed and the error re-raised as RuntimeError.

    Raises:
        asyncio.TimeoutError: If the server does not accept connections in time
        RuntimeError: If the health check fails
    """
    global _pool

    if _pool is not None:
        return _pool

    config = get_config()

    try:
        pool = await asyncio.wait_for(
            asyncpg.create_pool(
                str(config.db_dsn),
                min_size=config.db_pool_min,
                max_size=config.db_pool_max,
            ),
            timeout=CONNECT_TIMEOUT_SECONDS,
        )
    except asyncio.TimeoutError:
        raise asyncio.TimeoutError(
            f"Could not reach the prediction database within {CONNECT_TIMEOUT_SECONDS:.0f}s. "
            "Check DB_DSN and that PostgreSQL is running."
        )

    try:
        async with pool.acquire() as conn:
            result = await conn.fetchval("SELECT 1")
            if result != 1:
                raise RuntimeError(f"Health check returned {result!r}, expected 1")
    except Exception as e:
        await pool.close()
        raise RuntimeError(f"Database health check failed: {e}") from e

    logger.info(
        "Database pool ready (min=%d, max=%d)", config.db_pool_min, config.db_pool_max
    )
    _pool = pool
    return _pool


async def close_pool() -> None:
    """
    Close the shared pool if one was created.

    Falls back to terminate() when a graceful close does not finish in time,
    which happens when a connection was never released.
    """
    global _pool
    if _pool is None:
        return

    try:
        await asyncio.wait_for(_pool.close(), timeout=CONNECT_TIMEOUT_SECONDS)
    except asyncio.TimeoutError:
        logger.warning("Pool close timed out; terminating open connections")
        _pool.terminate()
    finally:
        _pool = None
