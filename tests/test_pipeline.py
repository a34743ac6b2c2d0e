"""Tests for the batch prediction run."""

from dataclasses import replace
from datetime import date, datetime, timedelta, timezone
from unittest.mock import AsyncMock

import pytest

from mlbsim.pipeline import PredictionRunSummary, is_fresh, predict_games

from conftest import GAME_ID, FakePool, MemoryGameStore, make_game

NOW = datetime(2025, 7, 4, 12, 0, tzinfo=timezone.utc)


def make_conn(last_prediction=None, upsert_error=None) -> AsyncMock:
    """Connection whose fetchval answers freshness checks and upserts."""
    upserted = []

    async def fetchval(sql, *args):
        if "INSERT INTO" in sql:
            if upsert_error is not None:
                raise upsert_error
            upserted.append(args[0])
            return len(upserted)
        return last_prediction

    conn = AsyncMock()
    conn.fetchval = AsyncMock(side_effect=fetchval)
    conn.upserted = upserted
    return conn


def test_is_fresh():
    assert is_fresh(NOW - timedelta(hours=1), NOW, 6) is True
    assert is_fresh(NOW - timedelta(hours=6), NOW, 6) is False
    assert is_fresh(None, NOW, 6) is False


@pytest.mark.asyncio
async def test_predicts_scheduled_game(stores, app_config):
    conn = make_conn()

    summary = await predict_games(
        FakePool(conn), stores=stores, config=app_config, iterations=1000, now=NOW
    )

    assert summary == PredictionRunSummary(processed=1, skipped=0, errors=0)
    assert conn.upserted == [GAME_ID]


@pytest.mark.asyncio
async def test_fresh_prediction_skipped(stores, app_config):
    conn = make_conn(last_prediction=NOW - timedelta(hours=1))

    summary = await predict_games(
        FakePool(conn), stores=stores, config=app_config, iterations=1000, now=NOW
    )

    assert summary == PredictionRunSummary(processed=0, skipped=1, errors=0)
    assert conn.upserted == []


@pytest.mark.asyncio
async def test_stale_prediction_regenerated(stores, app_config):
    conn = make_conn(last_prediction=NOW - timedelta(hours=7))

    summary = await predict_games(
        FakePool(conn), stores=stores, config=app_config, iterations=1000, now=NOW
    )

    assert summary.processed == 1
    assert conn.upserted == [GAME_ID]


@pytest.mark.asyncio
async def test_missing_data_counted_and_run_continues(stores, app_config):
    """Second game has no weather row; the first is still predicted."""
    games = MemoryGameStore([make_game(), make_game(game_id=GAME_ID + 1)])
    conn = make_conn()

    summary = await predict_games(
        FakePool(conn),
        stores=replace(stores, games=games),
        config=app_config,
        iterations=1000,
        now=NOW,
    )

    assert summary == PredictionRunSummary(processed=1, skipped=0, errors=1)
    assert conn.upserted == [GAME_ID]


@pytest.mark.asyncio
async def test_write_failure_counted(stores, app_config):
    conn = make_conn(upsert_error=RuntimeError("connection reset"))

    summary = await predict_games(
        FakePool(conn), stores=stores, config=app_config, iterations=1000, now=NOW
    )

    assert summary == PredictionRunSummary(processed=0, skipped=0, errors=1)


@pytest.mark.asyncio
async def test_window_excludes_later_games(stores, app_config):
    later = make_game(game_id=GAME_ID + 2, game_date=date(2025, 7, 20))
    games = MemoryGameStore([make_game(), later])
    conn = make_conn()

    summary = await predict_games(
        FakePool(conn),
        stores=replace(stores, games=games),
        config=app_config,
        iterations=1000,
        now=NOW,
    )

    assert summary.processed == 1
    assert conn.upserted == [GAME_ID]


@pytest.mark.asyncio
async def test_explicit_game_ids(stores, app_config):
    games = MemoryGameStore(
        [make_game(), make_game(game_id=GAME_ID + 1, status="final")]
    )
    conn = make_conn()

    summary = await predict_games(
        FakePool(conn),
        [GAME_ID, GAME_ID + 1],
        stores=replace(stores, games=games),
        config=app_config,
        iterations=1000,
        now=NOW,
    )

    # Final games are never re-predicted
    assert summary.processed == 1
    assert conn.upserted == [GAME_ID]
