"""PostgreSQL-backed stores.

Each store acquires its own connection from the pool per query so that the
lookups for one game can run concurrently. NULLs in required columns are
reported as Missing; no column is ever filled with a league-average default.
"""

import logging
from datetime import date
from decimal import Decimal

import asyncpg

from mlbsim.db.models import GameStatus, Table
from mlbsim.simulation.errors import InvalidParameterError, MissingDataReason
from mlbsim.simulation.inputs import ParkFactors, TeamSeasonStats, WeatherConditions
from mlbsim.stores.base import (
    GameRecord,
    GameStore,
    Lookup,
    Missing,
    ParkFactorsStore,
    Resolved,
    TeamStatsStore,
    WeatherStore,
)

logger = logging.getLogger(__name__)

BATTING_COLUMNS = ("wins", "losses", "runs_scored", "team_avg", "team_obp", "team_slg")
PITCHING_COLUMNS = ("team_era", "runs_allowed")


def _num(value: Decimal | float | int) -> float:
    return float(value)


def _null_columns(row: asyncpg.Record, columns: tuple[str, ...]) -> list[str]:
    return [c for c in columns if row[c] is None]


def _game_record(row: asyncpg.Record) -> GameRecord:
    return GameRecord(
        game_id=row["game_id"],
        game_date=row["game_date"],
        home_team_id=row["home_team_id"],
        away_team_id=row["away_team_id"],
        venue_name=row["venue_name"],
        status=row["status"],
    )


class PostgresGameStore(GameStore):
    def __init__(self, pool: asyncpg.Pool):
        self.pool = pool

    async def fetch_game(self, game_id: int) -> GameRecord | None:
        async with self.pool.acquire() as conn:
            row = await conn.fetchrow(
                f"""
                SELECT game_id, game_date, home_team_id, away_team_id, venue_name, status
                FROM {Table.GAMES}
                WHERE game_id = $1
                """,
                game_id,
            )
        return _game_record(row) if row else None

    async def list_scheduled_games(
        self,
        start: date,
        end: date,
        game_ids: list[int] | None = None,
    ) -> list[GameRecord]:
        async with self.pool.acquire() as conn:
            if game_ids:
                rows = await conn.fetch(
                    f"""
                    SELECT game_id, game_date, home_team_id, away_team_id, venue_name, status
                    FROM {Table.GAMES}
                    WHERE status = $1 AND game_id = ANY($2::int[])
                    ORDER BY game_date, game_id
                    """,
                    GameStatus.SCHEDULED.value,
                    game_ids,
                )
            else:
                rows = await conn.fetch(
                    f"""
                    SELECT game_id, game_date, home_team_id, away_team_id, venue_name, status
                    FROM {Table.GAMES}
                    WHERE status = $1 AND game_date BETWEEN $2 AND $3
                    ORDER BY game_date, game_id
                    """,
                    GameStatus.SCHEDULED.value,
                    start,
                    end,
                )
        return [_game_record(row) for row in rows]


class PostgresTeamStatsStore(TeamStatsStore):
    def __init__(self, pool: asyncpg.Pool):
        self.pool = pool

    async def fetch_team_stats(self, team_id: int, season: int) -> Lookup[TeamSeasonStats]:
        async with self.pool.acquire() as conn:
            row = await conn.fetchrow(
                f"""
                SELECT wins, losses, runs_scored, runs_allowed,
                       team_era, team_avg, team_obp, team_slg
                FROM {Table.TEAM_STATS}
                WHERE team_id = $1 AND season = $2
                """,
                team_id,
                season,
            )

        if row is None:
            return Missing(
                MissingDataReason.INSUFFICIENT_BATTING_DATA,
                f"no team stats for team {team_id} in {season}",
            )

        missing_batting = _null_columns(row, BATTING_COLUMNS)
        if missing_batting:
            return Missing(
                MissingDataReason.INSUFFICIENT_BATTING_DATA,
                f"team {team_id} ({season}) has no {', '.join(missing_batting)}",
            )
        missing_pitching = _null_columns(row, PITCHING_COLUMNS)
        if missing_pitching:
            return Missing(
                MissingDataReason.INSUFFICIENT_PITCHING_DATA,
                f"team {team_id} ({season}) has no {', '.join(missing_pitching)}",
            )

        try:
            stats = TeamSeasonStats(
                wins=int(row["wins"]),
                losses=int(row["losses"]),
                runs_scored=_num(row["runs_scored"]),
                runs_allowed=_num(row["runs_allowed"]),
                era=_num(row["team_era"]),
                batting_average=_num(row["team_avg"]),
                on_base_percentage=_num(row["team_obp"]),
                slugging_percentage=_num(row["team_slg"]),
            )
        except InvalidParameterError as e:
            logger.warning("Rejecting team stats for team %s (%s): %s", team_id, season, e)
            return Missing(
                MissingDataReason.INSUFFICIENT_BATTING_DATA,
                f"team {team_id} ({season}) stats are invalid: {e}",
            )
        return Resolved(stats)


class PostgresParkFactorsStore(ParkFactorsStore):
    def __init__(self, pool: asyncpg.Pool):
        self.pool = pool

    async def fetch_park_factors(self, venue_name: str, season: int) -> Lookup[ParkFactors]:
        async with self.pool.acquire() as conn:
            row = await conn.fetchrow(
                f"""
                SELECT runs_factor, hr_factor, hits_factor
                FROM {Table.PARK_FACTORS}
                WHERE venue_name = $1 AND season = $2
                """,
                venue_name,
                season,
            )

        if row is None:
            return Missing(
                MissingDataReason.MISSING_PARK_FACTORS,
                f"no park factors for {venue_name} in {season}",
            )
        missing = _null_columns(row, ("runs_factor", "hr_factor", "hits_factor"))
        if missing:
            return Missing(
                MissingDataReason.MISSING_PARK_FACTORS,
                f"{venue_name} ({season}) has no {', '.join(missing)}",
            )

        try:
            park = ParkFactors(
                runs_factor=_num(row["runs_factor"]),
                home_run_factor=_num(row["hr_factor"]),
                hits_factor=_num(row["hits_factor"]),
            )
        except InvalidParameterError as e:
            return Missing(
                MissingDataReason.MISSING_PARK_FACTORS,
                f"{venue_name} ({season}) factors are invalid: {e}",
            )
        return Resolved(park)


class PostgresWeatherStore(WeatherStore):
    def __init__(self, pool: asyncpg.Pool):
        self.pool = pool

    async def fetch_weather(self, game_id: int) -> Lookup[WeatherConditions]:
        async with self.pool.acquire() as conn:
            row = await conn.fetchrow(
                f"""
                SELECT temperature_f, wind_speed_mph, wind_direction, condition
                FROM {Table.WEATHER_DATA}
                WHERE game_id = $1
                """,
                game_id,
            )

        if row is None:
            return Missing(MissingDataReason.MISSING_WEATHER_DATA, f"no weather for game {game_id}")
        missing = _null_columns(row, ("temperature_f", "wind_speed_mph"))
        if missing:
            return Missing(
                MissingDataReason.MISSING_WEATHER_DATA,
                f"weather for game {game_id} has no {', '.join(missing)}",
            )

        try:
            weather = WeatherConditions(
                temperature_f=_num(row["temperature_f"]),
                wind_speed_mph=_num(row["wind_speed_mph"]),
                wind_direction=row["wind_direction"],
                condition=row["condition"] or "Unknown",
            )
        except InvalidParameterError as e:
            return Missing(
                MissingDataReason.MISSING_WEATHER_DATA,
                f"weather for game {game_id} is invalid: {e}",
            )
        return Resolved(weather)
