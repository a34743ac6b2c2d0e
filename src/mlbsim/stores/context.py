"""Assemble a GameContext from the stores.

This is the only place where store lookups become simulator inputs: every
Missing lookup is turned into a MissingDataError here.
"""

import asyncio
import logging
from dataclasses import dataclass

import asyncpg

from mlbsim.simulation.errors import GameNotFoundError, MissingDataReason
from mlbsim.simulation.inputs import GameContext
from mlbsim.stores.base import (
    GameRecord,
    GameStore,
    Missing,
    ParkFactorsStore,
    TeamStatsStore,
    WeatherStore,
    require,
)
from mlbsim.stores.postgres import (
    PostgresGameStore,
    PostgresParkFactorsStore,
    PostgresTeamStatsStore,
    PostgresWeatherStore,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Stores:
    """The collaborators a prediction reads from."""

    games: GameStore
    team_stats: TeamStatsStore
    park_factors: ParkFactorsStore
    weather: WeatherStore


def postgres_stores(pool: asyncpg.Pool) -> Stores:
    """Stores backed by the given pool."""
    return Stores(
        games=PostgresGameStore(pool),
        team_stats=PostgresTeamStatsStore(pool),
        park_factors=PostgresParkFactorsStore(pool),
        weather=PostgresWeatherStore(pool),
    )


async def _park_lookup(stores: Stores, game: GameRecord, season: int):
    if not game.venue_name:
        return Missing(
            MissingDataReason.MISSING_PARK_FACTORS,
            f"game {game.game_id} has no venue",
        )
    return await stores.park_factors.fetch_park_factors(game.venue_name, season)


async def build_game_context(
    game_id: int,
    stores: Stores,
    season: int | None = None,
    game: GameRecord | None = None,
) -> GameContext:
    """Resolve every simulator input for a game.

    Args:
        game_id: Game identifier
        stores: Store implementations to read from
        season: Season for team stats and park factors (default: the game's year)
        game: Already-fetched schedule row, to skip the game lookup

    Returns:
        GameContext with all four inputs present

    Raises:
        GameNotFoundError: If the game does not exist
        MissingDataError: For the first missing input, checked in the order
            home stats, away stats, park factors, weather
    """
    if game is None:
        game = await stores.games.fetch_game(game_id)
        if game is None:
            raise GameNotFoundError(game_id)

    season = season or game.game_date.year

    home, away, park, weather = await asyncio.gather(
        stores.team_stats.fetch_team_stats(game.home_team_id, season),
        stores.team_stats.fetch_team_stats(game.away_team_id, season),
        _park_lookup(stores, game, season),
        stores.weather.fetch_weather(game.game_id),
    )

    missing = [lookup for lookup in (home, away, park, weather) if isinstance(lookup, Missing)]
    if missing:
        logger.info(
            "Game %s is missing %s",
            game_id,
            ", ".join(m.reason.value for m in missing),
        )

    return GameContext(
        game_id=game.game_id,
        home_team_stats=require(home),
        away_team_stats=require(away),
        park_factors=require(park),
        weather=require(weather),
    )
