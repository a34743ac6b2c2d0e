"""Exceptions raised by the simulator and its input gate."""

from enum import Enum


class MissingDataReason(str, Enum):
    """Which upstream data category is absent.

    The value doubles as the error code returned to HTTP clients.
    """

    INSUFFICIENT_PITCHING_DATA = "INSUFFICIENT_PITCHING_DATA"
    INSUFFICIENT_BATTING_DATA = "INSUFFICIENT_BATTING_DATA"
    MISSING_PARK_FACTORS = "MISSING_PARK_FACTORS"
    MISSING_WEATHER_DATA = "MISSING_WEATHER_DATA"

    @property
    def action(self) -> str:
        """Ingestion step the operator has to run before retrying."""
        return _ACTIONS[self]


_ACTIONS = {
    MissingDataReason.INSUFFICIENT_PITCHING_DATA: (
        "Run team stats ingestion for the current season (pitching splits) and retry."
    ),
    MissingDataReason.INSUFFICIENT_BATTING_DATA: (
        "Run team stats ingestion for the current season (standings and hitting) and retry."
    ),
    MissingDataReason.MISSING_PARK_FACTORS: (
        "Run park factors ingestion for this venue and season and retry."
    ),
    MissingDataReason.MISSING_WEATHER_DATA: (
        "Run weather ingestion for this game and retry."
    ),
}


class SimulationError(Exception):
    """Base class for simulator errors."""


class InvalidParameterError(SimulationError, ValueError):
    """An iteration count or input value is outside its allowed range."""


class MissingDataError(SimulationError):
    """A required input is absent; the simulator never substitutes defaults."""

    def __init__(self, reason: MissingDataReason, detail: str = ""):
        self.reason = reason
        self.detail = detail
        message = reason.value if not detail else f"{reason.value}: {detail}"
        super().__init__(message)


class GameNotFoundError(SimulationError, LookupError):
    """No game row exists for the requested identifier."""

    def __init__(self, game_id: int):
        self.game_id = game_id
        super().__init__(f"Game not found: {game_id}")
