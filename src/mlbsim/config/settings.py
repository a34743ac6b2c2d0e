"""Application configuration schema and validation."""

from typing import Literal

from pydantic import Field, PostgresDsn, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class AppConfig(BaseSettings):
    """Application configuration loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    env: Literal["dev", "staging", "prod"] = Field(
        ...,
        description="Application environment",
    )
    db_dsn: PostgresDsn = Field(
        ...,
        description="PostgreSQL database connection string",
    )
    db_pool_min: int = Field(
        default=2,
        ge=1,
        description="Minimum database connection pool size",
    )
    db_pool_max: int = Field(
        default=10,
        ge=1,
        description="Maximum database connection pool size",
    )
    min_sim_n: int = Field(
        default=1000,
        ge=1,
        description="Smallest iteration count accepted from callers",
    )
    max_sim_n: int = Field(
        default=50000,
        ge=1,
        description="Largest iteration count accepted from callers",
    )
    default_sim_n: int = Field(
        default=10000,
        ge=1000,
        le=50000,
        description="Default number of Monte Carlo trials per game",
    )
    run_std_dev: float = Field(
        default=2.0,
        gt=0.0,
        le=5.0,
        description="Standard deviation of per-trial run draws",
    )
    home_field_win_rate: float = Field(
        default=0.54,
        ge=0.5,
        le=0.6,
        description="Historical home win rate (prior, not a run multiplier)",
    )
    home_run_factor: float | None = Field(
        default=None,
        gt=0.0,
        le=2.0,
        description="Run multiplier for the home side; None derives it from home_field_win_rate",
    )
    static_over_under: bool = Field(
        default=False,
        description="Use the fixed 0.52/0.48 over/under heuristic instead of trial data",
    )
    prediction_window_days: int = Field(
        default=7,
        ge=0,
        le=30,
        description="Days ahead scanned by the batch prediction run",
    )
    prediction_refresh_hours: float = Field(
        default=6.0,
        ge=0.0,
        le=72.0,
        description="Predictions younger than this are not regenerated",
    )
    server_host: str = Field(
        default="0.0.0.0",
        description="Bind address for the HTTP service",
    )
    server_port: int = Field(
        default=8080,
        ge=1,
        le=65535,
        description="Port for the HTTP service",
    )
    log_level: str = Field(
        default="INFO",
        description="Logging level",
    )

    @field_validator("db_pool_max")
    @classmethod
    def validate_pool_max(cls, v: int, info) -> int:
        """Ensure pool_max >= pool_min."""
        if "db_pool_min" in info.data and v < info.data["db_pool_min"]:
            raise ValueError("db_pool_max must be >= db_pool_min")
        return v

    @field_validator("max_sim_n")
    @classmethod
    def validate_max_sim_n(cls, v: int, info) -> int:
        """Ensure max_sim_n >= min_sim_n."""
        if "min_sim_n" in info.data and v < info.data["min_sim_n"]:
            raise ValueError("max_sim_n must be >= min_sim_n")
        return v

    @field_validator("default_sim_n")
    @classmethod
    def validate_default_sim_n(cls, v: int, info) -> int:
        """Ensure min_sim_n <= default_sim_n <= max_sim_n."""
        low = info.data.get("min_sim_n")
        high = info.data.get("max_sim_n")
        if low is not None and v < low:
            raise ValueError("default_sim_n must be >= min_sim_n")
        if high is not None and v > high:
            raise ValueError("default_sim_n must be <= max_sim_n")
        return v


_config: AppConfig | None = None


def get_config() -> AppConfig:
    """Get or create the singleton AppConfig instance."""
    global _config
    if _config is None:
        _config = AppConfig()
    return _config
