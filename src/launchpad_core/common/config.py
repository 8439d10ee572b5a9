"""Engine settings loaded from environment variables and an optional .env file."""

from enum import Enum
from typing import Literal, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class LogFormat(str, Enum):
    JSON = "json"
    CONSOLE = "console"


class EngineSettings(BaseSettings):
    """
    Runtime knobs shared by the pricing engines. Per-launch curve parameters live on
    CurveConfig instead.
    """

    model_config = SettingsConfigDict(
        env_prefix="LAUNCHPAD_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Graduation
    graduation_threshold_lamports: int = Field(
        default=30_000_000_000,
        gt=0,
        description="SOL reserves (lamports) at which a launch graduates to the AMM pool",
    )

    # Caching and history
    market_cap_cache_ttl_s: float = Field(default=15.0, gt=0, description="Market cap snapshot TTL")
    history_max_points: int = Field(default=1000, ge=2, description="Per-mint market cap history cap")
    quote_cache_ttl_s: float = Field(default=10.0, gt=0, description="Coalescing window for quote requests")

    # External reads
    read_timeout_s: float = Field(default=5.0, gt=0, description="Timeout for any single external read")
    default_sol_usd_price: float = Field(
        default=150.0,
        gt=0,
        description="SOL/USD used when the oracle is unavailable and no good value is cached",
    )

    # Logging
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(default="INFO")
    log_format: LogFormat = Field(default=LogFormat.CONSOLE)


_settings: Optional[EngineSettings] = None


def get_settings() -> EngineSettings:
    global _settings
    if _settings is None:
        _settings = EngineSettings()
    return _settings


def reload_settings() -> EngineSettings:
    global _settings
    _settings = EngineSettings()
    return _settings
