from functools import lru_cache
from typing import List, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from chain import constants


class ExplorerSettings(BaseSettings):
    """Configuration for the insight explorer."""

    # Node RPC Configuration
    RPC_URL: str = Field(
        default="http://127.0.0.1:9998",
        description="dashd JSON-RPC endpoint"
    )
    RPC_USER: Optional[str] = Field(
        default=None,
        description="RPC user name"
    )
    RPC_PASSWORD: Optional[str] = Field(
        default=None,
        description="RPC password"
    )
    RPC_TIMEOUT: float = Field(
        default=30.0,
        description="Timeout in seconds for a single RPC call"
    )
    TIP_POLL_INTERVAL: float = Field(
        default=5.0,
        description="Seconds between chain tip height refreshes, 0 disables polling"
    )

    # Cache Configuration
    BLOCK_CACHE_SIZE: int = Field(
        default=constants.BLOCK_CACHE_SIZE,
        gt=0,
        description="Maximum number of full blocks kept in memory"
    )
    BLOCK_SUMMARY_CACHE_SIZE: int = Field(
        default=constants.BLOCK_SUMMARY_CACHE_SIZE,
        gt=0,
        description="Maximum number of block summaries kept in memory"
    )
    BLOCK_CACHE_CONFIRMATIONS: int = Field(
        default=constants.BLOCK_CACHE_CONFIRMATIONS,
        ge=1,
        description="Confirmations required before a block is cached"
    )

    # Listing Configuration
    BLOCK_LIST_LIMIT: int = Field(
        default=constants.BLOCK_LIST_LIMIT,
        gt=0,
        description="Default number of blocks per listing page"
    )

    # Reward Configuration
    REWARD_TABLE_SEED: Optional[int] = Field(
        default=None,
        description="Seed for the hourly subsidy table, random when unset"
    )
    REWARD_HOURLY_TABLE: Optional[List[float]] = Field(
        default=None,
        description="Explicit 24-entry hourly subsidy table, overrides the seed"
    )

    # Pool Configuration
    POOLS_FILE: Optional[str] = Field(
        default=None,
        description="JSON file of mining pool signatures, bundled list when unset"
    )

    # API Configuration
    API_HOST: str = Field(
        default="0.0.0.0",
        description="API host"
    )
    API_PORT: int = Field(
        default=3001,
        description="API port"
    )
    API_PREFIX: str = Field(
        default="/insight-api",
        description="Path prefix for all routes"
    )

    # Monitoring
    LOG_LEVEL: str = Field(
        default="INFO",
        description="Log level"
    )
    LOG_JSON: bool = Field(
        default=True,
        description="Emit JSON log lines, console output when false"
    )

    @field_validator("REWARD_HOURLY_TABLE")
    @classmethod
    def _check_hourly_table(cls, value: Optional[List[float]]) -> Optional[List[float]]:
        if value is not None and len(value) != constants.HOURS_IN_A_DAY:
            raise ValueError(f"REWARD_HOURLY_TABLE must have {constants.HOURS_IN_A_DAY} entries")
        return value

    model_config = SettingsConfigDict(
        env_prefix="INSIGHT_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True
    )


@lru_cache()
def get_settings() -> ExplorerSettings:
    """Load settings once per process."""
    return ExplorerSettings()
