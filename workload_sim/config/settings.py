"""
Settings Management with Pydantic

Provides type-safe engine configuration with:
- Environment variable support (WORKLOAD_SIM_ prefix)
- Optional .env file
- Validation of run defaults and animation timings
"""

from functools import lru_cache
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class EngineSettings(BaseSettings):
    """Defaults for new simulation runs and lifecycle timings."""
    model_config = SettingsConfigDict(
        env_prefix="WORKLOAD_SIM_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    # Application
    app_name: str = "Workload Placement Simulator"
    log_level: str = "INFO"

    # Run defaults
    num_samples: int = Field(default=10000, ge=1, le=1_000_000)
    speed: float = Field(default=1.0, gt=0)  # samples per second
    instant_mode: bool = False
    max_workload_count: int = Field(default=20, ge=1)

    # Workload lifecycle (milliseconds, independent of speed)
    originating_ms: float = Field(default=800.0, ge=0)
    distributing_ms: float = Field(default=1500.0, ge=0)
    cleanup_ms: float = Field(default=500.0, ge=0)

    # Real-time driver
    frame_interval_ms: float = Field(default=50.0, gt=0)

    # Randomization
    random_seed: Optional[int] = None


@lru_cache()
def get_settings() -> EngineSettings:
    """Get cached settings instance."""
    return EngineSettings()
