"""
Configuration Management

Centralized engine configuration:
- Run defaults (sample count, speed, instant mode)
- Workload lifecycle timings
- Logging level and random seed
"""

from .settings import (
    EngineSettings,
    get_settings
)

__all__ = [
    "EngineSettings",
    "get_settings"
]
