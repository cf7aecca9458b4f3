"""Configuration module for Crucible of Fate.

Available Configurations:
- CrucibleConfig: ownership filter, display and logging settings
"""

from crucible.config.crucible_config import (
    DEFAULT_CRUCIBLE_CONFIG,
    TEST_CRUCIBLE_CONFIG,
    CrucibleConfig,
)

__all__ = [
    "CrucibleConfig",
    "DEFAULT_CRUCIBLE_CONFIG",
    "TEST_CRUCIBLE_CONFIG",
]
