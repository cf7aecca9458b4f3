"""Crucible of Fate runtime configuration.

Environment Variables:
- CRUCIBLE_REQUIRE_CHARACTER_OWNERSHIP: Count only participants owning a
  character toward the dice total (default: false). A value persisted in
  the pool store under requireCharacterOwnership takes precedence.
- CRUCIBLE_MAX_VISIBLE_DICE: Dice drawn per pool before the overflow
  counter is used (default: 12, min: 1, max: 100)
- CRUCIBLE_ENV: 'production' for JSON logs, anything else for console
  logs (default: production)
- DATABASE_URL: Connection string for SqlPoolStore (optional; the
  in-memory store is used without it)
"""

from __future__ import annotations

import os
from dataclasses import dataclass

from crucible.domain.models.display import DEFAULT_MAX_VISIBLE_DICE

MIN_VISIBLE_DICE = 1
MAX_VISIBLE_DICE = 100

_TRUE_VALUES = frozenset({"1", "true", "yes", "on"})
_FALSE_VALUES = frozenset({"0", "false", "no", "off"})


def _get_int_env(key: str, default: int) -> int:
    """Get integer environment variable, falling back to `default` if unset or invalid."""
    value = os.environ.get(key)
    if value is None:
        return default
    try:
        return int(value)
    except ValueError:
        return default


def _get_bool_env(key: str, default: bool) -> bool:
    """Get boolean environment variable, falling back to `default` if unset or invalid."""
    value = os.environ.get(key)
    if value is None:
        return default
    normalized = value.strip().lower()
    if normalized in _TRUE_VALUES:
        return True
    if normalized in _FALSE_VALUES:
        return False
    return default


@dataclass(frozen=True)
class CrucibleConfig:
    """Configuration for one Crucible of Fate process.

    Attributes:
        require_character_ownership: Default for the roster ownership filter.
        max_visible_dice: Dice shown per pool in PoolDisplay.
        environment: Logging mode.
        database_url: SqlPoolStore connection string, or None.
    """

    require_character_ownership: bool = False
    max_visible_dice: int = DEFAULT_MAX_VISIBLE_DICE
    environment: str = "production"
    database_url: str | None = None

    def __post_init__(self) -> None:
        """Validate configuration values."""
        if not MIN_VISIBLE_DICE <= self.max_visible_dice <= MAX_VISIBLE_DICE:
            raise ValueError(
                f"max_visible_dice must be between {MIN_VISIBLE_DICE} "
                f"and {MAX_VISIBLE_DICE}, got {self.max_visible_dice}"
            )
        if not self.environment:
            raise ValueError("environment must be non-empty")

    @property
    def uses_database(self) -> bool:
        return bool(self.database_url)

    @classmethod
    def from_environment(cls) -> CrucibleConfig:
        """Create config from environment variables with defaults.

        Out-of-range values are clamped rather than rejected.
        """
        max_visible = _get_int_env("CRUCIBLE_MAX_VISIBLE_DICE", DEFAULT_MAX_VISIBLE_DICE)
        max_visible = max(MIN_VISIBLE_DICE, min(max_visible, MAX_VISIBLE_DICE))

        return cls(
            require_character_ownership=_get_bool_env(
                "CRUCIBLE_REQUIRE_CHARACTER_OWNERSHIP", False
            ),
            max_visible_dice=max_visible,
            environment=os.environ.get("CRUCIBLE_ENV", "production") or "production",
            database_url=os.environ.get("DATABASE_URL") or None,
        )


# Pre-defined configurations

DEFAULT_CRUCIBLE_CONFIG = CrucibleConfig()

# Console logs, no database
TEST_CRUCIBLE_CONFIG = CrucibleConfig(environment="development")
