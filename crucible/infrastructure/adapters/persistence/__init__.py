"""Persistence adapters."""

from crucible.infrastructure.adapters.persistence.sql_pool_store import (
    WORLD_SCOPE,
    SqlPoolStore,
)

__all__ = ["SqlPoolStore", "WORLD_SCOPE"]
