"""Pool store port definition.

The pool store is the durable key-value holder for the shared PoolState
record (world scope). It has no logic beyond get/set and change
notification. Only the authoritative process writes to it.

Atomicity:
    save() persists the full record as a single write. Implementations
    MUST NOT expose a partially written record to load().
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Awaitable, Callable

from crucible.domain.models.pool_state import PoolState

PoolStoreListener = Callable[[PoolState], Awaitable[None]]


class PoolStoreProtocol(ABC):
    """Abstract protocol for pool state persistence.

    Production implementations:
    - SqlPoolStore: SQLAlchemy async, one row per record key

    Development/Testing:
    - InMemoryPoolStore: dict-backed, with failure injection
    """

    @abstractmethod
    async def load(self) -> PoolState:
        """Read the committed record.

        Returns:
            The stored PoolState, or a default PoolState for a fresh world.
        """
        ...

    @abstractmethod
    async def save(self, state: PoolState) -> None:
        """Persist the whole record atomically and notify listeners.

        Args:
            state: The full state to store.
        """
        ...

    @abstractmethod
    async def read_flag(self, key: str, default: bool) -> bool:
        """Read a configuration-only boolean setting.

        Args:
            key: Setting name (e.g. "requireCharacterOwnership").
            default: Value when the setting has never been stored.
        """
        ...

    @abstractmethod
    def add_listener(self, listener: PoolStoreListener) -> None:
        """Register a coroutine called with the new state after every save."""
        ...
