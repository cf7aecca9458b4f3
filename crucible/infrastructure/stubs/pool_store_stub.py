"""In-memory PoolStore for development and testing.

Stores the persisted record layout (camelCase keys) in a dict, so tests
can assert on exactly what would be written.

Test controls:
- set_failure(): make the next save() raise
- save_count: number of successful saves
- reset(): drop everything

WARNING: This stub is for development/testing only.
Production should use SqlPoolStore.
"""

from __future__ import annotations

from typing import Any

from crucible.application.ports.pool_store import PoolStoreListener, PoolStoreProtocol
from crucible.domain.models.pool_state import PoolState


class InMemoryPoolStore(PoolStoreProtocol):
    """Dict-backed pool store.

    Attributes:
        record: The stored key-value record.
        flags: Configuration-only settings (e.g. requireCharacterOwnership).
    """

    def __init__(
        self,
        initial: PoolState | None = None,
        *,
        flags: dict[str, bool] | None = None,
    ) -> None:
        self.record: dict[str, Any] = initial.to_record() if initial else {}
        self.flags: dict[str, bool] = dict(flags or {})
        self.save_count = 0
        self._listeners: list[PoolStoreListener] = []
        self._failure: Exception | None = None

    async def load(self) -> PoolState:
        return PoolState.from_record(self.record)

    async def save(self, state: PoolState) -> None:
        if self._failure is not None:
            failure, self._failure = self._failure, None
            raise failure
        self.record = state.to_record()
        self.save_count += 1
        for listener in self._listeners:
            await listener(state)

    async def read_flag(self, key: str, default: bool) -> bool:
        return self.flags.get(key, default)

    def add_listener(self, listener: PoolStoreListener) -> None:
        self._listeners.append(listener)

    # Test control methods

    def set_failure(self, error: Exception) -> None:
        """Make the next save() raise `error` without writing."""
        self._failure = error

    def reset(self) -> None:
        self.record = {}
        self.flags = {}
        self.save_count = 0
        self._failure = None
