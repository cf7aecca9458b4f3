"""SQL pool store (SQLAlchemy async).

Each key of the persisted record is one row of `crucible_settings`:

    CREATE TABLE crucible_settings (
        scope VARCHAR(64)  NOT NULL,
        key   VARCHAR(128) NOT NULL,
        value TEXT,                    -- JSON encoded
        PRIMARY KEY (scope, key)
    )

save() upserts every record key in a single transaction, so load() sees
either the old record or the new one, never a mix. Listeners run after
the commit.

Usage:
    store = SqlPoolStore(get_session_factory())
    await store.ensure_schema()
    state = await store.load()
"""

from __future__ import annotations

import json
from typing import Any

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from structlog import get_logger

from crucible.application.ports.pool_store import PoolStoreListener, PoolStoreProtocol
from crucible.domain.models.pool_state import POOL_RECORD_KEYS, PoolState

logger = get_logger()

WORLD_SCOPE = "world"


class SqlPoolStore(PoolStoreProtocol):
    """Pool store backed by a key-value settings table.

    Attributes:
        _session_factory: SQLAlchemy async session factory for DB access.
        _scope: Row scope; the pool record is world-scoped.
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        *,
        scope: str = WORLD_SCOPE,
    ) -> None:
        self._session_factory = session_factory
        self._scope = scope
        self._listeners: list[PoolStoreListener] = []

    async def ensure_schema(self) -> None:
        """Create the settings table if it does not exist."""
        async with self._session_factory() as session:
            async with session.begin():
                await session.execute(
                    text("""
                        CREATE TABLE IF NOT EXISTS crucible_settings (
                            scope VARCHAR(64) NOT NULL,
                            key VARCHAR(128) NOT NULL,
                            value TEXT,
                            PRIMARY KEY (scope, key)
                        )
                    """)
                )
        logger.debug("crucible_settings_schema_ensured", scope=self._scope)

    async def _read_rows(self) -> dict[str, Any]:
        async with self._session_factory() as session:
            result = await session.execute(
                text("""
                    SELECT key, value
                    FROM crucible_settings
                    WHERE scope = :scope
                """),
                {"scope": self._scope},
            )
            return {
                row[0]: json.loads(row[1]) if row[1] is not None else None
                for row in result.fetchall()
            }

    async def load(self) -> PoolState:
        record = await self._read_rows()
        return PoolState.from_record(record)

    async def save(self, state: PoolState) -> None:
        record = state.to_record()
        log = logger.bind(scope=self._scope)

        async with self._session_factory() as session:
            async with session.begin():
                for key in POOL_RECORD_KEYS:
                    await session.execute(
                        text("""
                            INSERT INTO crucible_settings (scope, key, value)
                            VALUES (:scope, :key, :value)
                            ON CONFLICT (scope, key)
                            DO UPDATE SET value = excluded.value
                        """),
                        {
                            "scope": self._scope,
                            "key": key,
                            "value": json.dumps(record[key]),
                        },
                    )

        log.debug(
            "pool_record_saved",
            player_pool_count=state.player_pool_count,
            arbiter_pool_count=state.arbiter_pool_count,
        )
        for listener in self._listeners:
            await listener(state)

    async def read_flag(self, key: str, default: bool) -> bool:
        async with self._session_factory() as session:
            result = await session.execute(
                text("""
                    SELECT value
                    FROM crucible_settings
                    WHERE scope = :scope AND key = :key
                """),
                {"scope": self._scope, "key": key},
            )
            raw = result.scalar()
        if raw is None:
            return default
        return bool(json.loads(raw))

    async def write_flag(self, key: str, value: bool) -> None:
        """Store a configuration-only boolean setting."""
        async with self._session_factory() as session:
            async with session.begin():
                await session.execute(
                    text("""
                        INSERT INTO crucible_settings (scope, key, value)
                        VALUES (:scope, :key, :value)
                        ON CONFLICT (scope, key)
                        DO UPDATE SET value = excluded.value
                    """),
                    {"scope": self._scope, "key": key, "value": json.dumps(value)},
                )

    def add_listener(self, listener: PoolStoreListener) -> None:
        self._listeners.append(listener)
