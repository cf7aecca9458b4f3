"""
Pytest configuration and shared fixtures for Crucible of Fate tests.

Testing Standards:
- All async tests use pytest.mark.asyncio (auto mode enabled in pyproject.toml)
- Ports are replaced by the in-memory stubs from crucible.infrastructure.stubs
- Unit tests go in tests/unit/
- Integration tests go in tests/integration/
"""

from __future__ import annotations

import pytest

from crucible.domain.models.roles import Actor
from crucible.infrastructure.adapters.transport import InProcessTransportHub
from crucible.infrastructure.stubs import (
    ActionLookupStub,
    DieSourceStub,
    InMemoryPoolStore,
    NarrativeSinkStub,
    RosterStub,
)


@pytest.fixture
def anyio_backend() -> str:
    """Use asyncio as the async backend."""
    return "asyncio"


@pytest.fixture
def project_version() -> str:
    """Provide the current project version for tests."""
    from crucible import __version__

    return __version__


@pytest.fixture
def gm() -> Actor:
    """The authoritative actor."""
    return Actor.authority("gm")


@pytest.fixture
def alice() -> Actor:
    """A participant actor."""
    return Actor.participant("alice")


@pytest.fixture
def store() -> InMemoryPoolStore:
    """An empty in-memory pool store."""
    return InMemoryPoolStore()


@pytest.fixture
def roster() -> RosterStub:
    """Three connected participants, all owning a character."""
    return RosterStub(["alice", "bob", "carol"])


@pytest.fixture
def die_source() -> DieSourceStub:
    """Scripted die source; rolls 1 unless values are queued."""
    return DieSourceStub()


@pytest.fixture
def narrative() -> NarrativeSinkStub:
    """Recording narrative sink."""
    return NarrativeSinkStub()


@pytest.fixture
def action_lookup() -> ActionLookupStub:
    """Empty action lookup."""
    return ActionLookupStub()


class RecordingTransportHub(InProcessTransportHub):
    """Hub that also keeps every routed message as (sender, target, raw).

    Broadcasts are recorded with target None.
    """

    def __init__(self) -> None:
        super().__init__()
        self.sent: list[tuple[str, str | None, str]] = []

    async def broadcast(self, sender_id: str, raw: str) -> None:
        self.sent.append((sender_id, None, raw))
        await super().broadcast(sender_id, raw)

    async def deliver(self, sender_id: str, target_id: str | None, raw: str) -> None:
        self.sent.append((sender_id, target_id, raw))
        await super().deliver(sender_id, target_id, raw)


@pytest.fixture
def hub() -> RecordingTransportHub:
    """Fresh in-process transport hub recording routed messages."""
    return RecordingTransportHub()
