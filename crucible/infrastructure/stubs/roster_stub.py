"""Configurable roster for development and testing.

WARNING: This stub is for development/testing only.
"""

from __future__ import annotations

from collections.abc import Iterable

from crucible.application.ports.roster import RosterProtocol


class RosterStub(RosterProtocol):
    """Connected participants, with per-participant entity ownership.

    Example:
        roster = RosterStub(["p1", "p2"], owners=["p1"])
        await roster.list_active_participants()                               # {"p1", "p2"}
        await roster.list_active_participants(require_entity_ownership=True)  # {"p1"}
    """

    def __init__(
        self,
        participants: Iterable[str] = (),
        *,
        owners: Iterable[str] | None = None,
    ) -> None:
        self._connected: set[str] = set(participants)
        # Default: every connected participant owns an entity
        self._owners: set[str] = set(owners) if owners is not None else set(self._connected)

    async def list_active_participants(
        self, require_entity_ownership: bool = False
    ) -> frozenset[str]:
        if require_entity_ownership:
            return frozenset(self._connected & self._owners)
        return frozenset(self._connected)

    def connect(self, participant_id: str, *, owns_entity: bool = True) -> None:
        self._connected.add(participant_id)
        if owns_entity:
            self._owners.add(participant_id)

    def disconnect(self, participant_id: str) -> None:
        self._connected.discard(participant_id)
