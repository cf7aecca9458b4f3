"""Roster port definition.

The roster is owned by the host session. It reports which participants
are connected, optionally only those holding at least one owned game
entity (a character).
"""

from abc import ABC, abstractmethod


class RosterProtocol(ABC):
    """Abstract protocol for the active-participant roster."""

    @abstractmethod
    async def list_active_participants(
        self, require_entity_ownership: bool = False
    ) -> frozenset[str]:
        """List connected, non-authoritative participants.

        Args:
            require_entity_ownership: If True, only count participants who
                own at least one game entity.

        Returns:
            Participant ids.
        """
        ...
