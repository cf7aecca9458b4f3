"""Action lookup port definition."""

from abc import ABC, abstractmethod

from crucible.domain.models.action import ActionReference


class ActionLookupProtocol(ABC):
    """Abstract protocol for resolving action ids sent by participants."""

    @abstractmethod
    async def get_action(self, action_id: str) -> ActionReference | None:
        """Resolve an action by id.

        Returns:
            The action, or None if the host no longer knows it.
        """
        ...
