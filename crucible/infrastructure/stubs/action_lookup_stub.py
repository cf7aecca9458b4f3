"""Dict-backed action lookup for development and testing.

WARNING: This stub is for development/testing only.
"""

from __future__ import annotations

from crucible.application.ports.action_lookup import ActionLookupProtocol
from crucible.domain.models.action import ActionReference


class ActionLookupStub(ActionLookupProtocol):
    """Resolves actions registered with add()."""

    def __init__(self, *actions: ActionReference) -> None:
        self._actions: dict[str, ActionReference] = {a.action_id: a for a in actions}

    async def get_action(self, action_id: str) -> ActionReference | None:
        return self._actions.get(action_id)

    def add(self, action: ActionReference) -> None:
        self._actions[action.action_id] = action
