"""Action references and augmentation results.

An ActionReference is owned by the host session (a chat roll, a check).
The core never builds one for real traffic; it receives them through the
action lookup and roll-observation ports and only reads them.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from crucible.domain.models.pool_state import PoolState

# Fallback pattern for totals rendered only in the action's text
_TOTAL_PATTERN = re.compile(r"Total:\s*(\d+)", re.IGNORECASE)


class ActionClassification(Enum):
    """Classifier verdict for an action.

    UNKNOWN is never augmentable.
    """

    AUGMENTABLE = "augmentable"
    NOT_AUGMENTABLE = "not_augmentable"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class ActionReference:
    """A host-session action that may be augmented with a pool die.

    Attributes:
        action_id: Opaque identifier from the host session.
        owner_id: Participant who made the roll.
        recency: Monotonically increasing marker; higher is newer.
        original_total: Numeric result of the roll, when the host knows it.
        text: Rendered flavor and content, used by text heuristics.
        metadata: Host/system specific flags (e.g. {"roll_type": "skill"}).
    """

    action_id: str
    owner_id: str
    recency: int = 0
    original_total: int | None = None
    text: str = ""
    metadata: dict[str, Any] = field(default_factory=dict, hash=False, compare=False)

    def resolve_original_total(self) -> int | None:
        """Return the roll total, falling back to a "Total: n" in the text."""
        if self.original_total is not None:
            return self.original_total
        match = _TOTAL_PATTERN.search(self.text)
        if match:
            return int(match.group(1))
        return None


@dataclass(frozen=True)
class AugmentResult:
    """Outcome of a committed augmentation.

    Attributes:
        action_id: The augmented action.
        participant_id: Who spent the die.
        die_value: The drawn d6 value.
        new_total: original total + die value, or None when unresolvable.
        state: Pool state after the transfer was committed.
    """

    action_id: str
    participant_id: str
    die_value: int
    new_total: int | None
    state: PoolState
