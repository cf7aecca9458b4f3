"""Domain models for Crucible of Fate."""

from crucible.domain.models.action import (
    ActionClassification,
    ActionReference,
    AugmentResult,
)
from crucible.domain.models.display import DEFAULT_MAX_VISIBLE_DICE, PoolDisplay
from crucible.domain.models.pool_state import UNCHANGED, PoolDelta, PoolState
from crucible.domain.models.roles import (
    Actor,
    Role,
    require_authoritative,
    require_participant,
)
from crucible.domain.models.seeding import PoolSide, SeedingPhase
from crucible.domain.models.transfer import TransferDirection

__all__: list[str] = [
    "ActionClassification",
    "ActionReference",
    "Actor",
    "AugmentResult",
    "DEFAULT_MAX_VISIBLE_DICE",
    "PoolDelta",
    "PoolDisplay",
    "PoolSide",
    "PoolState",
    "Role",
    "SeedingPhase",
    "TransferDirection",
    "UNCHANGED",
    "require_authoritative",
    "require_participant",
]
