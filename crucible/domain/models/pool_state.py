"""Pool state model for Crucible of Fate.

PoolState is the single world-scoped record shared by every process.
The authoritative process owns it; everyone else holds a cached copy
refreshed from stateUpdate broadcasts.

Invariant (when override is disabled):
    player_pool_count + arbiter_pool_count == active participant count

The invariant is restored by the AuthorityGateway after every mutation,
not checked here. This module only guarantees counts are never negative.

Persisted record layout (world scope):
    playerPoolCount: int
    gmPoolCount: int          (historical name for the arbiter pool)
    overrideEnabled: bool
    seededPlayers: list[str]
    lastSeededAt: str | None  (ISO 8601)
"""

from __future__ import annotations

from dataclasses import dataclass, field, fields, replace
from datetime import datetime
from typing import Any

from crucible.domain.errors.validation import ValidationError

# Persisted record keys
PLAYER_POOL_KEY: str = "playerPoolCount"
ARBITER_POOL_KEY: str = "gmPoolCount"
OVERRIDE_KEY: str = "overrideEnabled"
SEEDED_KEY: str = "seededPlayers"
LAST_SEEDED_KEY: str = "lastSeededAt"

# Configuration-only flag stored beside the record
REQUIRE_OWNERSHIP_KEY: str = "requireCharacterOwnership"

POOL_RECORD_KEYS: tuple[str, ...] = (
    PLAYER_POOL_KEY,
    ARBITER_POOL_KEY,
    OVERRIDE_KEY,
    SEEDED_KEY,
    LAST_SEEDED_KEY,
)


def _require_count(name: str, value: object) -> None:
    # bool is an int subclass; True is not a dice count
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValidationError(f"{name} must be an integer, got {value!r}", name, value)
    if value < 0:
        raise ValidationError(f"{name} must be non-negative, got {value}", name, value)


@dataclass(frozen=True)
class PoolState:
    """Immutable snapshot of both pools and the seeding progress.

    Attributes:
        player_pool_count: Dice available to participants.
        arbiter_pool_count: Dice held by the arbiter.
        override_enabled: When True the total-dice invariant is suspended.
        seeded_participants: Participants who seeded during the current ritual.
        last_seeded_at: When the most recent seed was accepted (UTC).
    """

    player_pool_count: int = 0
    arbiter_pool_count: int = 0
    override_enabled: bool = False
    seeded_participants: frozenset[str] = field(default_factory=frozenset)
    last_seeded_at: datetime | None = None

    def __post_init__(self) -> None:
        """Validate counts on creation.

        Raises:
            ValidationError: If a count is negative or not an integer.
        """
        _require_count("player_pool_count", self.player_pool_count)
        _require_count("arbiter_pool_count", self.arbiter_pool_count)
        if not isinstance(self.seeded_participants, frozenset):
            object.__setattr__(
                self, "seeded_participants", frozenset(self.seeded_participants)
            )

    @property
    def total(self) -> int:
        """Total dice across both pools."""
        return self.player_pool_count + self.arbiter_pool_count

    def with_counts(self, player: int, arbiter: int) -> PoolState:
        """Return a copy with new pool counts."""
        return replace(self, player_pool_count=player, arbiter_pool_count=arbiter)

    def merge(self, delta: PoolDelta) -> PoolState:
        """Return a copy with every field set in `delta` applied."""
        return replace(self, **delta.changes())

    def to_record(self) -> dict[str, Any]:
        """Convert to the persisted key-value layout."""
        return {
            PLAYER_POOL_KEY: self.player_pool_count,
            ARBITER_POOL_KEY: self.arbiter_pool_count,
            OVERRIDE_KEY: self.override_enabled,
            SEEDED_KEY: sorted(self.seeded_participants),
            LAST_SEEDED_KEY: (
                self.last_seeded_at.isoformat() if self.last_seeded_at else None
            ),
        }

    @classmethod
    def from_record(cls, record: dict[str, Any]) -> PoolState:
        """Create a PoolState from the persisted key-value layout.

        Missing keys fall back to their defaults, matching a fresh world.
        """
        last_seeded = record.get(LAST_SEEDED_KEY)
        return cls(
            player_pool_count=record.get(PLAYER_POOL_KEY) or 0,
            arbiter_pool_count=record.get(ARBITER_POOL_KEY) or 0,
            override_enabled=bool(record.get(OVERRIDE_KEY) or False),
            seeded_participants=frozenset(record.get(SEEDED_KEY) or ()),
            last_seeded_at=datetime.fromisoformat(last_seeded) if last_seeded else None,
        )


class _Unchanged:
    """Marker for a field a delta leaves alone."""

    _instance: _Unchanged | None = None

    def __new__(cls) -> _Unchanged:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "UNCHANGED"

    def __bool__(self) -> bool:
        return False


UNCHANGED: Any = _Unchanged()


@dataclass(frozen=True)
class PoolDelta:
    """A partial PoolState: only fields that are not UNCHANGED are applied.

    `last_seeded_at=None` is a real change (it clears the timestamp),
    which is why a sentinel is used instead of None.
    """

    player_pool_count: Any = UNCHANGED
    arbiter_pool_count: Any = UNCHANGED
    override_enabled: Any = UNCHANGED
    seeded_participants: Any = UNCHANGED
    last_seeded_at: Any = UNCHANGED

    def __post_init__(self) -> None:
        if self.player_pool_count is not UNCHANGED:
            _require_count("player_pool_count", self.player_pool_count)
        if self.arbiter_pool_count is not UNCHANGED:
            _require_count("arbiter_pool_count", self.arbiter_pool_count)
        if self.seeded_participants is not UNCHANGED:
            object.__setattr__(
                self, "seeded_participants", frozenset(self.seeded_participants)
            )

    def changes(self) -> dict[str, Any]:
        """Return only the fields this delta sets."""
        return {
            f.name: getattr(self, f.name)
            for f in fields(self)
            if getattr(self, f.name) is not UNCHANGED
        }

    @property
    def touches_override(self) -> bool:
        return self.override_enabled is not UNCHANGED

    @property
    def is_empty(self) -> bool:
        return not self.changes()
