"""Seeding ritual phases and the seed assignment rule.

Phases:
    IDLE -> SEEDING -> COMPLETE -> IDLE

start() from any phase lands in SEEDING (a restart is always allowed).
"""

from __future__ import annotations

from enum import Enum

from crucible.domain.errors.validation import ValidationError

MIN_SEED_VALUE: int = 1
MAX_SEED_VALUE: int = 6

# Values up to this bound feed the arbiter pool, the rest the player pool
ARBITER_SEED_CEILING: int = 3


class SeedingPhase(Enum):
    """Lifecycle of the seeding ritual."""

    IDLE = "idle"
    SEEDING = "seeding"
    COMPLETE = "complete"


VALID_PHASE_TRANSITIONS: dict[SeedingPhase, set[SeedingPhase]] = {
    SeedingPhase.IDLE: {SeedingPhase.SEEDING},
    SeedingPhase.SEEDING: {SeedingPhase.SEEDING, SeedingPhase.COMPLETE},
    SeedingPhase.COMPLETE: {SeedingPhase.SEEDING, SeedingPhase.IDLE},
}


def is_valid_phase_transition(from_phase: SeedingPhase, to_phase: SeedingPhase) -> bool:
    """Check if a ritual phase transition is valid."""
    return to_phase in VALID_PHASE_TRANSITIONS.get(from_phase, set())


class PoolSide(Enum):
    """One of the two pools."""

    PLAYER = "player"
    ARBITER = "arbiter"


def validate_seed_value(value: object) -> int:
    """Return `value` if it is an integer seed in [1, 6].

    Raises:
        ValidationError: For non-integers (including bools) and out-of-range values.
    """
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValidationError(
            f"Seed value must be an integer, got {value!r}", "value", value
        )
    if not MIN_SEED_VALUE <= value <= MAX_SEED_VALUE:
        raise ValidationError(
            f"Seed value must be between {MIN_SEED_VALUE} and {MAX_SEED_VALUE}, got {value}",
            "value",
            value,
        )
    return value


def pool_for_seed(value: int) -> PoolSide:
    """Assign a validated seed value: 1-3 -> arbiter, 4-6 -> player."""
    return PoolSide.ARBITER if value <= ARBITER_SEED_CEILING else PoolSide.PLAYER
