"""Dice-spend errors for Crucible of Fate.

These errors are returned to the requester as distinct kinds so the
requesting process can render an accurate message:

    CrucibleError
    ├── InsufficientDiceError   (pool lacks the die)
    ├── AlreadyProcessedError   (duplicate seed / double augmentation)
    └── NotEligibleError        (wrong action, wrong owner, not most recent)
"""

from __future__ import annotations

from crucible.domain.exceptions import CrucibleError


class InsufficientDiceError(CrucibleError):
    """Raised when a pool lacks the dice an operation needs.

    Attributes:
        pool: Which pool was short ("player" or "arbiter").
        required: Dice needed.
        available: Dice present at validation time.
    """

    kind = "insufficient_dice"

    def __init__(self, pool: str, required: int, available: int) -> None:
        self.pool = pool
        self.required = required
        self.available = available
        super().__init__(
            f"The {pool} pool has {available} dice, {required} required"
        )


class AlreadyProcessedError(CrucibleError):
    """Raised when a request targets something already consumed.

    Used for an action that has already been augmented. Duplicate seed
    submissions are a logged no-op instead, since they are expected under
    retry and reconnection.

    Attributes:
        subject_id: The action id (or participant id) already processed.
    """

    kind = "already_processed"

    def __init__(self, subject_id: str, message: str | None = None) -> None:
        self.subject_id = subject_id
        super().__init__(message or f"{subject_id} has already been processed")


class NotEligibleError(CrucibleError):
    """Raised when an action or participant does not qualify.

    Attributes:
        reason: Short code for the failed rule, one of
            "not_augmentable", "not_owner", "not_most_recent",
            "action_not_found", "not_active_participant", "not_seeding".
        subject_id: The action or participant id concerned.
    """

    kind = "not_eligible"

    def __init__(self, reason: str, subject_id: str, message: str) -> None:
        self.reason = reason
        self.subject_id = subject_id
        super().__init__(message)
