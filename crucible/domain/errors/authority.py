"""Authority errors for Crucible of Fate.

Only the authoritative process may mutate pool state or run the seeding
ritual. Participants may only propose. These errors are raised at the top
of every role-restricted operation, before any state is read or written.
"""

from __future__ import annotations

from crucible.domain.exceptions import CrucibleError


class AuthorityError(CrucibleError):
    """Raised when an operation is attempted by the wrong role.

    Covers both directions:
    - A participant calling an authoritative-only operation
      (propose_update, start seeding, move dice, ...)
    - The authoritative role calling a participant-only operation
      (seed submission, augmentation request)

    Attributes:
        operation: Name of the operation that was refused.
        participant_id: Identity of the caller.
    """

    kind = "authority"

    def __init__(self, operation: str, participant_id: str, message: str) -> None:
        self.operation = operation
        self.participant_id = participant_id
        super().__init__(message)

    @classmethod
    def authoritative_only(cls, operation: str, participant_id: str) -> AuthorityError:
        """Build the error for a participant calling an authority operation."""
        return cls(
            operation,
            participant_id,
            f"Only the authoritative role can {operation} (caller: {participant_id})",
        )

    @classmethod
    def participant_only(cls, operation: str, participant_id: str) -> AuthorityError:
        """Build the error for the authority calling a participant operation."""
        return cls(
            operation,
            participant_id,
            f"The authoritative role cannot {operation} (caller: {participant_id})",
        )
