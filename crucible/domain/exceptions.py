"""Base exception classes for the Crucible of Fate domain layer."""


class CrucibleError(Exception):
    """Base exception for all domain errors.

    All domain-specific exceptions MUST inherit from this class so the
    authoritative session can report the specific failure back to the
    requesting process.

    Attributes:
        kind: Stable machine-readable code sent over the wire.
    """

    kind: str = "error"

    def __init__(self, message: str = "") -> None:
        """Initialize the exception with an optional message.

        Args:
            message: Human-readable error description.
        """
        super().__init__(message)
        self.message = message
