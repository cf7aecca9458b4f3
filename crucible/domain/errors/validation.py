"""Input validation errors for Crucible of Fate."""

from __future__ import annotations

from typing import Any

from crucible.domain.exceptions import CrucibleError


class ValidationError(CrucibleError):
    """Raised for malformed or out-of-range input.

    Examples:
    - Seed value outside 1-6
    - Transfer amount larger than the source pool
    - Non-positive transfer amount
    - Negative pool count in a proposed delta

    Attributes:
        field: Name of the offending input.
        value: The rejected value.
    """

    kind = "validation"

    def __init__(self, message: str, field: str | None = None, value: Any = None) -> None:
        self.field = field
        self.value = value
        super().__init__(message)
