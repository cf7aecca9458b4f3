"""Domain errors for Crucible of Fate.

All exceptions inherit from CrucibleError and expose a wire `kind`.
"""

from crucible.domain.errors.augmentation import (
    AlreadyProcessedError,
    InsufficientDiceError,
    NotEligibleError,
)
from crucible.domain.errors.authority import AuthorityError
from crucible.domain.errors.validation import ValidationError

__all__: list[str] = [
    "AlreadyProcessedError",
    "AuthorityError",
    "InsufficientDiceError",
    "NotEligibleError",
    "ValidationError",
]
