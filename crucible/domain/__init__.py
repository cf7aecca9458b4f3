"""Domain layer for Crucible of Fate.

Pure types and rules for the dice pools. Nothing in this package performs
I/O; collaborators are described by ports in the application layer.
"""

from crucible.domain.exceptions import CrucibleError

__all__ = ["CrucibleError"]
