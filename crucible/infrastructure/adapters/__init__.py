"""Infrastructure adapters for Crucible of Fate.

Adapters implement the ports defined in the application layer.
"""

from crucible.infrastructure.adapters.dice import SystemDieSource
from crucible.infrastructure.adapters.persistence import SqlPoolStore
from crucible.infrastructure.adapters.transport import (
    InProcessEndpoint,
    InProcessTransportHub,
)

__all__: list[str] = [
    "InProcessEndpoint",
    "InProcessTransportHub",
    "SqlPoolStore",
    "SystemDieSource",
]
