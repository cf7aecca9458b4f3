"""Transport channel adapters."""

from crucible.infrastructure.adapters.transport.in_process import (
    InProcessEndpoint,
    InProcessTransportHub,
)

__all__ = ["InProcessEndpoint", "InProcessTransportHub"]
