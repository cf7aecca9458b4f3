"""Transport channel port definition.

A broadcast/point-to-point bus used by every process to exchange typed
envelopes. The channel holds no pool state.

Delivery semantics:
- publish(): to every other connected process (not the sender)
- send_to_authority(): to the authoritative process only
- send_to(): to one participant
- No retries; a lost message is lost.
- No total ordering across senders; each receiver handles messages in
  receipt order.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Awaitable, Callable

from crucible.application.dtos.envelope import Envelope
from crucible.domain.events.message_types import MessageType

EnvelopeHandler = Callable[[Envelope], Awaitable[None]]


class TransportChannelProtocol(ABC):
    """Abstract protocol for the message bus, as seen by one process."""

    @property
    @abstractmethod
    def endpoint_id(self) -> str:
        """Identity of the process owning this endpoint."""
        ...

    @abstractmethod
    async def publish(self, envelope: Envelope) -> None:
        """Broadcast an envelope to every other process."""
        ...

    @abstractmethod
    async def send_to_authority(self, envelope: Envelope) -> None:
        """Send an envelope to the authoritative process."""
        ...

    @abstractmethod
    async def send_to(self, participant_id: str, envelope: Envelope) -> None:
        """Send an envelope to a single participant."""
        ...

    @abstractmethod
    def subscribe(self, message_type: MessageType, handler: EnvelopeHandler) -> None:
        """Register a handler for one message type."""
        ...
