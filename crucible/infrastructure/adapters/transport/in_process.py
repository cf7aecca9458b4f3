"""In-process transport channel.

InProcessTransportHub connects several endpoints (one per simulated
process) inside a single event loop. Envelopes are encoded to their JSON
wire form on send and decoded on receipt, so every hop goes through the
same validation a networked transport would.

Delivery:
- publish(): every other endpoint, in connection order
- send_to_authority(): the endpoint connected as authoritative
- send_to(): one endpoint by participant id
- Unknown targets and undecodable messages are logged and dropped.
- Handlers run before the send returns; their exceptions propagate to
  the sender.

Usage:
    hub = InProcessTransportHub()
    gm = hub.connect("gm", authoritative=True)
    alice = hub.connect("alice")
"""

from __future__ import annotations

from collections import defaultdict

from pydantic import ValidationError as PydanticValidationError
from structlog import get_logger

from crucible.application.dtos.envelope import Envelope, decode_envelope, encode_envelope
from crucible.application.ports.transport_channel import (
    EnvelopeHandler,
    TransportChannelProtocol,
)
from crucible.domain.events.message_types import MessageType
from crucible.infrastructure.observability.correlation import (
    correlation_scope,
    generate_correlation_id,
    get_correlation_id,
)

logger = get_logger()


class InProcessTransportHub:
    """Routes raw JSON messages between connected endpoints."""

    def __init__(self) -> None:
        self._endpoints: dict[str, InProcessEndpoint] = {}
        self._authority_id: str | None = None

    @property
    def authority_id(self) -> str | None:
        return self._authority_id

    def connect(self, endpoint_id: str, *, authoritative: bool = False) -> InProcessEndpoint:
        """Attach a new endpoint.

        Raises:
            ValueError: If the id is taken, or a second authority connects.
        """
        if endpoint_id in self._endpoints:
            raise ValueError(f"Endpoint {endpoint_id} is already connected")
        if authoritative:
            if self._authority_id is not None:
                raise ValueError(
                    f"{self._authority_id} is already the authoritative endpoint"
                )
            self._authority_id = endpoint_id
        endpoint = InProcessEndpoint(self, endpoint_id)
        self._endpoints[endpoint_id] = endpoint
        logger.debug("endpoint_connected", endpoint_id=endpoint_id, authoritative=authoritative)
        return endpoint

    def disconnect(self, endpoint_id: str) -> None:
        self._endpoints.pop(endpoint_id, None)
        if self._authority_id == endpoint_id:
            self._authority_id = None

    async def broadcast(self, sender_id: str, raw: str) -> None:
        for endpoint_id, endpoint in list(self._endpoints.items()):
            if endpoint_id != sender_id:
                await endpoint.receive(raw)

    async def deliver(self, sender_id: str, target_id: str | None, raw: str) -> None:
        endpoint = self._endpoints.get(target_id) if target_id else None
        if endpoint is None:
            logger.warning(
                "message_undeliverable", sender_id=sender_id, target_id=target_id
            )
            return
        await endpoint.receive(raw)


class InProcessEndpoint(TransportChannelProtocol):
    """One process's view of the hub."""

    def __init__(self, hub: InProcessTransportHub, endpoint_id: str) -> None:
        self._hub = hub
        self._endpoint_id = endpoint_id
        self._handlers: dict[MessageType, list[EnvelopeHandler]] = defaultdict(list)

    @property
    def endpoint_id(self) -> str:
        return self._endpoint_id

    def subscribe(self, message_type: MessageType, handler: EnvelopeHandler) -> None:
        self._handlers[message_type].append(handler)

    def _encode(self, envelope: Envelope) -> str:
        if envelope.correlation_id is None:
            envelope = envelope.model_copy(
                update={"correlation_id": get_correlation_id() or generate_correlation_id()}
            )
        return encode_envelope(envelope)

    async def publish(self, envelope: Envelope) -> None:
        await self._hub.broadcast(self._endpoint_id, self._encode(envelope))

    async def send_to_authority(self, envelope: Envelope) -> None:
        await self._hub.deliver(
            self._endpoint_id, self._hub.authority_id, self._encode(envelope)
        )

    async def send_to(self, participant_id: str, envelope: Envelope) -> None:
        await self._hub.deliver(self._endpoint_id, participant_id, self._encode(envelope))

    async def receive(self, raw: str | bytes) -> None:
        """Decode one wire message and dispatch it to the subscribed handlers."""
        try:
            envelope = decode_envelope(raw)
        except PydanticValidationError as exc:
            logger.warning(
                "envelope_dropped",
                endpoint_id=self._endpoint_id,
                error_count=exc.error_count(),
            )
            return

        message_type = MessageType(envelope.type)
        with correlation_scope(envelope.correlation_id or generate_correlation_id()):
            log = logger.bind(
                endpoint_id=self._endpoint_id, message_type=message_type.value
            )
            handlers = self._handlers.get(message_type, [])
            if not handlers:
                log.debug("envelope_ignored")
                return
            log.debug("envelope_dispatched", handler_count=len(handlers))
            for handler in handlers:
                await handler(envelope)
