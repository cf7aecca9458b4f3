"""Envelope wire models (pydantic).

Every message on the transport channel is a JSON object:

    {
        "type": "stateUpdate",
        "payload": {...},            # camelCase keys
        "correlationId": "uuid"      # optional
    }

Decoding uses a discriminated union on `type`, so a malformed or unknown
message fails validation as a whole instead of reaching a handler.
Participants are untrusted: payload shapes are checked here, business
rules (seed range, pool counts) are checked by the authoritative services
so the requester gets a specific rejection.
"""

from __future__ import annotations

from datetime import datetime
from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter
from pydantic.alias_generators import to_camel

from crucible.domain.events.message_types import MessageType
from crucible.domain.models.pool_state import PoolState


class _WireModel(BaseModel):
    """Base for wire models: camelCase aliases, immutable."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )


# =============================================================================
# Payloads
# =============================================================================


class StatePayload(_WireModel):
    """Full pool snapshot, as broadcast after every committed mutation."""

    player_pool_count: int = Field(ge=0)
    arbiter_pool_count: int = Field(ge=0)
    override_enabled: bool = False
    seeded_participants: list[str] = Field(default_factory=list)
    last_seeded_at: datetime | None = None

    @classmethod
    def from_state(cls, state: PoolState) -> StatePayload:
        return cls(
            player_pool_count=state.player_pool_count,
            arbiter_pool_count=state.arbiter_pool_count,
            override_enabled=state.override_enabled,
            seeded_participants=sorted(state.seeded_participants),
            last_seeded_at=state.last_seeded_at,
        )

    def to_state(self) -> PoolState:
        return PoolState(
            player_pool_count=self.player_pool_count,
            arbiter_pool_count=self.arbiter_pool_count,
            override_enabled=self.override_enabled,
            seeded_participants=frozenset(self.seeded_participants),
            last_seeded_at=self.last_seeded_at,
        )


class SeedStartedPayload(_WireModel):
    active_participant_count: int = Field(ge=0)


class SeedResultPayload(_WireModel):
    participant_id: str = Field(min_length=1)
    # Range is enforced by the seeding coordinator, not here
    value: int


class SeedCompletePayload(_WireModel):
    state: StatePayload


class RequestAugmentPayload(_WireModel):
    participant_id: str = Field(min_length=1)
    action_id: str = Field(min_length=1)


class AugmentResultPayload(_WireModel):
    participant_id: str
    action_id: str
    die_value: int = Field(ge=1, le=6)
    new_total: int | None = None


class RequestRejectedPayload(_WireModel):
    """Specific failure returned to the requester of a proposal."""

    participant_id: str
    request_type: MessageType
    kind: str
    message: str


# =============================================================================
# Envelopes
# =============================================================================


class _EnvelopeBase(_WireModel):
    correlation_id: str | None = None

    @property
    def message_type(self) -> MessageType:
        return MessageType(self.type)  # type: ignore[attr-defined]


class StateUpdateEnvelope(_EnvelopeBase):
    type: Literal["stateUpdate"] = "stateUpdate"
    payload: StatePayload


class SeedStartedEnvelope(_EnvelopeBase):
    type: Literal["seedStarted"] = "seedStarted"
    payload: SeedStartedPayload


class SeedCompleteEnvelope(_EnvelopeBase):
    type: Literal["seedComplete"] = "seedComplete"
    payload: SeedCompletePayload


class SeedResultEnvelope(_EnvelopeBase):
    type: Literal["seedResult"] = "seedResult"
    payload: SeedResultPayload


class RequestAugmentEnvelope(_EnvelopeBase):
    type: Literal["requestAugment"] = "requestAugment"
    payload: RequestAugmentPayload


class AugmentResultEnvelope(_EnvelopeBase):
    type: Literal["augmentResult"] = "augmentResult"
    payload: AugmentResultPayload


class RequestRejectedEnvelope(_EnvelopeBase):
    type: Literal["requestRejected"] = "requestRejected"
    payload: RequestRejectedPayload


Envelope = Annotated[
    Union[
        StateUpdateEnvelope,
        SeedStartedEnvelope,
        SeedCompleteEnvelope,
        SeedResultEnvelope,
        RequestAugmentEnvelope,
        AugmentResultEnvelope,
        RequestRejectedEnvelope,
    ],
    Field(discriminator="type"),
]

_ENVELOPE_ADAPTER: TypeAdapter[Envelope] = TypeAdapter(Envelope)


def encode_envelope(envelope: Envelope) -> str:
    """Serialize an envelope to its JSON wire form."""
    return envelope.model_dump_json(by_alias=True)


def decode_envelope(raw: str | bytes) -> Envelope:
    """Parse and validate a JSON wire message.

    Raises:
        pydantic.ValidationError: If the message is malformed, has an
            unknown type, or a payload of the wrong shape.
    """
    return _ENVELOPE_ADAPTER.validate_json(raw)
