"""Data transfer objects for the transport wire format."""

from crucible.application.dtos.envelope import (
    AugmentResultEnvelope,
    AugmentResultPayload,
    Envelope,
    RequestAugmentEnvelope,
    RequestAugmentPayload,
    RequestRejectedEnvelope,
    RequestRejectedPayload,
    SeedCompleteEnvelope,
    SeedCompletePayload,
    SeedResultEnvelope,
    SeedResultPayload,
    SeedStartedEnvelope,
    SeedStartedPayload,
    StatePayload,
    StateUpdateEnvelope,
    decode_envelope,
    encode_envelope,
)

__all__ = [
    "AugmentResultEnvelope",
    "AugmentResultPayload",
    "Envelope",
    "RequestAugmentEnvelope",
    "RequestAugmentPayload",
    "RequestRejectedEnvelope",
    "RequestRejectedPayload",
    "SeedCompleteEnvelope",
    "SeedCompletePayload",
    "SeedResultEnvelope",
    "SeedResultPayload",
    "SeedStartedEnvelope",
    "SeedStartedPayload",
    "StatePayload",
    "StateUpdateEnvelope",
    "decode_envelope",
    "encode_envelope",
]
