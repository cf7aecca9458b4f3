"""Message types exchanged over the transport channel.

Authority -> everyone:
    stateUpdate, seedStarted, seedComplete, augmentResult
Authority -> one participant:
    requestRejected
Participant -> authority:
    seedResult, requestAugment
"""

from __future__ import annotations

from enum import Enum


class MessageType(str, Enum):
    """Envelope `type` values as they appear on the wire."""

    STATE_UPDATE = "stateUpdate"
    SEED_STARTED = "seedStarted"
    SEED_COMPLETE = "seedComplete"
    SEED_RESULT = "seedResult"
    REQUEST_AUGMENT = "requestAugment"
    AUGMENT_RESULT = "augmentResult"
    REQUEST_REJECTED = "requestRejected"


# Messages only the authoritative process acts on
AUTHORITY_BOUND_TYPES: frozenset[MessageType] = frozenset(
    {MessageType.SEED_RESULT, MessageType.REQUEST_AUGMENT}
)
