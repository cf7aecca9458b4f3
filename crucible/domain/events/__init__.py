"""Domain events for Crucible of Fate."""

from crucible.domain.events.message_types import AUTHORITY_BOUND_TYPES, MessageType

__all__: list[str] = ["AUTHORITY_BOUND_TYPES", "MessageType"]
