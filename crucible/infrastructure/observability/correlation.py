"""Correlation ID management for cross-process tracing.

A correlation ID follows one logical request (a seed submission, an
augmentation request, a GM pool edit) across processes: it is stamped on
outgoing envelopes as `correlationId` and restored from incoming ones
before the handler runs.

Usage:
    # On receipt of an envelope
    with correlation_scope(envelope.correlation_id or generate_correlation_id()):
        await handler(envelope)

    # In services
    log = structlog.get_logger().bind(correlation_id=get_correlation_id())

    # In structlog configuration
    processors = [..., correlation_id_processor, ...]
"""

from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Any
from uuid import uuid4

_correlation_id: ContextVar[str] = ContextVar("correlation_id", default="")


def generate_correlation_id() -> str:
    """Generate a new correlation ID (UUID4)."""
    return str(uuid4())


def get_correlation_id() -> str:
    """Get the current correlation ID, or an empty string if none is set."""
    return _correlation_id.get()


def ensure_correlation_id() -> str:
    """Return the current correlation ID, generating one if unset."""
    correlation_id = _correlation_id.get()
    if not correlation_id:
        correlation_id = generate_correlation_id()
        _correlation_id.set(correlation_id)
    return correlation_id


@contextmanager
def correlation_scope(correlation_id: str) -> Iterator[str]:
    """Set the correlation ID for the duration of a block, then restore it."""
    token = _correlation_id.set(correlation_id)
    try:
        yield correlation_id
    finally:
        _correlation_id.reset(token)


def correlation_id_processor(
    logger: Any, method_name: str, event_dict: dict[str, Any]
) -> dict[str, Any]:
    """Structlog processor adding correlation_id to every log entry.

    An explicitly bound correlation_id wins over the context value.
    """
    correlation_id = get_correlation_id()
    if correlation_id:
        event_dict.setdefault("correlation_id", correlation_id)
    return event_dict
