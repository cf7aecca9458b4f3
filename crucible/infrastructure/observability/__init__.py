"""Observability: structured logging and correlation IDs."""

from crucible.infrastructure.observability.correlation import (
    correlation_id_processor,
    correlation_scope,
    ensure_correlation_id,
    generate_correlation_id,
    get_correlation_id,
)
from crucible.infrastructure.observability.logging import configure_structlog

__all__ = [
    "configure_structlog",
    "correlation_id_processor",
    "correlation_scope",
    "ensure_correlation_id",
    "generate_correlation_id",
    "get_correlation_id",
]
