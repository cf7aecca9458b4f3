"""Logging setup for a Crucible of Fate process."""

from __future__ import annotations

from structlog import get_logger

from crucible.config import CrucibleConfig
from crucible.infrastructure.observability import configure_structlog


def configure_logging(config: CrucibleConfig) -> None:
    """Pick JSON or console rendering from `config.environment`.

    Call once, before any session is built.
    """
    configure_structlog(environment=config.environment)
    get_logger().bind(component="logging_bootstrap").debug(
        "logging_configured",
        environment=config.environment,
        pool_store="sql" if config.uses_database else "memory",
    )


__all__ = ["configure_logging"]
