"""Base service logging mixin.

Usage:
    from crucible.application.services.base import LoggingMixin

    class MyService(LoggingMixin):
        def __init__(self, store: PoolStoreProtocol) -> None:
            self._store = store
            self._init_logger()

        async def do_something(self) -> None:
            log = self._log_operation("do_something", participant_id="p1")
            log.info("operation_started")
"""

import structlog

from crucible.infrastructure.observability.correlation import get_correlation_id


class LoggingMixin:
    """Gives a service a bound structlog logger.

    `_init_logger()` binds the class name as `service` plus a `component`.
    `_log_operation()` adds the operation name, the context correlation id
    and any keyword context on top of that.
    """

    _log: structlog.BoundLogger

    def _init_logger(self, component: str = "crucible") -> None:
        """Bind the service logger; call from __init__."""
        self._log = structlog.get_logger().bind(
            service=self.__class__.__name__,
            component=component,
        )

    def _log_operation(
        self,
        operation: str,
        **context: object,
    ) -> structlog.BoundLogger:
        """Create an operation-scoped logger with correlation ID.

        Example:
            log = self._log_operation("move_dice", direction="to_arbiter")
            log.info("move_started")
        """
        return self._log.bind(
            operation=operation,
            correlation_id=get_correlation_id(),
            **context,
        )
