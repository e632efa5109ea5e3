"""Structured logging shared by the governance services.

Services mix in LoggingMixin, call `_init_logger()` once their
dependencies are set, and open one bound logger per operation:

    log = self._log_operation("transition_phase", proposal_id=proposal_id)
    log.info("phase_transition_started")

Operation loggers carry the service class name, the component, the
operation name and, when one is active, the correlation id of the
enclosing sweep or request.
"""

import structlog

from src.infrastructure.observability.correlation import get_correlation_id

DEFAULT_COMPONENT = "governance"


class LoggingMixin:
    """Gives a service a bound structlog logger.

    Attributes:
        _log: Logger bound with the service name and component.
    """

    _log: structlog.BoundLogger

    def _init_logger(self, component: str = DEFAULT_COMPONENT) -> None:
        self._log = structlog.get_logger().bind(
            service=type(self).__name__,
            component=component,
        )

    def _log_operation(
        self,
        operation: str,
        **context: object,
    ) -> structlog.BoundLogger:
        """Bind an operation-scoped logger.

        Context values that are None are left out, so optional arguments
        such as a missing session id do not clutter every line.

        Args:
            operation: Name of the service method being run.
            **context: Identifiers of the entities involved.

        Returns:
            Logger bound with the operation, its context and the current
            correlation id.
        """
        bound = {key: value for key, value in context.items() if value is not None}
        correlation_id = get_correlation_id()
        if correlation_id:
            bound["correlation_id"] = correlation_id
        return self._log.bind(operation=operation, **bound)
