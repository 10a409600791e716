"""
Error taxonomy for the telemetry store.

Every error carries the name of the operation that failed and, where there is
one, the identifier of the entity involved so callers can log meaningfully.
"""

from typing import Any


class TelemetryStoreError(Exception):
    """Base class for all store failures."""

    def __init__(
        self,
        message: str,
        *,
        operation: str | None = None,
        entity_id: Any = None,
    ):
        self.operation = operation
        self.entity_id = entity_id
        context = []
        if operation:
            context.append(f"operation={operation}")
        if entity_id is not None:
            context.append(f"entity_id={entity_id}")
        if context:
            message = f"{message} ({', '.join(context)})"
        super().__init__(message)


class StoreConnectionError(TelemetryStoreError):
    """Pool exhausted or database unreachable. Never retried by the store."""


class SchemaError(TelemetryStoreError):
    """Schema creation or migration failed; startup must halt."""


class NotFoundError(TelemetryStoreError):
    """A lookup by identifier matched nothing."""


class ConstraintError(TelemetryStoreError):
    """Uniqueness or type violation raised by the database engine."""


class DeserializationError(TelemetryStoreError):
    """A summary column holds a value that cannot be represented."""


class ExecutionAlreadyClosedError(TelemetryStoreError):
    """close was called on an execution that already has an outcome."""


class QueryCancelledError(TelemetryStoreError):
    """The operation hit its deadline or was cancelled; nothing was written."""
