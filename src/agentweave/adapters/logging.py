"""Python logging handler adapter for agent diagnostics.

This adapter bridges Python's standard library logging module to the
LogStoragePort, so faults recorded by the agent (advice, matcher and
sampling failures) can be captured and inspected without ever reaching the
instrumented application.
"""

import asyncio
import logging
import traceback
from collections.abc import Callable

from agentweave.core.models import LogEntry
from agentweave.core.ports import LogStoragePort

AttributeValue = str | int | float | bool
ContextProvider = Callable[[], dict[str, AttributeValue]]

# Standard LogRecord attributes that should not be treated as extra fields
_STANDARD_LOGRECORD_ATTRS = frozenset(
    {
        "args",
        "asctime",
        "created",
        "exc_info",
        "exc_text",
        "filename",
        "funcName",
        "levelname",
        "levelno",
        "lineno",
        "message",
        "module",
        "msecs",
        "msg",
        "name",
        "pathname",
        "process",
        "processName",
        "relativeCreated",
        "stack_info",
        "taskName",
        "thread",
        "threadName",
    }
)


# Default attributes to extract from LogRecord
_DEFAULT_INCLUDE_ATTRS = ["module", "funcName", "lineno"]


class DiagnosticsHandler(logging.Handler):
    """Logging handler that writes agent log records to a LogStoragePort.

    Storages offering ``write_sync`` are written to directly, so the handler
    works on host threads that already run an event loop.

    Example:
        ```python
        from agentweave import DiagnosticsHandler, InMemoryLogStorage

        storage = InMemoryLogStorage()
        logging.getLogger("agentweave").addHandler(DiagnosticsHandler(storage))
        ```
    """

    def __init__(
        self,
        storage: LogStoragePort,
        include_attrs: list[str] | None = None,
        context_provider: ContextProvider | None = None,
    ) -> None:
        """Initialize the handler with a log storage backend.

        Args:
            storage: Storage adapter implementing LogStoragePort.
            include_attrs: List of LogRecord attributes to include. Defaults to
                ["module", "funcName", "lineno"].
            context_provider: Optional callable returning attributes merged
                into every entry; extra fields of the record take precedence.
        """
        super().__init__()
        self._storage = storage
        self._include_attrs = include_attrs or _DEFAULT_INCLUDE_ATTRS
        self._context_provider = context_provider

    def _build_entry(self, record: logging.LogRecord) -> LogEntry:
        # Map of attribute names to their values from LogRecord
        attr_mapping: dict[str, AttributeValue] = {
            "module": record.name,
            "funcName": record.funcName or "",
            "lineno": record.lineno,
            "pathname": record.pathname,
        }

        attributes: dict[str, AttributeValue] = {
            key: attr_mapping[key] for key in self._include_attrs if key in attr_mapping
        }

        if self._context_provider is not None:
            attributes.update(self._context_provider())

        # Add any extra attributes passed via logging call
        for key, value in record.__dict__.items():
            if key not in _STANDARD_LOGRECORD_ATTRS and isinstance(
                value, (str, int, float, bool)
            ):
                attributes[key] = value

        if record.exc_info:
            exc_type, exc_value, exc_tb = record.exc_info
            if exc_type is not None:
                attributes["exc_type"] = exc_type.__name__
            if exc_value is not None:
                attributes["exc_message"] = str(exc_value)
                attributes["exc_traceback"] = "".join(
                    traceback.format_exception(exc_type, exc_value, exc_tb)
                )

        return LogEntry(
            timestamp=record.created,
            level=record.levelname,
            message=record.getMessage(),
            attributes=attributes,
        )

    def emit(self, record: logging.LogRecord) -> None:
        """Emit a log record to the storage backend.

        Args:
            record: The log record to emit.
        """
        try:
            entry = self._build_entry(record)
            write_sync = getattr(self._storage, "write_sync", None)
            if write_sync is not None:
                write_sync(entry)
            else:
                asyncio.run(self._storage.write(entry))
        except Exception:
            self.handleError(record)
