"""Unit tests for the DiagnosticsHandler logging adapter."""

import asyncio
import logging
from collections.abc import AsyncIterable
from typing import Any

import pytest

from agentweave.adapters.logging import DiagnosticsHandler
from agentweave.adapters.storage.in_memory import InMemoryLogStorage
from agentweave.core.models import LogEntry

pytestmark = [pytest.mark.unit, pytest.mark.tier(1)]


def _run_async(coro: Any) -> Any:
    """Run a coroutine in a new event loop (for sync test helpers)."""
    return asyncio.run(coro)


async def _collect_entries(storage: Any) -> list[Any]:
    """Collect all entries from storage."""
    return [e async for e in storage.read()]


def _record(name: str = "agentweave.core.guard", msg: str = "advice raised", **kwargs: Any):
    return logging.LogRecord(
        name=name,
        level=kwargs.pop("level", logging.WARNING),
        pathname=kwargs.pop("pathname", ""),
        lineno=kwargs.pop("lineno", 0),
        msg=msg,
        args=(),
        exc_info=None,
        **kwargs,
    )


class AsyncOnlyStorage:
    """LogStoragePort without a synchronous write path."""

    def __init__(self) -> None:
        self.entries: list[LogEntry] = []

    async def write(self, entry: LogEntry) -> None:
        self.entries.append(entry)

    async def read(self, since: float = 0) -> AsyncIterable[LogEntry]:
        for entry in self.entries:
            yield entry


@pytest.fixture
def logger_with(request):
    """Attach a handler to a dedicated logger and detach it afterwards."""
    attached: list[tuple[logging.Logger, logging.Handler]] = []

    def _attach(handler: logging.Handler) -> logging.Logger:
        logger = logging.getLogger(f"agentweave.test.{request.node.name}")
        logger.addHandler(handler)
        logger.setLevel(logging.DEBUG)
        logger.propagate = False
        attached.append((logger, handler))
        return logger

    yield _attach
    for logger, handler in attached:
        logger.removeHandler(handler)


class TestDiagnosticsHandler:
    """Tests for DiagnosticsHandler adapter."""

    def test_handler_is_logging_handler(self) -> None:
        """Handler extends logging.Handler."""
        assert isinstance(DiagnosticsHandler(InMemoryLogStorage()), logging.Handler)

    def test_emit_writes_log_entry(self) -> None:
        """Handler.emit() writes a LogEntry to storage."""
        storage = InMemoryLogStorage()
        DiagnosticsHandler(storage).emit(_record())

        entries = _run_async(_collect_entries(storage))
        assert len(entries) == 1
        assert entries[0].message == "advice raised"
        assert entries[0].level == "WARNING"

    def test_extracts_logrecord_attributes(self) -> None:
        """Handler extracts module, funcName and lineno from the record."""
        storage = InMemoryLogStorage()
        handler = DiagnosticsHandler(storage)

        handler.emit(_record(name="agentweave.core.weaver", lineno=42, func="weave"))

        attributes = storage.read_sync()[0].attributes
        assert attributes["module"] == "agentweave.core.weaver"
        assert attributes["funcName"] == "weave"
        assert attributes["lineno"] == 42
        assert "pathname" not in attributes

    def test_includes_extra_attributes(self, logger_with) -> None:
        """Extra fields of the logging call become attributes."""
        storage = InMemoryLogStorage()
        logger = logger_with(DiagnosticsHandler(storage))

        logger.warning("advice raised", extra={"site": "shop.Phase.execute", "attempt": 2})

        attributes = storage.read_sync()[0].attributes
        assert attributes["site"] == "shop.Phase.execute"
        assert attributes["attempt"] == 2

    def test_non_scalar_extras_are_dropped(self, logger_with) -> None:
        storage = InMemoryLogStorage()
        logger = logger_with(DiagnosticsHandler(storage))

        logger.warning("x", extra={"payload": {"nested": True}})

        assert "payload" not in storage.read_sync()[0].attributes

    def test_extracts_exception_info(self, logger_with) -> None:
        """Exception type, message and traceback are recorded."""
        storage = InMemoryLogStorage()
        logger = logger_with(DiagnosticsHandler(storage))

        try:
            raise ValueError("test error")
        except ValueError:
            logger.exception("caught error")

        attributes = storage.read_sync()[0].attributes
        assert attributes["exc_type"] == "ValueError"
        assert attributes["exc_message"] == "test error"
        assert "ValueError: test error" in attributes["exc_traceback"]

    def test_exception_instance_as_exc_info(self, logger_with) -> None:
        storage = InMemoryLogStorage()
        logger = logger_with(DiagnosticsHandler(storage))

        logger.warning("sampling failed", exc_info=OSError("unreadable"))

        assert storage.read_sync()[0].attributes["exc_type"] == "OSError"

    def test_configurable_attributes(self) -> None:
        """Handler allows configuring which LogRecord fields to include."""
        storage = InMemoryLogStorage()
        handler = DiagnosticsHandler(storage, include_attrs=["module", "pathname"])

        handler.emit(_record(pathname="/agent/weaver.py", lineno=10, func="weave"))

        attributes = storage.read_sync()[0].attributes
        assert attributes["pathname"] == "/agent/weaver.py"
        assert "lineno" not in attributes
        assert "funcName" not in attributes

    def test_context_provider_merges_attributes(self) -> None:
        storage = InMemoryLogStorage()
        handler = DiagnosticsHandler(storage, context_provider=lambda: {"agent": "test"})

        handler.emit(_record())

        assert storage.read_sync()[0].attributes["agent"] == "test"

    def test_extra_overrides_context_provider(self, logger_with) -> None:
        """Extra attributes override context provider values."""
        storage = InMemoryLogStorage()
        logger = logger_with(
            DiagnosticsHandler(storage, context_provider=lambda: {"site": "from_context"})
        )

        logger.warning("test", extra={"site": "from_extra"})

        assert storage.read_sync()[0].attributes["site"] == "from_extra"

    def test_async_only_storage(self) -> None:
        """Storages without write_sync are written through an event loop."""
        storage = AsyncOnlyStorage()

        DiagnosticsHandler(storage).emit(_record())

        assert [e.message for e in storage.entries] == ["advice raised"]

    def test_works_inside_running_event_loop(self, logger_with) -> None:
        storage = InMemoryLogStorage()
        logger = logger_with(DiagnosticsHandler(storage))

        async def main() -> None:
            logger.warning("from a coroutine")

        _run_async(main())

        assert [e.message for e in storage.read_sync()] == ["from a coroutine"]

    def test_storage_failure_goes_to_handle_error(self, monkeypatch) -> None:
        class FailingStorage(InMemoryLogStorage):
            def write_sync(self, entry: LogEntry) -> None:
                raise OSError("disk full")

        handled: list[logging.LogRecord] = []
        handler = DiagnosticsHandler(FailingStorage())
        monkeypatch.setattr(handler, "handleError", handled.append)

        handler.emit(_record())

        assert len(handled) == 1
