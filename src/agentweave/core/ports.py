"""Port interfaces for the collaborators of the core.

These protocols define the contracts that adapters must implement.
The core depends only on these interfaces, not concrete implementations.
"""

from collections.abc import AsyncIterable, Callable, Mapping
from typing import Any, Protocol, runtime_checkable

from agentweave.core.models import LogEntry, MemoryUsage, MetricSample


@runtime_checkable
class ObservableMeasurement(Protocol):
    """Sink handed to a sampling callback for one collection cycle."""

    def record(self, value: float, attributes: Mapping[str, str]) -> None:
        """Record one measurement with its attribute set."""
        ...


SamplingCallback = Callable[[ObservableMeasurement], None]


@runtime_checkable
class InstrumentHandle(Protocol):
    """Handle of an instrument created by a meter."""

    def callback(self, sampling_fn: SamplingCallback) -> None:
        """Install the callback invoked once per collection cycle."""
        ...


@runtime_checkable
class MeterPort(Protocol):
    """Port for the metrics API the agent registers instruments with.

    Examples: InMemoryMeter, OpenTelemetryMeter.
    """

    def create_up_down_counter(self, name: str, unit: str, description: str) -> InstrumentHandle:
        """Create an asynchronous up-down counter instrument."""
        ...


@runtime_checkable
class SpanNamingPort(Protocol):
    """Port for the policy naming the active server span.

    Implementations compute a name for the unit of work identified by
    ``context`` and store it on its span. Calling it repeatedly for the same
    unit of work is allowed; the last call wins.
    """

    def update_span_name(self, context: Any) -> None: ...


@runtime_checkable
class MemoryPoolPort(Protocol):
    """One memory pool of the monitored runtime."""

    name: str
    type: str

    def usage(self) -> MemoryUsage:
        """Return the current reading; torn or stale values are acceptable."""
        ...


@runtime_checkable
class MemorySubsystemPort(Protocol):
    """Aggregate heap / non-heap readings of the monitored runtime."""

    def heap_usage(self) -> MemoryUsage: ...

    def non_heap_usage(self) -> MemoryUsage: ...


@runtime_checkable
class LogStoragePort(Protocol):
    """Port for log storage operations.

    Adapters implementing this protocol can store and retrieve log entries.
    Examples: InMemoryLogStorage, RingBufferLogStorage.
    """

    async def write(self, entry: LogEntry) -> None:
        """Write a log entry to storage."""
        ...

    def read(self, since: float = 0) -> AsyncIterable[LogEntry]:
        """Read log entries since the given timestamp.

        Args:
            since: Unix timestamp. Returns entries with timestamp > since.
                   Default 0 returns all entries.

        Returns:
            Async iterable of LogEntry objects, ordered by timestamp ascending.
        """
        ...


@runtime_checkable
class MetricsStoragePort(Protocol):
    """Port for metrics storage operations.

    Adapters implementing this protocol can store and retrieve metric samples.
    Examples: InMemoryMetricsStorage, RingBufferMetricsStorage.
    """

    async def write(self, sample: MetricSample) -> None:
        """Write a metric sample to storage."""
        ...

    def scrape(self) -> AsyncIterable[MetricSample]:
        """Scrape all current metric samples.

        Returns:
            Async iterable of MetricSample objects representing current state.
        """
        ...
