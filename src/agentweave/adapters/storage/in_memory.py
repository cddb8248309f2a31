"""In-memory storage adapters for diagnostics logs and collected metrics."""

import threading
from collections.abc import AsyncIterable

from agentweave.core.models import LogEntry, MetricSample


class InMemoryLogStorage:
    """In-memory implementation of LogStoragePort.

    Stores log entries in a list. Suitable for testing and for inspecting
    agent diagnostics where persistence is not required.
    """

    def __init__(self) -> None:
        self._entries: list[LogEntry] = []
        self._lock = threading.Lock()

    async def write(self, entry: LogEntry) -> None:
        """Write a log entry to storage."""
        self.write_sync(entry)

    def write_sync(self, entry: LogEntry) -> None:
        """Synchronous write for logging handlers running on host threads."""
        with self._lock:
            self._entries.append(entry)

    def read_sync(self, since: float = 0) -> list[LogEntry]:
        """Synchronous read, entries with timestamp > since in ascending order."""
        with self._lock:
            filtered = [e for e in self._entries if e.timestamp > since]
        return sorted(filtered, key=lambda e: e.timestamp)

    async def read(self, since: float = 0) -> AsyncIterable[LogEntry]:
        """Read log entries since the given timestamp.

        Returns entries with timestamp > since, ordered by timestamp ascending.
        """
        for entry in self.read_sync(since):
            yield entry


class InMemoryMetricsStorage:
    """In-memory implementation of MetricsStoragePort.

    Stores metric samples in a list. Suitable for testing and
    low-volume applications where persistence is not required.
    """

    def __init__(self) -> None:
        self._samples: list[MetricSample] = []
        self._lock = threading.Lock()

    async def write(self, sample: MetricSample) -> None:
        """Write a metric sample to storage."""
        self.write_sync(sample)

    def write_sync(self, sample: MetricSample) -> None:
        with self._lock:
            self._samples.append(sample)

    def scrape_sync(self) -> list[MetricSample]:
        with self._lock:
            return list(self._samples)

    async def scrape(self) -> AsyncIterable[MetricSample]:
        """Scrape all current metric samples."""
        for sample in self.scrape_sync():
            yield sample
