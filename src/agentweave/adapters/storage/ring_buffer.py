"""Ring buffer storage adapters for diagnostics logs and collected metrics.

Provides bounded in-memory storage that automatically evicts oldest
entries when the buffer is full. Used as the default diagnostics sink so
that a misbehaving advice cannot grow agent memory without bound.
"""

import threading
from collections import deque
from collections.abc import AsyncIterable

from agentweave.core.models import LogEntry, MetricSample


class RingBufferLogStorage:
    """Ring buffer implementation of LogStoragePort.

    Stores log entries in a fixed-size circular buffer. When the buffer
    is full, the oldest entry is automatically evicted to make room for
    new entries.

    Args:
        max_size: Maximum number of entries to store.
    """

    def __init__(self, max_size: int) -> None:
        if max_size <= 0:
            raise ValueError("max_size must be positive")
        self._buffer: deque[LogEntry] = deque(maxlen=max_size)
        self._lock = threading.Lock()

    async def write(self, entry: LogEntry) -> None:
        """Write a log entry to storage."""
        self.write_sync(entry)

    def write_sync(self, entry: LogEntry) -> None:
        with self._lock:
            self._buffer.append(entry)

    def read_sync(self, since: float = 0) -> list[LogEntry]:
        with self._lock:
            filtered = [e for e in self._buffer if e.timestamp > since]
        return sorted(filtered, key=lambda e: e.timestamp)

    async def read(self, since: float = 0) -> AsyncIterable[LogEntry]:
        """Read log entries since the given timestamp.

        Returns entries with timestamp > since, ordered by timestamp ascending.
        """
        for entry in self.read_sync(since):
            yield entry


class RingBufferMetricsStorage:
    """Ring buffer implementation of MetricsStoragePort.

    Stores metric samples in a fixed-size circular buffer. When the buffer
    is full, the oldest sample is automatically evicted to make room for
    new samples.

    Args:
        max_size: Maximum number of samples to store.
    """

    def __init__(self, max_size: int) -> None:
        if max_size <= 0:
            raise ValueError("max_size must be positive")
        self._buffer: deque[MetricSample] = deque(maxlen=max_size)
        self._lock = threading.Lock()

    async def write(self, sample: MetricSample) -> None:
        """Write a metric sample to storage."""
        self.write_sync(sample)

    def write_sync(self, sample: MetricSample) -> None:
        with self._lock:
            self._buffer.append(sample)

    def scrape_sync(self) -> list[MetricSample]:
        with self._lock:
            return list(self._buffer)

    async def scrape(self) -> AsyncIterable[MetricSample]:
        """Scrape all current metric samples."""
        for sample in self.scrape_sync():
            yield sample
