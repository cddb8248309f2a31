"""Storage adapters implementing core ports."""

from agentweave.adapters.storage.in_memory import (
    InMemoryLogStorage,
    InMemoryMetricsStorage,
)
from agentweave.adapters.storage.ring_buffer import (
    RingBufferLogStorage,
    RingBufferMetricsStorage,
)

__all__ = [
    "InMemoryLogStorage",
    "InMemoryMetricsStorage",
    "RingBufferLogStorage",
    "RingBufferMetricsStorage",
]
