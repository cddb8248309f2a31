"""Registers observers that generate metrics about runtime memory and memory pools.

Example usage:

    ```python
    register_observers(OpenTelemetryMeter(), pools, memory)
    ```

Example metrics being exported:

    process.runtime.memory.pool.init{type="heap",pool="young"} 1000000
    process.runtime.memory.pool.usage{type="heap",pool="young"} 2500000
    process.runtime.memory.pool.committed{type="heap",pool="young"} 3000000
    process.runtime.memory.pool.limit{type="heap",pool="young"} 4000000
    process.runtime.memory.pool.init{type="non_heap",pool="code"} 200
    process.runtime.memory.pool.usage{type="non_heap",pool="code"} 400
    process.runtime.memory.pool.committed{type="non_heap",pool="code"} 500
    process.runtime.memory.init{type="heap"} 1000000
    process.runtime.memory.usage{type="heap"} 2500000
    process.runtime.memory.committed{type="heap"} 3000000
    process.runtime.memory.limit{type="heap"} 4000000
    process.runtime.memory.init{type="non_heap"} 200
    process.runtime.memory.usage{type="non_heap"} 400
    process.runtime.memory.committed{type="non_heap"} 500
"""

from collections.abc import Callable, Sequence
from dataclasses import dataclass, field

from agentweave.core.models import MemoryUsage
from agentweave.core.observables import (
    ObservableRegistry,
    RegisteredInstrument,
    dual_aggregate,
    list_sourced,
)
from agentweave.core.ports import MemoryPoolPort, MemorySubsystemPort, MeterPort, SamplingCallback

TYPE_KEY = "type"
POOL_KEY = "pool"

HEAP = "heap"
NON_HEAP = "non_heap"
UNKNOWN = "unknown"

UNIT = "By"

Extractor = Callable[[MemoryUsage], int]

# (suffix, extractor, pool description, aggregate description)
_FIELDS: tuple[tuple[str, Extractor, str, str], ...] = (
    ("usage", lambda u: u.used, "Measure of memory pool used", "Measure of memory used"),
    (
        "init",
        lambda u: u.init,
        "Measure of initial memory pool requested",
        "Measure of initial memory requested",
    ),
    (
        "committed",
        lambda u: u.committed,
        "Measure of memory pool committed",
        "Measure of memory committed",
    ),
    (
        "limit",
        lambda u: u.max,
        "Measure of max obtainable memory pool",
        "Measure of max obtainable memory",
    ),
)


def memory_type(pool_type: str) -> str:
    if pool_type == HEAP:
        return HEAP
    if pool_type == NON_HEAP:
        return NON_HEAP
    return UNKNOWN


def pool_callback(
    pools: Sequence[MemoryPoolPort], extractor: Extractor, name: str = ""
) -> SamplingCallback:
    return list_sourced(
        pools,
        lambda pool: {POOL_KEY: pool.name, TYPE_KEY: memory_type(pool.type)},
        extractor,
        reading=lambda pool: pool.usage(),
        name=name,
    )


def aggregate_callback(
    memory: MemorySubsystemPort, extractor: Extractor, name: str = ""
) -> SamplingCallback:
    return dual_aggregate(
        {HEAP: memory.heap_usage, NON_HEAP: memory.non_heap_usage},
        extractor,
        label_key=TYPE_KEY,
        name=name,
    )


def register_observers(
    meter: MeterPort | ObservableRegistry,
    pools: Sequence[MemoryPoolPort],
    memory: MemorySubsystemPort,
    prefix: str = "process.runtime.memory",
) -> list[RegisteredInstrument]:
    """Register the pool-scoped and aggregate memory instruments.

    Args:
        meter: Meter, or an existing registry, to register with.
        pools: Memory pools, in a stable order. Their labels are built now.
        memory: Source of the heap and non-heap aggregate readings.
        prefix: Metric name prefix.

    Returns:
        The eight registered instruments, pool-scoped first.
    """
    registry = meter if isinstance(meter, ObservableRegistry) else ObservableRegistry(meter)
    registered = []
    for suffix, extractor, description, _ in _FIELDS:
        name = f"{prefix}.pool.{suffix}"
        registered.append(
            registry.register(name, UNIT, description, pool_callback(pools, extractor, name))
        )
    for suffix, extractor, _, description in _FIELDS:
        name = f"{prefix}.{suffix}"
        registered.append(
            registry.register(name, UNIT, description, aggregate_callback(memory, extractor, name))
        )
    return registered


@dataclass
class StaticMemoryPool:
    """MemoryPoolPort holding a reading set by the caller."""

    name: str
    type: str
    reading: MemoryUsage = field(default_factory=MemoryUsage)

    def usage(self) -> MemoryUsage:
        return self.reading


@dataclass
class StaticMemorySubsystem:
    """MemorySubsystemPort holding readings set by the caller."""

    heap: MemoryUsage = field(default_factory=MemoryUsage)
    non_heap: MemoryUsage = field(default_factory=MemoryUsage)

    def heap_usage(self) -> MemoryUsage:
        return self.heap

    def non_heap_usage(self) -> MemoryUsage:
        return self.non_heap
