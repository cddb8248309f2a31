"""Core domain models for weaving and observable metrics."""

from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType

# Reading reported by a data source that has no value for a field.
UNAVAILABLE = -1


@dataclass(frozen=True)
class LogEntry:
    """A structured log entry.

    Attributes:
        timestamp: Unix timestamp in seconds.
        level: Log level (e.g., INFO, ERROR, DEBUG).
        message: The log message.
        attributes: Additional structured fields.
    """

    timestamp: float
    level: str
    message: str
    attributes: dict[str, str | int | float | bool] = field(default_factory=dict)


@dataclass(frozen=True)
class MetricSample:
    """A single metric measurement.

    Attributes:
        name: Metric name (e.g., process.runtime.memory.usage).
        timestamp: Unix timestamp in seconds.
        value: The metric value.
        labels: Key-value pairs for metric dimensions.
    """

    name: str
    timestamp: float
    value: float
    labels: dict[str, str] = field(default_factory=dict)


class Phase(Enum):
    """Point of a woven method at which advice runs."""

    ON_ENTRY = "on_entry"
    ON_EXIT = "on_exit"
    ON_EXIT_INCLUDING_FAILURE = "on_exit_including_failure"


class MethodKind(Enum):
    INSTANCE = "instance"
    CLASS = "class"
    STATIC = "static"


@dataclass(frozen=True)
class TypeDescription:
    """Identity of a class as seen by type matchers.

    Attributes:
        name: Fully-qualified name, ``module.qualname``.
    """

    name: str

    @property
    def module(self) -> str:
        return self.name.rpartition(".")[0]


@dataclass(frozen=True)
class MethodDescription:
    """Shape of a method declared on a class.

    Attributes:
        name: Method name.
        parameter_types: Fully-qualified type name of each declared parameter,
            receiver excluded. ``None`` where the parameter is unannotated.
        kind: Whether the method is an instance, class or static method.
    """

    name: str
    parameter_types: tuple[str | None, ...] = ()
    kind: MethodKind = MethodKind.INSTANCE


class AttributeSet(Mapping[str, str]):
    """Immutable, ordered label set attached to a measurement.

    Built once per monitored entity and shared by reference across
    collection cycles.
    """

    __slots__ = ("_items", "_hash")

    def __init__(self, items: Mapping[str, str] | None = None, **labels: str) -> None:
        merged = dict(items or {})
        merged.update(labels)
        self._items = MappingProxyType(merged)
        self._hash = hash(tuple(merged.items()))

    def __getitem__(self, key: str) -> str:
        return self._items[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def __hash__(self) -> int:
        return self._hash

    def __eq__(self, other: object) -> bool:
        if isinstance(other, AttributeSet):
            return tuple(self._items.items()) == tuple(other._items.items())
        if isinstance(other, Mapping):
            return dict(self._items) == dict(other)
        return NotImplemented

    def __repr__(self) -> str:
        return f"AttributeSet({dict(self._items)!r})"


@dataclass(frozen=True)
class Instrument:
    """A named, periodically sampled metric source."""

    name: str
    unit: str
    description: str
    kind: str = "up_down_counter"


@dataclass(frozen=True)
class MemoryUsage:
    """Four-field memory reading for one entity.

    Any field may be ``UNAVAILABLE`` (-1) when the source has no value.

    Attributes:
        init: Amount initially requested, in bytes.
        used: Amount in use, in bytes.
        committed: Amount guaranteed to be available, in bytes.
        max: Maximum obtainable amount, in bytes.
    """

    init: int = UNAVAILABLE
    used: int = UNAVAILABLE
    committed: int = UNAVAILABLE
    max: int = UNAVAILABLE
