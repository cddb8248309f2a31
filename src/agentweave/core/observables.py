"""Observable instrument registration and sampling callbacks.

Instruments are registered once, at agent start. Each one gets a sampling
callback invoked by the meter's collection scheduler; the callback reads the
current values of its data sources and records them against attribute sets
that were built at registration time.

Example:
    ```python
    registry = ObservableRegistry(meter)
    registry.register(
        "process.runtime.memory.pool.usage",
        "By",
        "Measure of memory pool used",
        list_sourced(pools, lambda p: {"pool": p.name}, lambda u: u.used, lambda p: p.usage()),
    )
    ```
"""

import logging
import math
import threading
from collections.abc import Callable, Mapping, Sequence
from typing import Any, TypeVar

from agentweave.core.attributes import AttributeCache
from agentweave.core.errors import SamplingFault
from agentweave.core.models import UNAVAILABLE, AttributeSet, Instrument
from agentweave.core.ports import MeterPort, ObservableMeasurement, SamplingCallback

logger = logging.getLogger(__name__)

E = TypeVar("E")
R = TypeVar("R")


def _identity(value: Any) -> Any:
    return value


def _checked(value: Any) -> float:
    """Return ``value`` if it is a usable number, raise TypeError otherwise."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise TypeError(f"reading must be a number, got {type(value).__name__}")
    if isinstance(value, float) and math.isnan(value):
        raise TypeError("reading is NaN")
    return value


def _report(fault: SamplingFault) -> None:
    logger.warning(
        "Sampling failed; entity skipped for this cycle",
        exc_info=fault.cause,
        extra={"instrument": fault.instrument, "entity": repr(fault.entity)},
    )


def list_sourced(
    entities: Sequence[E],
    labeler: Callable[[E], Mapping[str, str]],
    extractor: Callable[[R], float],
    reading: Callable[[E], R] = _identity,
    name: str = "",
) -> SamplingCallback:
    """Build a callback sampling a fixed, ordered list of entities.

    Attribute sets are built here, once, index-aligned with ``entities``.
    Each cycle reads every entity and records its value unless it is the
    ``UNAVAILABLE`` sentinel. An entity whose reading raises or is not a
    number contributes nothing for that cycle; the others still report.

    Args:
        entities: Monitored entities, in a stable order.
        labeler: Builds the labels of one entity.
        extractor: Maps a reading to the recorded number.
        reading: Reads the current state of one entity. Defaults to the
            entity itself.
        name: Instrument name used in diagnostics.
    """
    cache = AttributeCache(entities, labeler)

    def callback(measurement: ObservableMeasurement) -> None:
        for entity, attributes in cache.pairs():
            try:
                value = _checked(extractor(reading(entity)))
            except Exception as exc:
                _report(SamplingFault(name, entity, exc))
                continue
            if value != UNAVAILABLE:
                measurement.record(value, attributes)

    return callback


def dual_aggregate(
    readers: Mapping[str, Callable[[], R]],
    extractor: Callable[[R], float],
    label_key: str = "type",
    name: str = "",
) -> SamplingCallback:
    """Build a callback sampling exactly two named aggregate categories.

    Each category's sentinel check is independent: an unavailable value in
    one category never suppresses the other.

    Args:
        readers: Category name to a function returning its current reading,
            e.g. ``{"heap": memory.heap_usage, "non_heap": memory.non_heap_usage}``.
        extractor: Maps a reading to the recorded number.
        label_key: Attribute key carrying the category name.
        name: Instrument name used in diagnostics.

    Raises:
        ValueError: ``readers`` does not hold exactly two categories.
    """
    if len(readers) != 2:
        raise ValueError(f"dual_aggregate needs exactly two categories, got {len(readers)}")
    categories = tuple(readers.items())
    attributes = tuple(AttributeSet({label_key: category}) for category, _ in categories)

    def callback(measurement: ObservableMeasurement) -> None:
        for (category, read), category_attributes in zip(categories, attributes):
            try:
                value = _checked(extractor(read()))
            except Exception as exc:
                _report(SamplingFault(name, category, exc))
                continue
            if value != UNAVAILABLE:
                measurement.record(value, category_attributes)

    return callback


class RegisteredInstrument:
    """An instrument whose callback is installed on a meter.

    Closing it stops emission from the next collection cycle on. A cycle
    already running when ``close()`` is called completes.
    """

    def __init__(
        self,
        instrument: Instrument,
        callback: SamplingCallback,
        registry: "ObservableRegistry | None" = None,
    ) -> None:
        self.instrument = instrument
        self._callback = callback
        self._registry = registry
        self._active = True

    @property
    def name(self) -> str:
        return self.instrument.name

    @property
    def active(self) -> bool:
        return self._active

    def close(self) -> None:
        self._active = False
        if self._registry is not None:
            self._registry._forget(self)

    def __call__(self, measurement: ObservableMeasurement) -> None:
        if not self._active:
            return
        try:
            self._callback(measurement)
        except Exception as exc:
            _report(SamplingFault(self.name, None, exc))

    def __repr__(self) -> str:
        state = "active" if self._active else "closed"
        return f"RegisteredInstrument({self.name!r}, {state})"


class ObservableRegistry:
    """Registers named up-down counter instruments with a meter."""

    def __init__(self, meter: MeterPort) -> None:
        self._meter = meter
        self._lock = threading.Lock()
        self._instruments: dict[str, RegisteredInstrument] = {}

    def register(
        self,
        name: str,
        unit: str,
        description: str,
        callback: SamplingCallback,
    ) -> RegisteredInstrument:
        """Create an instrument and install its sampling callback.

        No measurement is taken here; the callback first runs when the
        meter's collection scheduler invokes it.

        Raises:
            TypeError: ``callback`` is not callable.
            ValueError: An instrument with this name is already registered.
        """
        if not callable(callback):
            raise TypeError("callback must be callable")
        with self._lock:
            if name in self._instruments:
                raise ValueError(f"instrument {name!r} already registered")
            handle = self._meter.create_up_down_counter(name, unit, description)
            registered = RegisteredInstrument(
                Instrument(name=name, unit=unit, description=description), callback, self
            )
            handle.callback(registered)
            self._instruments[name] = registered
        logger.debug("Registered instrument %s", name, extra={"instrument": name})
        return registered

    def deregister(self, name: str) -> bool:
        """Stop the named instrument. Returns False if it was not registered."""
        with self._lock:
            registered = self._instruments.get(name)
        if registered is None:
            return False
        registered.close()
        return True

    def get(self, name: str) -> RegisteredInstrument | None:
        with self._lock:
            return self._instruments.get(name)

    def __contains__(self, name: object) -> bool:
        with self._lock:
            return name in self._instruments

    @property
    def instruments(self) -> tuple[Instrument, ...]:
        with self._lock:
            return tuple(r.instrument for r in self._instruments.values())

    def _forget(self, registered: RegisteredInstrument) -> None:
        with self._lock:
            if self._instruments.get(registered.name) is registered:
                del self._instruments[registered.name]
