"""OpenTelemetry meter adapter.

Bridges MeterPort onto an OpenTelemetry ``Meter``: each instrument name maps
to one observable up-down counter whose callback runs the agent's current
sampling function and returns the recorded observations. Requires the
``otel`` extra.
"""

import threading
from collections.abc import Iterable, Mapping

from opentelemetry import metrics
from opentelemetry.metrics import CallbackOptions, Meter, MeterProvider, Observation

from agentweave.core.ports import SamplingCallback

DEFAULT_METER_NAME = "agentweave.runtime-metrics"


class _ObservationBuffer:
    """ObservableMeasurement collecting OpenTelemetry observations."""

    __slots__ = ("observations",)

    def __init__(self) -> None:
        self.observations: list[Observation] = []

    def record(self, value: float, attributes: Mapping[str, str]) -> None:
        self.observations.append(Observation(value, dict(attributes)))


class OpenTelemetryInstrument:
    """InstrumentHandle for one named observable counter.

    OpenTelemetry cannot unregister an observable instrument, so the counter
    is created once per name and reads its sampling function from a slot.
    Installing a callback replaces whatever the slot held before, which lets
    a name be registered again after the previous registration was closed.
    """

    def __init__(self, meter: Meter, name: str, unit: str, description: str) -> None:
        self.name = name
        self.unit = unit
        self.description = description
        self._sampling_fn: SamplingCallback | None = None
        meter.create_observable_up_down_counter(
            name=name,
            callbacks=[self._observe],
            unit=unit,
            description=description,
        )

    def callback(self, sampling_fn: SamplingCallback) -> None:
        self._sampling_fn = sampling_fn

    def _observe(self, options: CallbackOptions) -> Iterable[Observation]:
        sampling_fn = self._sampling_fn
        if sampling_fn is None:
            return []
        buffer = _ObservationBuffer()
        sampling_fn(buffer)
        return buffer.observations


class OpenTelemetryMeter:
    """MeterPort implementation backed by the OpenTelemetry metrics API."""

    def __init__(self, meter: Meter | None = None, name: str = DEFAULT_METER_NAME) -> None:
        self._meter = meter if meter is not None else metrics.get_meter(name)
        self._lock = threading.Lock()
        self._instruments: dict[str, OpenTelemetryInstrument] = {}

    @classmethod
    def from_provider(
        cls, provider: MeterProvider, name: str = DEFAULT_METER_NAME
    ) -> "OpenTelemetryMeter":
        return cls(provider.get_meter(name))

    def create_up_down_counter(
        self, name: str, unit: str, description: str
    ) -> OpenTelemetryInstrument:
        """Return the counter for ``name``, creating it on first use.

        A name seen before keeps the unit and description it was first
        created with.
        """
        with self._lock:
            instrument = self._instruments.get(name)
            if instrument is None:
                instrument = OpenTelemetryInstrument(self._meter, name, unit, description)
                self._instruments[name] = instrument
            return instrument
