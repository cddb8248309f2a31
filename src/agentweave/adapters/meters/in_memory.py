"""In-memory meter adapter.

Implements MeterPort without any metrics SDK. ``collect()`` plays the part of
the collection scheduler: it runs every installed callback once and returns
the recorded measurements as ``MetricSample`` objects.
"""

import logging
import threading
import time
from collections.abc import Mapping

from agentweave.core.models import Instrument, MetricSample
from agentweave.core.ports import MetricsStoragePort, SamplingCallback

logger = logging.getLogger(__name__)


class _SampleRecorder:
    """ObservableMeasurement collecting one instrument's cycle."""

    def __init__(self, name: str, timestamp: float) -> None:
        self._name = name
        self._timestamp = timestamp
        self.samples: list[MetricSample] = []

    def record(self, value: float, attributes: Mapping[str, str]) -> None:
        self.samples.append(
            MetricSample(
                name=self._name,
                timestamp=self._timestamp,
                value=float(value),
                labels=dict(attributes),
            )
        )


class InMemoryInstrument:
    """InstrumentHandle holding the callbacks of one instrument."""

    def __init__(self, instrument: Instrument) -> None:
        self.instrument = instrument
        self._callbacks: list[SamplingCallback] = []

    @property
    def callbacks(self) -> tuple[SamplingCallback, ...]:
        return tuple(self._callbacks)

    def callback(self, sampling_fn: SamplingCallback) -> None:
        self._callbacks.append(sampling_fn)


class InMemoryMeter:
    """MeterPort implementation collecting on demand."""

    def __init__(self) -> None:
        self._instruments: list[InMemoryInstrument] = []
        self._lock = threading.Lock()

    def create_up_down_counter(self, name: str, unit: str, description: str) -> InMemoryInstrument:
        handle = InMemoryInstrument(Instrument(name=name, unit=unit, description=description))
        with self._lock:
            self._instruments.append(handle)
        return handle

    @property
    def instruments(self) -> tuple[Instrument, ...]:
        with self._lock:
            return tuple(h.instrument for h in self._instruments)

    def collect(self) -> list[MetricSample]:
        """Run one collection cycle over every instrument.

        A callback that raises loses the rest of its own cycle only; what it
        recorded before raising is kept and other instruments still run.

        Returns:
            Samples recorded during this cycle, in registration order.
        """
        timestamp = time.time()
        with self._lock:
            handles = list(self._instruments)
        samples: list[MetricSample] = []
        for handle in handles:
            for sampling_fn in handle.callbacks:
                recorder = _SampleRecorder(handle.instrument.name, timestamp)
                try:
                    sampling_fn(recorder)
                except Exception:
                    logger.warning(
                        "Collection callback raised",
                        exc_info=True,
                        extra={"instrument": handle.instrument.name},
                    )
                samples.extend(recorder.samples)
        return samples

    async def collect_into(self, storage: MetricsStoragePort) -> int:
        """Run one collection cycle and write its samples to ``storage``.

        Returns:
            Number of samples written.
        """
        samples = self.collect()
        for sample in samples:
            await storage.write(sample)
        return len(samples)
