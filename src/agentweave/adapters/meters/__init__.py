"""Meter adapters implementing MeterPort.

The OpenTelemetry adapter lives in ``agentweave.adapters.meters.otel`` and is
imported explicitly, since it needs the optional ``otel`` extra.
"""

from agentweave.adapters.meters.in_memory import InMemoryInstrument, InMemoryMeter

__all__ = ["InMemoryInstrument", "InMemoryMeter"]
