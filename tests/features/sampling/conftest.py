"""BDD step definitions for sampling features."""

from dataclasses import dataclass, field

import pytest
from pytest_bdd import given, parsers, then, when

from agentweave.adapters.meters.in_memory import InMemoryMeter
from agentweave.core.models import MemoryUsage, MetricSample
from agentweave.core.observables import ObservableRegistry
from agentweave.instrumentation.runtime_memory import (
    StaticMemoryPool,
    StaticMemorySubsystem,
    register_observers,
)


@dataclass
class SamplingScenarioContext:
    meter: InMemoryMeter = field(default_factory=InMemoryMeter)
    pools: list[StaticMemoryPool] = field(default_factory=list)
    memory: StaticMemorySubsystem = field(default_factory=StaticMemorySubsystem)
    registry: ObservableRegistry | None = None
    samples: list[MetricSample] = field(default_factory=list)


@pytest.fixture
def ctx() -> SamplingScenarioContext:
    """Fresh scenario context for each test."""
    return SamplingScenarioContext()


def _named(ctx: SamplingScenarioContext, name: str) -> list[MetricSample]:
    return [s for s in ctx.samples if s.name == name]


@given("memory pools:")
def step_pools(ctx: SamplingScenarioContext, datatable: list[list[str]]) -> None:
    header, *rows = datatable
    for row in rows:
        values = dict(zip(header, row))
        ctx.pools.append(
            StaticMemoryPool(values["pool"], values["type"], MemoryUsage(used=int(values["used"])))
        )


@given(parsers.parse("heap usage {heap:d} and non-heap usage {non_heap:d}"))
def step_aggregates(ctx: SamplingScenarioContext, heap: int, non_heap: int) -> None:
    ctx.memory = StaticMemorySubsystem(
        heap=MemoryUsage(used=heap), non_heap=MemoryUsage(used=non_heap)
    )


@given("the runtime memory observers are registered")
def step_register(ctx: SamplingScenarioContext) -> None:
    ctx.registry = ObservableRegistry(ctx.meter)
    register_observers(ctx.registry, ctx.pools, ctx.memory)


@when(parsers.parse('"{name}" is deregistered'))
def step_deregister(ctx: SamplingScenarioContext, name: str) -> None:
    assert ctx.registry.deregister(name)


@when("a collection cycle runs")
def step_collect(ctx: SamplingScenarioContext) -> None:
    ctx.samples = ctx.meter.collect()


@then(parsers.parse('"{name}" has {count:d} measurements'))
def step_count(ctx: SamplingScenarioContext, name: str, count: int) -> None:
    assert len(_named(ctx, name)) == count


@then(parsers.parse('"{name}" for {key} "{label}" is {value:d}'))
def step_value(ctx: SamplingScenarioContext, name: str, key: str, label: str, value: int) -> None:
    (sample,) = [s for s in _named(ctx, name) if s.labels.get(key) == label]
    assert sample.value == value
