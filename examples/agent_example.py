"""Weaving span naming into a lifecycle phase and sampling process memory.

Run with:
    python examples/agent_example.py
"""

import asyncio
import tracemalloc

from agentweave import (
    Agent,
    AgentConfig,
    InMemoryMeter,
    InMemoryMetricsStorage,
    MemoryUsage,
    capture_diagnostics,
    get_logger,
)
from agentweave.instrumentation.lifecycle import restore_view_phase_module
from agentweave.instrumentation.runtime_memory import StaticMemoryPool, register_observers

logger = get_logger("example")


class FacesContext:
    def __init__(self, view_id: str) -> None:
        self.view_id = view_id


class RestoreViewPhase:
    def execute(self, context: FacesContext) -> None:
        if context.view_id.endswith(".missing"):
            raise LookupError(context.view_id)


class PrintSpanNaming:
    def update_span_name(self, context: FacesContext) -> None:
        print(f"server span renamed to {context.view_id}")


class TracedMemory:
    """MemorySubsystemPort over tracemalloc; non-heap memory is not traced."""

    def heap_usage(self) -> MemoryUsage:
        current, peak = tracemalloc.get_traced_memory()
        return MemoryUsage(used=current, committed=peak)

    def non_heap_usage(self) -> MemoryUsage:
        return MemoryUsage()


async def main() -> None:
    _, diagnostics = capture_diagnostics()
    tracemalloc.start()

    agent = Agent(AgentConfig())
    agent.register(
        restore_view_phase_module(
            PrintSpanNaming(),
            type_name=f"{__name__}.RestoreViewPhase",
            context_type=f"{__name__}.FacesContext",
        )
    )
    agent.transform(RestoreViewPhase)

    phase = RestoreViewPhase()
    phase.execute(FacesContext("/index.xhtml"))
    try:
        phase.execute(FacesContext("/page.missing"))
    except LookupError:
        logger.info("phase failed as expected")

    meter = InMemoryMeter()
    pools = [StaticMemoryPool("interned", "non_heap", MemoryUsage(used=4096, max=-1))]
    register_observers(meter, pools, TracedMemory())

    storage = InMemoryMetricsStorage()
    for _ in range(3):
        await meter.collect_into(storage)
        await asyncio.sleep(0.1)

    async for sample in storage.scrape():
        print(sample.name, sample.labels, sample.value)
    print(f"{len(diagnostics.read_sync())} diagnostic entries captured")


if __name__ == "__main__":
    asyncio.run(main())
