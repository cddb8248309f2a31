"""Instrumentation modules built on the weaving and observable core."""

from agentweave.instrumentation.lifecycle import (
    UpdateSpanNameAdvice,
    restore_view_phase_descriptor,
    restore_view_phase_module,
)
from agentweave.instrumentation.runtime_memory import (
    StaticMemoryPool,
    StaticMemorySubsystem,
    register_observers,
)

__all__ = [
    "StaticMemoryPool",
    "StaticMemorySubsystem",
    "UpdateSpanNameAdvice",
    "register_observers",
    "restore_view_phase_descriptor",
    "restore_view_phase_module",
]
