"""agentweave: diagnostic weaving and metric sampling core of a runtime agent.

Selects classes and methods by structural matching, weaves guarded advice
into them, and registers observable instruments whose label sets are built
once and reused across collection cycles.
"""

from agentweave.adapters.import_hooks import ImportHookInstaller
from agentweave.adapters.logging import ContextProvider, DiagnosticsHandler
from agentweave.adapters.meters.in_memory import InMemoryMeter
from agentweave.adapters.storage import (
    InMemoryLogStorage,
    InMemoryMetricsStorage,
    RingBufferLogStorage,
    RingBufferMetricsStorage,
)
from agentweave.bootstrap import RunningAgent, install
from agentweave.config import AgentConfig
from agentweave.core.agent import Agent
from agentweave.core.attributes import AttributeCache
from agentweave.core.descriptors import InstrumentationModule, ModuleDescriptor
from agentweave.core.errors import (
    AdviceFault,
    AgentError,
    MatchEvaluationFault,
    SamplingFault,
)
from agentweave.core.guard import AdviceGuard, AdviceResult
from agentweave.core.matchers import ElementMatcher, any_of, named, not_, takes_argument
from agentweave.core.matching import matches, select
from agentweave.core.models import (
    UNAVAILABLE,
    AttributeSet,
    Instrument,
    LogEntry,
    MemoryUsage,
    MetricSample,
    Phase,
)
from agentweave.core.observables import (
    ObservableRegistry,
    RegisteredInstrument,
    dual_aggregate,
    list_sourced,
)
from agentweave.core.weaver import AdviceCall, Weaver, WovenSite
from agentweave.diagnostics import capture_diagnostics, get_logger, release_diagnostics

__version__ = "0.1.0"

__all__ = [
    "UNAVAILABLE",
    "AdviceCall",
    "AdviceFault",
    "AdviceGuard",
    "AdviceResult",
    "Agent",
    "AgentConfig",
    "AgentError",
    "AttributeCache",
    "AttributeSet",
    "ContextProvider",
    "DiagnosticsHandler",
    "ElementMatcher",
    "ImportHookInstaller",
    "InMemoryLogStorage",
    "InMemoryMeter",
    "InMemoryMetricsStorage",
    "Instrument",
    "InstrumentationModule",
    "LogEntry",
    "MatchEvaluationFault",
    "MemoryUsage",
    "MetricSample",
    "ModuleDescriptor",
    "ObservableRegistry",
    "Phase",
    "RegisteredInstrument",
    "RingBufferLogStorage",
    "RingBufferMetricsStorage",
    "RunningAgent",
    "SamplingFault",
    "Weaver",
    "WovenSite",
    "__version__",
    "any_of",
    "capture_diagnostics",
    "dual_aggregate",
    "get_logger",
    "install",
    "list_sourced",
    "matches",
    "named",
    "not_",
    "release_diagnostics",
    "select",
    "takes_argument",
]
