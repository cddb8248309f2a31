"""Agent start-up: registers instrumentation modules and hooks imports."""

from collections.abc import Iterable
from dataclasses import dataclass

from agentweave.adapters.import_hooks import ImportHookInstaller
from agentweave.adapters.logging import DiagnosticsHandler
from agentweave.config import AgentConfig
from agentweave.core.agent import Agent
from agentweave.core.descriptors import InstrumentationModule
from agentweave.core.ports import LogStoragePort
from agentweave.diagnostics import capture_diagnostics


@dataclass
class RunningAgent:
    """Everything created by ``install``."""

    agent: Agent
    hooks: ImportHookInstaller
    diagnostics: LogStoragePort | None = None
    diagnostics_handler: DiagnosticsHandler | None = None


def install(
    modules: Iterable[InstrumentationModule],
    config: AgentConfig | None = None,
) -> RunningAgent:
    """Start weaving ``modules`` into classes as their modules are imported.

    Args:
        modules: Instrumentation modules, in the order their descriptors
            should apply.
        config: Agent configuration. Defaults to ``AgentConfig.from_env()``.

    Returns:
        RunningAgent with the agent, its import hooks, and the diagnostics
        storage when capture is enabled.
    """
    config = config or AgentConfig.from_env()
    handler, storage = capture_diagnostics() if config.capture_diagnostics else (None, None)
    agent = Agent(config)
    for module in modules:
        agent.register(module)
    hooks = ImportHookInstaller(agent)
    hooks.install()
    return RunningAgent(agent=agent, hooks=hooks, diagnostics=storage, diagnostics_handler=handler)
