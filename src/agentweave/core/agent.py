"""Registry of instrumentation modules and the per-class transform."""

import logging
import threading

from agentweave.config import AgentConfig
from agentweave.core.descriptors import InstrumentationModule, ModuleDescriptor
from agentweave.core.guard import AdviceGuard
from agentweave.core.matching import describe_type, select
from agentweave.core.weaver import Weaver, WovenSite

logger = logging.getLogger(__name__)


class Agent:
    """Holds registered descriptors and weaves them into loaded classes.

    ``transform`` is the entry point the host's load hook calls for every
    newly loaded class. Descriptors are evaluated in registration order and
    every match is applied.
    """

    def __init__(self, config: AgentConfig | None = None, weaver: Weaver | None = None) -> None:
        self.config = config or AgentConfig()
        self.weaver = weaver or Weaver(AdviceGuard(log_faults=self.config.log_advice_faults))
        self._lock = threading.Lock()
        self._modules: dict[str, InstrumentationModule] = {}
        self._descriptors: tuple[ModuleDescriptor, ...] = ()

    def register(self, module: InstrumentationModule) -> bool:
        """Register an instrumentation module.

        Returns:
            False when the module is disabled by configuration and was
            skipped, True otherwise.

        Raises:
            ValueError: A module with the same name is already registered.
        """
        if not self.config.is_module_enabled(module.name):
            logger.info("Instrumentation module %s disabled", module.name)
            return False
        with self._lock:
            if module.name in self._modules:
                raise ValueError(f"instrumentation module {module.name!r} already registered")
            self._modules[module.name] = module
            self._descriptors = self._descriptors + module.descriptors
        return True

    @property
    def descriptors(self) -> tuple[ModuleDescriptor, ...]:
        return self._descriptors

    @property
    def modules(self) -> tuple[InstrumentationModule, ...]:
        with self._lock:
            return tuple(self._modules.values())

    def module_hints(self) -> set[str]:
        """Modules whose import may produce a class matched by a descriptor."""
        return {
            d.type_matcher.module_hint for d in self._descriptors if d.type_matcher.module_hint
        }

    def transform(self, target: type) -> tuple[WovenSite, ...]:
        """Weave every matching descriptor into ``target``.

        A class no descriptor matches is left untouched. Failures while
        weaving one descriptor are logged and do not stop the others.
        """
        if not self.config.enabled:
            return ()
        sites: list[WovenSite] = []
        for descriptor in select(target, self._descriptors):
            try:
                sites.extend(self.weaver.weave(target, descriptor))
            except Exception:
                logger.warning(
                    "Weaving failed; class left as loaded",
                    exc_info=True,
                    extra={"descriptor": str(descriptor), "target": describe_type(target).name},
                )
        return tuple(sites)
