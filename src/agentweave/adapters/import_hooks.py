"""Post-import hook adapter: weaves classes as their modules are imported.

Python has no class-load event; a module's classes are created while the
module body executes. ``wrapt``'s post-import hooks run right after that,
before the importing code gets the module back, which is the point at which
the agent transforms every class the module declares.
"""

import logging
import threading
from collections.abc import Iterator
from types import ModuleType

import wrapt

from agentweave.core.agent import Agent
from agentweave.core.weaver import WovenSite

logger = logging.getLogger(__name__)


def declared_classes(module: ModuleType) -> Iterator[type]:
    """Yield classes defined in ``module``, nested classes included.

    Classes merely imported into the module are skipped.
    """
    seen: set[int] = set()
    pending = [value for value in list(vars(module).values()) if isinstance(value, type)]
    while pending:
        cls = pending.pop(0)
        if id(cls) in seen or cls.__module__ != module.__name__:
            continue
        seen.add(id(cls))
        yield cls
        pending.extend(value for value in list(vars(cls).values()) if isinstance(value, type))


class ImportHookInstaller:
    """Registers post-import hooks for the modules an agent targets.

    Hooks are permanent once registered. Installing again only adds hooks
    for module hints that appeared since the last call. For modules already
    imported, wrapt runs the hook immediately.

    Example:
        ```python
        agent = Agent()
        agent.register(restore_view_phase_module(naming))
        ImportHookInstaller(agent).install()
        ```
    """

    def __init__(self, agent: Agent) -> None:
        self._agent = agent
        self._lock = threading.Lock()
        self._hooked: set[str] = set()
        self._sites: list[WovenSite] = []

    @property
    def hooked_modules(self) -> frozenset[str]:
        with self._lock:
            return frozenset(self._hooked)

    @property
    def woven_sites(self) -> tuple[WovenSite, ...]:
        with self._lock:
            return tuple(self._sites)

    def install(self) -> frozenset[str]:
        """Register hooks for every module hint of the agent's descriptors.

        Returns:
            Names of the modules newly hooked by this call.
        """
        if not self._agent.config.enabled:
            return frozenset()
        with self._lock:
            new = self._agent.module_hints() - self._hooked
            self._hooked |= new
        for module_name in sorted(new):
            wrapt.register_post_import_hook(self.on_import, module_name)
            logger.debug("Post-import hook registered for %s", module_name)
        return frozenset(new)

    def on_import(self, module: ModuleType) -> None:
        """Transform every class of a freshly imported module.

        Never raises: a failure is logged and the import proceeds with the
        module as loaded.
        """
        try:
            for cls in declared_classes(module):
                sites = self._agent.transform(cls)
                if sites:
                    with self._lock:
                        self._sites.extend(sites)
        except Exception:
            logger.warning(
                "Post-import transform failed",
                exc_info=True,
                extra={"target": getattr(module, "__name__", "?")},
            )
