"""Weaving advice into the methods of loaded classes.

A matched method is replaced on its class by a ``wrapt.FunctionWrapper``
around the original. The wrapper keeps the original's name, docstring,
signature and descriptor kind (instance, class or static method), runs the
advice at the descriptor's phase through an ``AdviceGuard``, and hands the
host's own return value or exception back unchanged.
"""

import inspect
import logging
import threading
from collections.abc import Mapping
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any
from weakref import WeakKeyDictionary

import wrapt

from agentweave.core.descriptors import ModuleDescriptor
from agentweave.core.guard import AdviceGuard
from agentweave.core.matching import declared_parameters, describe_type, select_methods
from agentweave.core.models import MethodDescription, MethodKind, Phase

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class WovenSite:
    """Binding of one method of a loaded class to the advice woven into it."""

    target_name: str
    method_name: str
    descriptor: ModuleDescriptor

    @property
    def phase(self) -> Phase:
        return self.descriptor.phase

    def __str__(self) -> str:
        return f"{self.target_name}.{self.method_name}"


class AdviceCall:
    """Read-only view of one host invocation, handed to advice.

    Attributes:
        site: The woven site being executed.
        instance: Receiver of the call (the instance, or the class for class
            methods); None for static methods.
        args: Positional arguments as passed by the caller.
        kwargs: Keyword arguments as passed by the caller (read-only copy).
        result: Return value, on exit after a normal return.
        exception: Escaping exception, on exit after a failure.
    """

    __slots__ = (
        "site",
        "instance",
        "args",
        "kwargs",
        "result",
        "exception",
        "_signature",
        "_arguments",
    )

    def __init__(
        self,
        site: WovenSite,
        signature: inspect.Signature,
        instance: Any,
        args: tuple[Any, ...],
        kwargs: Mapping[str, Any],
        result: Any = None,
        exception: BaseException | None = None,
    ) -> None:
        self.site = site
        self.instance = instance
        self.args = args
        self.kwargs = MappingProxyType(dict(kwargs))
        self.result = result
        self.exception = exception
        self._signature = signature
        self._arguments: Mapping[str, Any] | None = None

    @property
    def phase(self) -> Phase:
        return self.site.phase

    @property
    def arguments(self) -> Mapping[str, Any]:
        """Declared parameters bound to their values, defaults applied."""
        if self._arguments is None:
            bound = self._signature.bind(*self.args, **self.kwargs)
            bound.apply_defaults()
            self._arguments = MappingProxyType(dict(bound.arguments))
        return self._arguments

    def argument(self, index: int) -> Any:
        """Return the value of the declared parameter at ``index``.

        Numbered like ``takes_argument``: *args and **kwargs are not counted.
        """
        name = declared_parameters(self._signature)[index].name
        return self.arguments[name]


def _receiverless_signature(attribute: Any, kind: MethodKind) -> inspect.Signature:
    func = attribute if kind is MethodKind.INSTANCE else attribute.__func__
    signature = inspect.signature(func)
    parameters = list(signature.parameters.values())
    if kind is not MethodKind.STATIC and parameters:
        parameters = parameters[1:]
    return signature.replace(parameters=parameters)


class Weaver:
    """Applies descriptors to classes, once per (class, descriptor) pair.

    Woven pairs are remembered in a weak mapping so that classes are never
    kept alive by the weaver, and weaving the same pair again returns the
    existing sites without injecting twice.
    """

    def __init__(self, guard: AdviceGuard | None = None) -> None:
        self.guard = guard or AdviceGuard()
        self._lock = threading.Lock()
        self._woven: WeakKeyDictionary[type, dict[ModuleDescriptor, tuple[WovenSite, ...]]] = (
            WeakKeyDictionary()
        )

    def weave(self, target: type, descriptor: ModuleDescriptor) -> tuple[WovenSite, ...]:
        """Weave ``descriptor``'s advice into the matching methods of ``target``.

        Args:
            target: A class whose type already matched the descriptor.
            descriptor: What to weave and at which phase.

        Returns:
            The woven sites, one per selected method. Empty when no declared
            method satisfies the method matcher.
        """
        with self._lock:
            per_target = self._woven.get(target)
            if per_target is not None and descriptor in per_target:
                return per_target[descriptor]

            target_name = describe_type(target).name
            sites: list[WovenSite] = []
            try:
                for name, attribute, description in select_methods(target, descriptor):
                    site = WovenSite(
                        target_name=target_name, method_name=name, descriptor=descriptor
                    )
                    setattr(target, name, self._wrap(attribute, description, site))
                    sites.append(site)
            finally:
                # Methods already replaced count as woven even if a later one failed.
                self._woven.setdefault(target, {})[descriptor] = tuple(sites)

            woven = tuple(sites)
            logger.debug(
                "Woven %d method(s) into %s",
                len(woven),
                target_name,
                extra={"descriptor": str(descriptor), "target": target_name},
            )
            return woven

    def woven_sites(self, target: type) -> tuple[WovenSite, ...]:
        """Return every site woven into ``target`` so far."""
        with self._lock:
            per_target = self._woven.get(target, {})
            return tuple(site for sites in per_target.values() for site in sites)

    def _wrap(self, attribute: Any, description: MethodDescription, site: WovenSite) -> Any:
        signature = _receiverless_signature(attribute, description.kind)
        guard = self.guard
        advice = site.descriptor.advice
        phase = site.descriptor.phase

        def wrapper(
            wrapped: Any, instance: Any, args: tuple[Any, ...], kwargs: dict[str, Any]
        ) -> Any:
            if phase is Phase.ON_ENTRY:
                guard.invoke(advice, AdviceCall(site, signature, instance, args, kwargs))
                return wrapped(*args, **kwargs)
            try:
                result = wrapped(*args, **kwargs)
            except BaseException as exc:
                if phase is Phase.ON_EXIT_INCLUDING_FAILURE:
                    guard.invoke(
                        advice, AdviceCall(site, signature, instance, args, kwargs, exception=exc)
                    )
                raise
            guard.invoke(advice, AdviceCall(site, signature, instance, args, kwargs, result=result))
            return result

        return wrapt.FunctionWrapper(attribute, wrapper)
