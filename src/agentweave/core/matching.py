"""Evaluation of descriptors against loaded classes."""

import inspect
import logging
import typing
from collections.abc import Iterable, Iterator
from typing import Any

from agentweave.core.descriptors import ModuleDescriptor
from agentweave.core.errors import MatchEvaluationFault
from agentweave.core.models import MethodDescription, MethodKind, TypeDescription

logger = logging.getLogger(__name__)

_SKIPPED_PARAMETER_KINDS = (
    inspect.Parameter.VAR_POSITIONAL,
    inspect.Parameter.VAR_KEYWORD,
)


def declared_parameters(signature: inspect.Signature) -> list[inspect.Parameter]:
    """Return the parameters numbered by ``takes_argument``; variadics are skipped."""
    return [p for p in signature.parameters.values() if p.kind not in _SKIPPED_PARAMETER_KINDS]


def type_name(annotation: Any) -> str | None:
    """Return the fully-qualified name of a parameter annotation.

    Builtins keep their bare name (``str``), strings that could not be
    resolved are kept verbatim, and unannotated parameters yield None.
    """
    if annotation is inspect.Parameter.empty:
        return None
    if isinstance(annotation, str):
        return annotation
    if isinstance(annotation, type):
        if annotation.__module__ == "builtins":
            return annotation.__qualname__
        return f"{annotation.__module__}.{annotation.__qualname__}"
    return repr(annotation)


def describe_type(target: type | TypeDescription) -> TypeDescription:
    if isinstance(target, TypeDescription):
        return target
    return TypeDescription(name=f"{target.__module__}.{target.__qualname__}")


def describe_method(name: str, attribute: Any) -> MethodDescription | None:
    """Describe a class attribute as a method, or return None if it is not one."""
    if isinstance(attribute, staticmethod):
        func, kind = attribute.__func__, MethodKind.STATIC
    elif isinstance(attribute, classmethod):
        func, kind = attribute.__func__, MethodKind.CLASS
    elif inspect.isfunction(attribute):
        func, kind = attribute, MethodKind.INSTANCE
    else:
        return None

    try:
        signature = inspect.signature(func)
    except (TypeError, ValueError):
        return None
    try:
        hints = typing.get_type_hints(func)
    except Exception:
        # Unresolvable forward references; fall back to the raw annotations.
        hints = {}

    parameters = declared_parameters(signature)
    if kind is not MethodKind.STATIC and parameters:
        parameters = parameters[1:]
    parameter_types = tuple(type_name(hints.get(p.name, p.annotation)) for p in parameters)
    return MethodDescription(name=name, parameter_types=parameter_types, kind=kind)


def declared_methods(target: type) -> Iterator[tuple[str, Any, MethodDescription]]:
    """Yield ``(name, attribute, description)`` for methods declared on ``target``.

    Inherited methods are not included; they belong to the class declaring
    them.
    """
    for name, attribute in list(vars(target).items()):
        description = describe_method(name, attribute)
        if description is not None:
            yield name, attribute, description


def matches(target: type | TypeDescription, descriptor: ModuleDescriptor) -> bool:
    """Test a class against a descriptor's type matcher.

    Raises:
        MatchEvaluationFault: The matcher itself raised.
    """
    description = describe_type(target)
    try:
        return descriptor.type_matcher.matches(description)
    except Exception as exc:
        raise MatchEvaluationFault(descriptor, description.name, exc) from exc


def select(
    target: type | TypeDescription, descriptors: Iterable[ModuleDescriptor]
) -> list[ModuleDescriptor]:
    """Return every descriptor matching ``target``, in registration order.

    A descriptor whose matcher raises is logged and treated as not matching;
    the remaining descriptors are still evaluated.
    """
    selected = []
    for descriptor in descriptors:
        try:
            if matches(target, descriptor):
                selected.append(descriptor)
        except MatchEvaluationFault as fault:
            logger.warning(
                "Type matcher failed; skipping descriptor",
                exc_info=fault,
                extra={"descriptor": str(descriptor), "target": fault.target},
            )
    return selected


def select_methods(
    target: type, descriptor: ModuleDescriptor
) -> list[tuple[str, Any, MethodDescription]]:
    """Return the declared methods of ``target`` selected by ``descriptor``."""
    selected = []
    for name, attribute, description in declared_methods(target):
        try:
            if descriptor.method_matcher.matches(description):
                selected.append((name, attribute, description))
        except Exception as exc:
            fault = MatchEvaluationFault(descriptor, f"{describe_type(target).name}.{name}", exc)
            logger.warning(
                "Method matcher failed; skipping method",
                exc_info=fault,
                extra={"descriptor": str(descriptor), "target": fault.target},
            )
    return selected
