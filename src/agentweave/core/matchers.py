"""Structural matchers selecting classes and methods.

Matchers are immutable and side-effect free. They test a description object
(``TypeDescription`` or ``MethodDescription``) and compose with ``&``, ``|``
and ``not_()``::

    type_matcher = named("shop.lifecycle.RestoreViewPhase")
    method_matcher = named("execute") & takes_argument(0, named("shop.Context"))
"""

from collections.abc import Callable
from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class ElementMatcher:
    """A named predicate over a description object.

    Attributes:
        test: Pure function returning True when the description matches.
        label: Human readable form used in logs and reprs.
        module_hint: Module that must be imported before a matching class
            can exist, when the matcher can tell. Used by the import hook.
    """

    test: Callable[[Any], bool]
    label: str
    module_hint: str | None = None

    def matches(self, description: Any) -> bool:
        return bool(self.test(description))

    def __call__(self, description: Any) -> bool:
        return self.matches(description)

    def __and__(self, other: "ElementMatcher") -> "ElementMatcher":
        return ElementMatcher(
            test=lambda d: self.test(d) and other.test(d),
            label=f"({self.label} and {other.label})",
            module_hint=self.module_hint or other.module_hint,
        )

    def __or__(self, other: "ElementMatcher") -> "ElementMatcher":
        hint = self.module_hint if self.module_hint == other.module_hint else None
        return ElementMatcher(
            test=lambda d: self.test(d) or other.test(d),
            label=f"({self.label} or {other.label})",
            module_hint=hint,
        )

    def __repr__(self) -> str:
        return self.label


def named(name: str, module: str | None = None) -> ElementMatcher:
    """Match a description whose ``name`` equals ``name`` exactly.

    Args:
        name: Expected name. For classes, the fully-qualified
            ``module.qualname``; for methods, the bare method name.
        module: Module declaring the class, when the qualname is nested and
            the module cannot be derived by stripping the last component.

    Returns:
        ElementMatcher performing an exact, wildcard-free comparison.
    """
    hint = module if module is not None else (name.rpartition(".")[0] or None)
    return ElementMatcher(
        test=lambda d: getattr(d, "name", None) == name,
        label=f"named({name!r})",
        module_hint=hint,
    )


def takes_argument(index: int, type_matcher: ElementMatcher) -> ElementMatcher:
    """Match a method whose parameter at ``index`` has a matching type.

    The receiver (``self`` or ``cls``) is not counted. Unannotated
    parameters never match.
    """
    if index < 0:
        raise ValueError("argument index must be non-negative")

    def test(description: Any) -> bool:
        parameter_types = getattr(description, "parameter_types", ())
        if index >= len(parameter_types) or parameter_types[index] is None:
            return False
        return type_matcher.matches(_TypeName(parameter_types[index]))

    return ElementMatcher(test=test, label=f"takes_argument({index}, {type_matcher!r})")


def takes_arguments(count: int) -> ElementMatcher:
    """Match a method declaring exactly ``count`` parameters."""
    return ElementMatcher(
        test=lambda d: len(getattr(d, "parameter_types", ())) == count,
        label=f"takes_arguments({count})",
    )


def any_of(*matchers: ElementMatcher) -> ElementMatcher:
    if not matchers:
        raise ValueError("any_of() needs at least one matcher")
    combined = matchers[0]
    for matcher in matchers[1:]:
        combined = combined | matcher
    return combined


def not_(matcher: ElementMatcher) -> ElementMatcher:
    return ElementMatcher(
        test=lambda d: not matcher.test(d),
        label=f"not_({matcher.label})",
    )


@dataclass(frozen=True)
class _TypeName:
    name: str
