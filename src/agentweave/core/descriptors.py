"""Instrumentation descriptors binding matchers to advice."""

from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from agentweave.core.matchers import ElementMatcher
from agentweave.core.models import Phase

if TYPE_CHECKING:
    from agentweave.core.weaver import AdviceCall

Advice = Callable[["AdviceCall"], object]


@dataclass(frozen=True)
class ModuleDescriptor:
    """Where and when a piece of advice is woven.

    The method matcher is a single conjunction: a method is selected only
    when every part of it (name, argument shape) holds.

    Attributes:
        type_matcher: Selects the class to weave into.
        method_matcher: Selects the declared methods of that class.
        advice: Callable receiving an ``AdviceCall``. Its return value is
            ignored.
        phase: When the advice runs relative to the method body.
        name: Optional label used in diagnostics.
    """

    type_matcher: ElementMatcher
    method_matcher: ElementMatcher
    advice: Advice
    phase: Phase = Phase.ON_EXIT
    name: str = ""

    def __post_init__(self) -> None:
        if not callable(self.advice):
            raise TypeError("advice must be callable")
        if not isinstance(self.phase, Phase):
            raise TypeError(f"phase must be a Phase, got {self.phase!r}")

    def __str__(self) -> str:
        return self.name or f"{self.type_matcher!r}/{self.method_matcher!r}"


@dataclass(frozen=True)
class InstrumentationModule:
    """A named group of descriptors enabled or disabled together."""

    name: str
    descriptors: tuple[ModuleDescriptor, ...] = field(default_factory=tuple)

    @classmethod
    def of(cls, name: str, descriptors: Iterable[ModuleDescriptor]) -> "InstrumentationModule":
        return cls(name=name, descriptors=tuple(descriptors))
