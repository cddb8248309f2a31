"""Test helpers shared across unit, integration and feature tests."""

from typing import Any


def make_class(qualified_name: str, bases: tuple[type, ...] = (), **members: Any) -> type:
    """Create a class whose ``module.qualname`` is ``qualified_name``.

    Woven classes are mutated in place, so every test builds its own.
    """
    module, _, name = qualified_name.rpartition(".")
    namespace = {"__module__": module, "__qualname__": name, **members}
    return type(name, bases, namespace)


class FacesContext:
    """Request context handed to lifecycle phases in tests."""

    def __init__(self, view_id: str = "/index.xhtml") -> None:
        self.view_id = view_id

    def __repr__(self) -> str:
        return f"FacesContext({self.view_id!r})"


FacesContext.__module__ = "faces.context"
FacesContext.__qualname__ = "FacesContext"


class RecordingAdvice:
    """Advice recording every call it observes, optionally raising afterwards."""

    def __init__(self, fail_with: BaseException | None = None) -> None:
        self.calls: list[dict[str, Any]] = []
        self.fail_with = fail_with

    def __call__(self, call: Any) -> None:
        self.calls.append(
            {
                "phase": call.phase,
                "args": call.args,
                "result": call.result,
                "exception": call.exception,
            }
        )
        if self.fail_with is not None:
            raise self.fail_with


class RecordingSpanNaming:
    """SpanNamingPort recording the contexts it was asked to name."""

    def __init__(self) -> None:
        self.contexts: list[Any] = []

    def update_span_name(self, context: Any) -> None:
        self.contexts.append(context)
