"""Server span naming at the exit of a view-lifecycle phase.

When the restore-view phase of a request finishes, successfully or not, the
view being served is known. The advice hands the phase's request context to
the span-naming policy, which renames the active server span after it.
"""

from agentweave.core.descriptors import InstrumentationModule, ModuleDescriptor
from agentweave.core.matchers import named, takes_argument
from agentweave.core.models import Phase
from agentweave.core.ports import SpanNamingPort
from agentweave.core.weaver import AdviceCall

RESTORE_VIEW_PHASE = "faces.lifecycle.RestoreViewPhase"
FACES_CONTEXT = "faces.context.FacesContext"
MODULE_NAME = "faces-lifecycle"


class UpdateSpanNameAdvice:
    """Exit advice passing argument 0, the request context, to the naming policy."""

    def __init__(self, span_naming: SpanNamingPort) -> None:
        self.span_naming = span_naming

    def __call__(self, call: AdviceCall) -> None:
        self.span_naming.update_span_name(call.argument(0))

    def __repr__(self) -> str:
        return f"UpdateSpanNameAdvice({self.span_naming!r})"


def restore_view_phase_descriptor(
    span_naming: SpanNamingPort,
    type_name: str = RESTORE_VIEW_PHASE,
    context_type: str = FACES_CONTEXT,
    method_name: str = "execute",
) -> ModuleDescriptor:
    """Describe the ``execute(context)`` method of a lifecycle phase class.

    Args:
        span_naming: Policy invoked with the request context on exit.
        type_name: Fully-qualified name of the phase class.
        context_type: Fully-qualified type of the method's first parameter.
        method_name: Name of the phase method.
    """
    return ModuleDescriptor(
        type_matcher=named(type_name),
        method_matcher=named(method_name) & takes_argument(0, named(context_type)),
        advice=UpdateSpanNameAdvice(span_naming),
        phase=Phase.ON_EXIT_INCLUDING_FAILURE,
        name=f"{type_name}.{method_name}",
    )


def restore_view_phase_module(
    span_naming: SpanNamingPort,
    type_name: str = RESTORE_VIEW_PHASE,
    context_type: str = FACES_CONTEXT,
) -> InstrumentationModule:
    return InstrumentationModule.of(
        MODULE_NAME,
        [restore_view_phase_descriptor(span_naming, type_name, context_type)],
    )
