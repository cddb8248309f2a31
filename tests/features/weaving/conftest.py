"""BDD step definitions for weaving features."""

from dataclasses import dataclass, field
from typing import Any

import pytest
from pytest_bdd import given, parsers, then, when

from agentweave.core.agent import Agent
from agentweave.core.weaver import WovenSite
from agentweave.instrumentation.lifecycle import RESTORE_VIEW_PHASE, restore_view_phase_module
from tests.helpers import FacesContext, make_class


class ScenarioNaming:
    """SpanNamingPort that records contexts, or fails when broken."""

    def __init__(self) -> None:
        self.contexts: list[Any] = []
        self.broken = False

    def update_span_name(self, context: Any) -> None:
        if self.broken:
            raise RuntimeError("no active span")
        self.contexts.append(context)


class PhaseError(Exception):
    pass


@dataclass
class WeavingScenarioContext:
    naming: ScenarioNaming = field(default_factory=ScenarioNaming)
    agent: Agent | None = None
    phase_class: type | None = None
    sites: tuple[WovenSite, ...] = ()
    result: Any = None
    error: BaseException | None = None


@pytest.fixture
def ctx() -> WeavingScenarioContext:
    """Fresh scenario context for each test."""
    return WeavingScenarioContext()


@given("an agent with the restore-view span naming module")
def step_agent(ctx: WeavingScenarioContext) -> None:
    ctx.agent = Agent()
    ctx.agent.register(restore_view_phase_module(ctx.naming))


@given("the span naming policy is broken")
def step_broken_naming(ctx: WeavingScenarioContext) -> None:
    ctx.naming.broken = True


@given("a restore-view phase class taking a FacesContext")
def step_phase_class(ctx: WeavingScenarioContext) -> None:
    def execute(self, context: FacesContext) -> str:
        return f"rendered {context.view_id}"

    ctx.phase_class = make_class(RESTORE_VIEW_PHASE, execute=execute)


@given("a restore-view phase class that fails")
def step_failing_phase_class(ctx: WeavingScenarioContext) -> None:
    def execute(self, context: FacesContext) -> str:
        raise PhaseError(context.view_id)

    ctx.phase_class = make_class(RESTORE_VIEW_PHASE, execute=execute)


@given("a restore-view phase class taking a string")
def step_string_phase_class(ctx: WeavingScenarioContext) -> None:
    def execute(self, context: str) -> str:
        return context

    ctx.phase_class = make_class(RESTORE_VIEW_PHASE, execute=execute)


@when("the class is loaded")
def step_load(ctx: WeavingScenarioContext) -> None:
    ctx.sites = ctx.agent.transform(ctx.phase_class)


@when(parsers.parse('the phase executes for view "{view_id}"'))
def step_execute(ctx: WeavingScenarioContext, view_id: str) -> None:
    try:
        ctx.result = ctx.phase_class().execute(FacesContext(view_id))
    except PhaseError as exc:
        ctx.error = exc


@then(parsers.parse('the phase returns "{expected}"'))
def step_returns(ctx: WeavingScenarioContext, expected: str) -> None:
    assert ctx.error is None
    assert ctx.result == expected


@then("the phase raises its own error")
def step_raises(ctx: WeavingScenarioContext) -> None:
    assert isinstance(ctx.error, PhaseError)


@then(parsers.parse('the span naming policy received the context for "{view_id}"'))
def step_named(ctx: WeavingScenarioContext, view_id: str) -> None:
    assert [c.view_id for c in ctx.naming.contexts] == [view_id]


@then(parsers.parse("{count:d} advice fault is recorded"))
def step_faults(ctx: WeavingScenarioContext, count: int) -> None:
    assert ctx.agent.weaver.guard.fault_count == count


@then("no method is woven")
def step_not_woven(ctx: WeavingScenarioContext) -> None:
    assert ctx.sites == ()
