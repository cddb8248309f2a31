"""Fault taxonomy for the weaving and sampling core.

Faults are recorded on the agent's diagnostics logger. None of them is ever
raised into instrumented application code.
"""


class AgentError(Exception):
    """Base class for faults originating inside the agent."""


class MatchEvaluationFault(AgentError):
    """A matcher raised while being evaluated against a target."""

    def __init__(self, descriptor: object, target: str, cause: BaseException) -> None:
        super().__init__(f"matcher of {descriptor!r} failed on {target}: {cause!r}")
        self.descriptor = descriptor
        self.target = target
        self.cause = cause


class AdviceFault(AgentError):
    """Advice raised while running inside a woven method."""

    def __init__(self, site: object, cause: BaseException) -> None:
        super().__init__(f"advice at {site} raised {cause!r}")
        self.site = site
        self.cause = cause


class SamplingFault(AgentError):
    """A data source raised or returned malformed data during a cycle."""

    def __init__(self, instrument: str, entity: object, cause: BaseException) -> None:
        super().__init__(f"sampling {instrument} for {entity!r} failed: {cause!r}")
        self.instrument = instrument
        self.entity = entity
        self.cause = cause
