"""Shared test fixtures for all test modules."""

import logging
from collections.abc import Callable, Iterator
from typing import Any

import pytest

from agentweave.adapters.logging import DiagnosticsHandler
from agentweave.adapters.meters.in_memory import InMemoryMeter
from agentweave.adapters.storage.in_memory import InMemoryLogStorage
from agentweave.core.descriptors import ModuleDescriptor
from agentweave.core.matchers import named, takes_argument
from agentweave.core.models import Phase
from agentweave.core.weaver import Weaver
from tests.helpers import RecordingAdvice


@pytest.fixture
def weaver() -> Weaver:
    return Weaver()


@pytest.fixture
def meter() -> InMemoryMeter:
    return InMemoryMeter()


@pytest.fixture
def recording_advice() -> RecordingAdvice:
    return RecordingAdvice()


@pytest.fixture
def execute_descriptor() -> Callable[..., ModuleDescriptor]:
    """Factory for a descriptor matching ``shop.Phase.execute(FacesContext)``.

    Usage:
        def test_something(execute_descriptor, recording_advice):
            descriptor = execute_descriptor(recording_advice, Phase.ON_EXIT)
    """

    def _descriptor(
        advice: Any, phase: Phase = Phase.ON_EXIT_INCLUDING_FAILURE
    ) -> ModuleDescriptor:
        return ModuleDescriptor(
            type_matcher=named("shop.Phase"),
            method_matcher=named("execute")
            & takes_argument(0, named("faces.context.FacesContext")),
            advice=advice,
            phase=phase,
        )

    return _descriptor


@pytest.fixture
def diagnostics() -> Iterator[InMemoryLogStorage]:
    """Capture records of the agent logger into an in-memory storage."""
    storage = InMemoryLogStorage()
    handler = DiagnosticsHandler(storage)
    agent_logger = logging.getLogger("agentweave")
    previous_level = agent_logger.level
    agent_logger.addHandler(handler)
    agent_logger.setLevel(logging.DEBUG)
    try:
        yield storage
    finally:
        agent_logger.removeHandler(handler)
        agent_logger.setLevel(previous_level)
