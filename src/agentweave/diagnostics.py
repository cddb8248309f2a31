"""Wiring of the agent's internal diagnostics channel."""

import logging

from agentweave.adapters.logging import DiagnosticsHandler
from agentweave.adapters.storage.ring_buffer import RingBufferLogStorage
from agentweave.core.ports import LogStoragePort

AGENT_LOGGER = "agentweave"

# Level of the agent logger before each capture, restored on release.
_levels_before_capture: dict[DiagnosticsHandler, int] = {}


def get_logger(name: str | None = None) -> logging.Logger:
    """Return the agent logger, or a child of it."""
    if name is None or name == AGENT_LOGGER:
        return logging.getLogger(AGENT_LOGGER)
    if name.startswith(AGENT_LOGGER + "."):
        return logging.getLogger(name)
    return logging.getLogger(f"{AGENT_LOGGER}.{name}")


def capture_diagnostics(
    storage: LogStoragePort | None = None,
    level: int = logging.WARNING,
    max_size: int = 1000,
) -> tuple[DiagnosticsHandler, LogStoragePort]:
    """Attach a DiagnosticsHandler to the agent logger.

    Agent records are kept out of the application's root logger.

    Args:
        storage: Where to store entries. Defaults to a ring buffer of
            ``max_size`` entries.
        level: Minimum level captured.
        max_size: Capacity of the default ring buffer.

    Returns:
        The installed handler and its storage.
    """
    if storage is None:
        storage = RingBufferLogStorage(max_size=max_size)
    handler = DiagnosticsHandler(storage)
    handler.setLevel(level)
    agent_logger = get_logger()
    _levels_before_capture[handler] = agent_logger.level
    agent_logger.addHandler(handler)
    if agent_logger.level == logging.NOTSET or agent_logger.level > level:
        agent_logger.setLevel(level)
    agent_logger.propagate = False
    return handler, storage


def release_diagnostics(handler: DiagnosticsHandler) -> None:
    """Detach a handler installed by ``capture_diagnostics``.

    The agent logger gets back the level it had before that capture.
    """
    agent_logger = get_logger()
    agent_logger.removeHandler(handler)
    previous_level = _levels_before_capture.pop(handler, None)
    if previous_level is not None:
        agent_logger.setLevel(previous_level)
    if not agent_logger.handlers:
        agent_logger.propagate = True
