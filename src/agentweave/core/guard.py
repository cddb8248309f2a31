"""Fail-safe execution of woven advice.

Advice observes a host method; it never influences it. Every invocation goes
through ``AdviceGuard.invoke``, which turns anything the advice raises into
an ``AdviceResult`` carrying the fault, reports it on the diagnostics logger
and returns normally.
"""

import logging
import threading
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from contextvars import ContextVar
from dataclasses import dataclass
from typing import Any

from agentweave.core.errors import AdviceFault

logger = logging.getLogger(__name__)

# Set while advice runs on the current thread or task; woven methods called
# from inside advice skip their own advice.
_inside_advice: ContextVar[bool] = ContextVar("agentweave_inside_advice", default=False)


@dataclass(frozen=True)
class AdviceResult:
    """Outcome of one guarded advice invocation."""

    value: Any = None
    error: AdviceFault | None = None
    skipped: bool = False

    @property
    def ok(self) -> bool:
        return self.error is None


def inside_advice() -> bool:
    """Return True when called from advice running on this context."""
    return _inside_advice.get()


@contextmanager
def _advice_scope() -> Iterator[None]:
    token = _inside_advice.set(True)
    try:
        yield
    finally:
        _inside_advice.reset(token)


class AdviceGuard:
    """Runs advice so that its faults never reach the host.

    Faults are counted per guard; the counter is shared by every thread
    executing woven methods and is protected by a lock.
    """

    def __init__(self, log_faults: bool = True) -> None:
        self._log_faults = log_faults
        self._lock = threading.Lock()
        self._fault_count = 0

    @property
    def fault_count(self) -> int:
        with self._lock:
            return self._fault_count

    def invoke(self, advice: Callable[[Any], object], call: Any) -> AdviceResult:
        """Run ``advice(call)`` and capture whatever it raises.

        Args:
            advice: The advice callable.
            call: Read-only view of the host invocation, passed to the advice.

        Returns:
            AdviceResult with the advice's return value, or with the captured
            fault. Skipped when already running inside advice.
        """
        if _inside_advice.get():
            return AdviceResult(skipped=True)
        try:
            with _advice_scope():
                value = advice(call)
        except BaseException as exc:
            fault = AdviceFault(getattr(call, "site", None), exc)
            self._record(fault)
            return AdviceResult(error=fault)
        return AdviceResult(value=value)

    def _record(self, fault: AdviceFault) -> None:
        with self._lock:
            self._fault_count += 1
        if not self._log_faults:
            return
        try:
            logger.warning(
                "Advice raised; outcome of the host method is unchanged",
                exc_info=fault.cause,
                extra={"site": str(fault.site)},
            )
        except Exception:  # noqa: S110
            # Handler failures stay inside the guard.
            pass
