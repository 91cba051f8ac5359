"""
Per-cycle cancellation and deadline.

The control loop hands each reconcile cycle a :class:`CycleContext`.  The
adapter checks it before every remote call and passes the remaining time
down as the call timeout, so a cancelled or expired cycle never completes a
stale write.
"""

from __future__ import annotations

import threading
import time

from policybind.base.exceptions import CycleCancelledError


class CycleContext:
    """Deadline plus cancel flag for one reconcile cycle.

    :meth:`cancel` is observed between remote calls, not during one: a fetch
    or replace already in flight runs until it returns or hits its timeout.
    That timeout is the time left before the deadline or, for a context
    without one, ``ReconcileConfig.call_timeout_seconds``.  Give the context
    a deadline when a cancelled cycle must stop within a known bound.

    Args:
        timeout: Seconds from now until the cycle's deadline, or ``None``
            for no deadline.
    """

    def __init__(self, timeout: float | None = None) -> None:
        self._deadline = None if timeout is None else time.monotonic() + timeout
        self._cancelled = threading.Event()

    def cancel(self) -> None:
        self._cancelled.set()

    @property
    def cancelled(self) -> bool:
        return self._cancelled.is_set()

    def remaining(self) -> float | None:
        """Seconds left before the deadline, or ``None`` without one."""
        if self._deadline is None:
            return None
        return max(self._deadline - time.monotonic(), 0.0)

    def done(self) -> bool:
        return self.cancelled or self.remaining() == 0.0

    def check(self, stage: str) -> None:
        """Raise :class:`CycleCancelledError` if the cycle may not continue."""
        if self.done():
            raise CycleCancelledError(stage)


def background() -> CycleContext:
    """A context that is never cancelled and has no deadline."""
    return CycleContext()
