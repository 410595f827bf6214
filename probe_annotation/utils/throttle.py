"""
Rate limiting for expensive recomputation.

``Throttle`` runs a function at most once per ``wait`` seconds. The
first call after an idle period runs immediately; calls made inside the
window are coalesced and the latest arguments run once when the window
closes. Without a scheduler the coalesced call waits for the next call
after the window, or for ``flush``, and never leaves the caller's thread.
"""

import asyncio
import logging
import time
from typing import Any, Callable, Optional, Protocol

logger = logging.getLogger(__name__)


class TimerHandle(Protocol):
    def cancel(self) -> None:
        ...


TimerFactory = Callable[[float, Callable[[], None]], Optional[TimerHandle]]


def default_timer_factory(
    delay: float, callback: Callable[[], None]
) -> Optional[TimerHandle]:
    """
    Schedule on the running asyncio loop.

    Returns None without a running loop. The caller then keeps the call
    pending and runs it from its own thread.
    """
    try:
        loop = asyncio.get_running_loop()
    except RuntimeError:
        return None
    return loop.call_later(delay, callback)


class Throttle:
    """
    Leading and trailing edge throttle.

    Args:
        func: Function to rate limit
        wait: Minimum number of seconds between two executions
        clock: Monotonic clock returning seconds
        timer_factory: ``(delay, callback) -> handle`` used to schedule the
            trailing execution; the handle must provide ``cancel()``. A
            factory returning None leaves the call pending
    """

    def __init__(
        self,
        func: Callable[..., Any],
        wait: float,
        clock: Callable[[], float] = time.monotonic,
        timer_factory: Optional[TimerFactory] = None,
    ):
        self.func = func
        self.wait = max(0.0, float(wait))
        self._clock = clock
        self._timer_factory = timer_factory or default_timer_factory
        self._timer: Optional[TimerHandle] = None
        self._pending: Optional[tuple] = None
        self._last_run: Optional[float] = None

    @property
    def pending(self) -> bool:
        return self._pending is not None

    def __call__(self, *args, **kwargs):
        self._pending = (args, kwargs)
        remaining = self._remaining()
        if remaining <= 0:
            self._cancel_timer()
            return self._run()
        if self._timer is None:
            self._timer = self._timer_factory(remaining, self._on_timer)
        return None

    def flush(self):
        """Run the pending trailing call now, if any."""
        self._cancel_timer()
        if self._pending is not None:
            return self._run()
        return None

    def cancel(self):
        """Drop the pending trailing call."""
        self._cancel_timer()
        self._pending = None

    def _remaining(self) -> float:
        if self._last_run is None:
            return 0.0
        return self.wait - (self._clock() - self._last_run)

    def _on_timer(self):
        self._timer = None
        if self._pending is None:
            return
        remaining = self._remaining()
        if remaining > 0:
            # Timer fired early (clock skew); re-arm for the rest of the window
            self._timer = self._timer_factory(remaining, self._on_timer)
            return
        self._run()

    def _run(self):
        args, kwargs = self._pending
        self._pending = None
        self._last_run = self._clock()
        return self.func(*args, **kwargs)

    def _cancel_timer(self):
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
