"""
Tick based single-shot timer running on the asyncio event loop.

One tick is 1/50 of a second. ``enable(ticks)`` arms a countdown; when it
runs out every registered listener is called with ``"elapsed"``. ``disable()``
cancels it and tells the listeners ``"disabled"`` straight away. Listeners
may re-arm or (un)register from inside their own callback: dispatch always
walks a snapshot of the listener list. A listener that raises is logged and
the remaining listeners are still called.
"""

import asyncio
import logging
import time

logger = logging.getLogger(__name__)

TICKS_PER_SECOND = 50

ELAPSED = "elapsed"
DISABLED = "disabled"


class Timer:
    """
    Rearmable countdown measured in ticks.

    Args:
        ticks_per_second (int): Tick rate. The game runs at 50; tests pass a
            higher rate to play the same sequences quickly.
        clock (callable): Monotonic clock in seconds, used for the
            elapsed/remaining introspection.
        loop: Event loop to schedule on. Defaults to the running loop at the
            time ``enable`` is called.
    """

    def __init__(self, ticks_per_second=TICKS_PER_SECOND, clock=time.monotonic, loop=None):
        self.ticks_per_second = ticks_per_second
        self._clock = clock
        self._loop = loop
        self._listeners = []
        self._handle = None
        self._elapsed = False
        self._ticks = 0
        self._start = clock()
        self._base_time = self._start

    def register(self, listener):
        self._listeners = self._listeners + [listener]

    def unregister(self, listener):
        self._listeners = [item for item in self._listeners if item is not listener]

    def _clear(self):
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None
        self._elapsed = False

    def _notify(self, event):
        for listener in self._listeners:
            try:
                listener(event)
            except Exception:
                logger.exception("timer listener %r failed on %s", listener, event)

    def _fire(self):
        self._handle = None
        self._elapsed = True
        self._notify(ELAPSED)

    def enable(self, ticks):
        """
        Arm the countdown, replacing any pending one.

        Args:
            ticks (int): Ticks until the ``"elapsed"`` notification. Values
                below zero count as zero.
        """
        self._clear()
        self._ticks = max(0, int(ticks))
        loop = self._loop or asyncio.get_running_loop()
        self._handle = loop.call_later(self._ticks / self.ticks_per_second, self._fire)
        self._start = self._clock()

    def disable(self):
        self._clear()
        self._notify(DISABLED)

    def armed(self):
        return self._handle is not None

    def elapsed(self):
        """True from the natural end of a countdown until the next enable/disable."""
        return self._elapsed

    def _ticks_since_start(self):
        return round((self._clock() - self._start) * self.ticks_per_second)

    def remaining_ticks(self):
        elapsed = self._ticks_since_start()
        return self._ticks - elapsed if elapsed < self._ticks else 0

    def elapsed_ticks(self):
        elapsed = self._ticks_since_start()
        return elapsed if elapsed < self._ticks else self._ticks

    # Free running counters, independent of the countdown.

    def reset_clock(self):
        self._base_time = self._clock()

    def ticks(self):
        """Ticks since ``reset_clock()``, wrapping at 256 like the 8-bit counter."""
        return round((self._clock() - self._base_time) * self.ticks_per_second) % 256

    def seconds(self):
        return round(self._clock() - self._base_time)
