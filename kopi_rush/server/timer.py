# Copyright (c) 2025 KopiRush Contributors
# BSD-3-Clause License

"""
Order countdown.

The timer stores an absolute deadline and derives the time left from the
clock whenever asked, so missed ticks, slow ticks or a pause never skew it.
It is polled with ``tick()``; there is no background thread.
"""

import time
from typing import Callable, Optional


class CountdownTimer:
    """
    A pausable countdown that fires its timeout callback exactly once.

    Args:
        on_timeout: Called when the countdown reaches zero during ``tick()``
        clock: Monotonic clock in seconds (injectable for tests)
        tick_interval: Suggested polling interval for UIs, in seconds

    Example:
        >>> timer = CountdownTimer(on_timeout=lambda: print("too slow!"))
        >>> timer.start(15)
        >>> timer.tick()  # call from the event loop every ~50ms
    """

    def __init__(
        self,
        on_timeout: Optional[Callable[[], None]] = None,
        clock: Callable[[], float] = time.monotonic,
        tick_interval: float = 0.05,
    ):
        self.on_timeout = on_timeout
        self.tick_interval = tick_interval
        self._clock = clock
        self._deadline: Optional[float] = None
        self._paused_remaining: Optional[float] = None
        self._last_remaining = 0.0
        self._fired = False

    @property
    def is_running(self) -> bool:
        return self._deadline is not None

    @property
    def is_paused(self) -> bool:
        return self._paused_remaining is not None

    @property
    def deadline(self) -> Optional[float]:
        """Clock reading at which the countdown runs out (None unless running)."""
        return self._deadline

    @property
    def paused_remaining(self) -> Optional[float]:
        return self._paused_remaining

    @property
    def seconds_remaining(self) -> float:
        """Seconds until the deadline (frozen while paused, 0 once expired)."""
        if self._deadline is not None:
            return max(0.0, self._deadline - self._clock())
        if self._paused_remaining is not None:
            return self._paused_remaining
        return self._last_remaining

    def start(self, duration: float) -> None:
        """Reset and count down from ``duration`` seconds."""
        self._deadline = self._clock() + duration
        self._paused_remaining = None
        self._last_remaining = float(duration)
        self._fired = False

    def pause(self) -> None:
        """Freeze the remaining time. No-op unless running; an expired countdown fires instead."""
        if self._deadline is None:
            return
        remaining = self.seconds_remaining
        if remaining <= 0:
            self.tick()
            return
        self._deadline = None
        self._paused_remaining = remaining
        self._last_remaining = remaining

    def resume(self) -> None:
        """Continue from the frozen remaining time. No-op unless paused with time left."""
        if self._deadline is not None or self._paused_remaining is None:
            return
        remaining = self._paused_remaining
        self._paused_remaining = None
        if remaining <= 0:
            return
        self._deadline = self._clock() + remaining

    def stop(self) -> None:
        """Halt and discard the deadline. Safe to call repeatedly."""
        if self._deadline is not None:
            self._last_remaining = self.seconds_remaining
        elif self._paused_remaining is not None:
            self._last_remaining = self._paused_remaining
        self._deadline = None
        self._paused_remaining = None

    def tick(self) -> float:
        """
        Recompute the time left and fire the timeout if it has run out.

        Returns:
            Seconds remaining after this tick
        """
        if self._deadline is None:
            return self.seconds_remaining

        remaining = max(0.0, self._deadline - self._clock())
        self._last_remaining = remaining
        if remaining <= 0 and not self._fired:
            self._fired = True
            self._deadline = None
            if self.on_timeout is not None:
                self.on_timeout()
        return remaining
