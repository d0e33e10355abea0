"""
Cancellable timer abstraction.

The teardown handler delays the redirect to the login page so the
"session expired" notification can render first.  Going through a
``Scheduler`` instead of calling ``asyncio.sleep`` directly lets tests
drive the sequence without waiting on the wall clock.
"""

from __future__ import annotations

import asyncio
from typing import Any, Callable


class Scheduler:
    """Run ``callback`` once after ``delay`` seconds.

    Implementations return a handle exposing ``cancel()``.
    """

    def call_later(self, delay: float, callback: Callable[[], None]) -> Any:  # pragma: no cover - override
        raise NotImplementedError


class LoopScheduler(Scheduler):
    """Schedule callbacks on the running asyncio event loop."""

    def call_later(self, delay: float, callback: Callable[[], None]) -> asyncio.TimerHandle:
        loop = asyncio.get_running_loop()
        return loop.call_later(max(0.0, delay), callback)
