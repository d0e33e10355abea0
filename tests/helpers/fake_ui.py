"""Recording stand-ins for the notifier, navigator and timer scheduler."""

from __future__ import annotations

from typing import Callable, List

from authsession.notifications import Navigator, Notifier
from authsession.scheduling import Scheduler


class RecordingNotifier(Notifier):
    def __init__(self) -> None:
        self.messages: List[str] = []

    def notify(self, message: str) -> None:
        self.messages.append(message)


class RecordingNavigator(Navigator):
    def __init__(self) -> None:
        self.redirects = 0

    def redirect_to_login(self) -> None:
        self.redirects += 1


class ManualTimer:
    def __init__(self, delay: float, callback: Callable[[], None]) -> None:
        self.delay = delay
        self.callback = callback
        self.cancelled = False
        self.fired = False

    def cancel(self) -> None:
        self.cancelled = True


class ManualScheduler(Scheduler):
    """Collects timers and fires them only when the test says so."""

    def __init__(self) -> None:
        self.timers: List[ManualTimer] = []

    def call_later(self, delay: float, callback: Callable[[], None]) -> ManualTimer:
        timer = ManualTimer(delay, callback)
        self.timers.append(timer)
        return timer

    @property
    def pending(self) -> List[ManualTimer]:
        return [t for t in self.timers if not (t.cancelled or t.fired)]

    def fire_all(self) -> None:
        for timer in self.pending:
            timer.fired = True
            timer.callback()
