"""
User-facing collaborators: the notifier and the navigator.

The access layer never renders anything itself.  It reports
human-readable messages through a ``Notifier`` (a toast, a status bar,
a log line) and asks a ``Navigator`` to send the user back to the login
entry point once the session is gone.  Callback-based implementations
let a UI plug in its own functions; the logging implementations are the
default when nothing is supplied.
"""

from __future__ import annotations

import logging
from typing import Callable

logger = logging.getLogger(__name__)


class Notifier:
    """Fire-and-forget sink for user-visible messages."""

    def notify(self, message: str) -> None:  # pragma: no cover - override
        raise NotImplementedError


class LoggingNotifier(Notifier):
    def notify(self, message: str) -> None:
        logger.warning("NOTICE: %s", message)


class CallbackNotifier(Notifier):
    """Forward messages to ``callback``.  Failures are logged, never raised."""

    def __init__(self, callback: Callable[[str], None]) -> None:
        self.callback = callback

    def notify(self, message: str) -> None:
        try:
            self.callback(message)
        except Exception as exc:
            logger.error("Notifier callback failed: %s", exc)
            logger.warning("NOTICE: %s", message)


class Navigator:
    """Sends the user to the login entry point."""

    def redirect_to_login(self) -> None:  # pragma: no cover - override
        raise NotImplementedError


class LoggingNavigator(Navigator):
    def __init__(self, login_url: str = "/login") -> None:
        self.login_url = login_url

    def redirect_to_login(self) -> None:
        logger.info("Redirecting to login at %s", self.login_url)


class CallbackNavigator(Navigator):
    def __init__(self, callback: Callable[[], None]) -> None:
        self.callback = callback

    def redirect_to_login(self) -> None:
        try:
            self.callback()
        except Exception as exc:
            logger.error("Navigator callback failed: %s", exc)
