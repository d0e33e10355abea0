"""
Session teardown after an irrecoverable renewal failure.

Teardown clears both tokens, shows a single "session expired" message
and, after a short delay that lets the message render, sends the user to
the login entry point.  The redirect goes through an injected
``Scheduler`` so it can be cancelled (for example by an explicit logout)
and driven manually in tests.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

from .metrics import TEARDOWNS
from .notifications import Navigator, Notifier
from .scheduling import Scheduler
from .session_store import BaseSessionStore

logger = logging.getLogger(__name__)

SESSION_EXPIRED_MESSAGE = "Session expired. Please login again."


class TeardownHandler:
    """Clear the session, notify once and schedule the login redirect."""

    def __init__(
        self,
        store: BaseSessionStore,
        notifier: Notifier,
        navigator: Navigator,
        scheduler: Scheduler,
        *,
        redirect_delay: float = 1.0,
        message: str = SESSION_EXPIRED_MESSAGE,
    ) -> None:
        self.store = store
        self.notifier = notifier
        self.navigator = navigator
        self.scheduler = scheduler
        self.redirect_delay = redirect_delay
        self.message = message
        self._pending: Optional[Any] = None

    @property
    def redirect_pending(self) -> bool:
        return self._pending is not None

    def teardown(self) -> None:
        self.store.clear()
        if self._pending is not None:
            logger.debug("Teardown already in progress; redirect still pending")
            return
        TEARDOWNS.inc()
        logger.info("Session cleared after failed renewal; redirecting in %.1fs", self.redirect_delay)
        self.notifier.notify(self.message)
        self._pending = self.scheduler.call_later(self.redirect_delay, self._redirect)

    def _redirect(self) -> None:
        self._pending = None
        self.navigator.redirect_to_login()

    def cancel_pending(self) -> None:
        """Cancel a scheduled redirect, if any."""
        if self._pending is not None:
            self._pending.cancel()
            self._pending = None
