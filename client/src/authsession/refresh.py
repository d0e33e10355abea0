"""
Refresh coordinator.

Guarantees that at most one renewal call is in flight per coordinator,
however many calls hit an expired session at the same time.  The first
caller flips the state to ``IN_FLIGHT`` and performs the renewal; every
caller arriving while it runs is parked on a future in the waiter queue.
When the renewal completes the whole queue is drained at once, in
insertion order: resolved with the new access token on success, rejected
with the same exception on failure.

The state check and the transition to ``IN_FLIGHT`` happen without an
``await`` in between.  On a single event loop that makes the check-and-set
atomic, so no lock is needed.  The coordinator is the only writer of the
credential after login, which keeps the flag sufficient.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable, List, Optional

from .errors import RenewalFailedError
from .metrics import RENEWAL_WAITERS, RENEWALS
from .models import Credential, RefreshState
from .session_store import BaseSessionStore
from .teardown import TeardownHandler

logger = logging.getLogger(__name__)

RenewFunc = Callable[[str], Awaitable[str]]


class RefreshCoordinator:
    """Single-flight provider of renewed access tokens."""

    def __init__(
        self,
        store: BaseSessionStore,
        renew: RenewFunc,
        teardown: Optional[TeardownHandler] = None,
    ) -> None:
        self._store = store
        self._renew = renew
        self._teardown = teardown
        self._state = RefreshState.IDLE
        self._waiters: List[asyncio.Future] = []

    @property
    def state(self) -> RefreshState:
        return self._state

    @property
    def pending_waiters(self) -> int:
        return len(self._waiters)

    async def obtain_renewed_credential(self, stale_token: Optional[str] = None) -> str:
        """Return an access token newer than ``stale_token``.

        Args:
            stale_token: The access token the expired call carried.  If
                the store already holds a different token, a renewal
                finished after that call was sent and its token is
                returned without another renewal call.

        Raises:
            RenewalFailedError: No refresh token is stored, or the
                renewal call failed.  Teardown has run by the time this
                propagates.  Waiters also get it when the task running
                the renewal is cancelled; the session is kept then.
        """
        if self._state is RefreshState.IN_FLIGHT:
            waiter = asyncio.get_running_loop().create_future()
            self._waiters.append(waiter)
            RENEWAL_WAITERS.inc()
            logger.debug("Renewal in flight; queued waiter #%d", len(self._waiters))
            return await waiter

        current = self._store.get()
        if stale_token is not None and current is not None and current.access_token != stale_token:
            logger.debug("Access token already renewed; skipping renewal")
            return current.access_token

        self._state = RefreshState.IN_FLIGHT
        if current is None:
            error = RenewalFailedError("No refresh token")
            self._fail(error, outcome="no_refresh_token")
            raise error
        try:
            access_token = await self._renew(current.refresh_token)
        except asyncio.CancelledError:
            self._abandon()
            raise
        except Exception as exc:
            self._fail(exc)
            raise

        self._store.set(Credential(access_token=access_token, refresh_token=current.refresh_token))
        self._state = RefreshState.IDLE
        waiters, self._waiters = self._waiters, []
        RENEWALS.labels(outcome="success").inc()
        logger.info("Session renewed; releasing %d waiting call(s)", len(waiters))
        for waiter in waiters:
            if not waiter.done():
                waiter.set_result(access_token)
        return access_token

    def _abandon(self) -> None:
        # the initiating task was cancelled; the session itself is untouched
        self._state = RefreshState.IDLE
        waiters, self._waiters = self._waiters, []
        RENEWALS.labels(outcome="cancelled").inc()
        logger.warning("Session renewal cancelled; rejecting %d waiting call(s)", len(waiters))
        error = RenewalFailedError("Session renewal was cancelled")
        for waiter in waiters:
            if not waiter.done():
                waiter.set_exception(error)

    def _fail(self, exc: BaseException, outcome: str = "failure") -> None:
        self._state = RefreshState.IDLE
        waiters, self._waiters = self._waiters, []
        RENEWALS.labels(outcome=outcome).inc()
        logger.warning("Session renewal failed (%s); rejecting %d waiting call(s)", exc, len(waiters))
        for waiter in waiters:
            if not waiter.done():
                waiter.set_exception(exc)
        if self._teardown is not None:
            self._teardown.teardown()
        else:
            self._store.clear()
