"""
Session-aware HTTP client.

Every call made through ``SessionClient`` carries the current access
token.  When the backend answers 401 the call is not failed straight
away: the client asks its ``RefreshCoordinator`` for a renewed token
(sharing one renewal call with every other call that expired at the same
time), then replays the call once with the new token and returns the
replay's outcome as if nothing had happened.

A call is replayed at most once.  A replay that is rejected again fails
with ``DoubleExpiryError`` instead of starting another renewal, which
rules out retry loops against a backend that keeps rejecting the token.

All other failures are reported to the notifier with a human-readable
message and raised as ``ApiError`` / ``TransientApiError``.  Session
expiry itself never produces a notification; only a failed renewal does,
once, through the teardown handler.
"""

from __future__ import annotations

import logging
from typing import Any, Mapping, Optional, Tuple

from ..classifier import Classification, ErrorKind, classify, extract_message
from ..config import SessionClientSettings, load_settings
from ..errors import ApiError, DoubleExpiryError, TransientApiError, TransportError
from ..metrics import REPLAYS, REQUEST_FAILURES
from ..models import ApiResponse, OutboundCall
from ..notifications import LoggingNavigator, LoggingNotifier, Navigator, Notifier
from ..refresh import RefreshCoordinator
from ..scheduling import LoopScheduler, Scheduler
from ..session_store import BaseSessionStore, store_from_settings
from ..teardown import TeardownHandler
from .auth_providers import AuthProvider, BearerTokenProvider
from .renewal import RenewalClient
from .transport import AiohttpTransport, Transport

logger = logging.getLogger(__name__)


class SessionClient:
    """Asynchronous API client that keeps the session alive transparently."""

    def __init__(
        self,
        settings: Optional[SessionClientSettings] = None,
        store: Optional[BaseSessionStore] = None,
        *,
        transport: Optional[Transport] = None,
        notifier: Optional[Notifier] = None,
        navigator: Optional[Navigator] = None,
        scheduler: Optional[Scheduler] = None,
        auth_provider: Optional[AuthProvider] = None,
        coordinator: Optional[RefreshCoordinator] = None,
    ) -> None:
        """Construct the client.

        Args:
            settings: Client settings; loaded from the environment when
                omitted (see ``config.py``).
            store: Token store.  Defaults to a file store when
                ``AUTHSESSION_STORE_PATH`` is set, memory otherwise.
            transport: HTTP transport; an aiohttp transport by default.
            notifier: Receives user-facing error messages.
            navigator: Receives the login redirect after teardown.
            scheduler: Delays the login redirect; the running event loop
                by default.
            auth_provider: Builds the credential headers.
            coordinator: Share a refresh coordinator between clients
                talking to the same session.  A private one is created
                when omitted.
        """
        self.settings = settings or load_settings()
        self.store = store if store is not None else store_from_settings(self.settings.store_path)
        self.transport = transport or AiohttpTransport(timeout=self.settings.timeout)
        self.notifier = notifier or LoggingNotifier()
        self.navigator = navigator or LoggingNavigator(self.settings.login_url)
        self.auth_provider = auth_provider or BearerTokenProvider()
        self.teardown = TeardownHandler(
            self.store,
            self.notifier,
            self.navigator,
            scheduler or LoopScheduler(),
            redirect_delay=self.settings.redirect_delay,
        )
        self.renewal = RenewalClient(self.settings, self.transport)
        self.coordinator = coordinator or RefreshCoordinator(self.store, self.renewal.renew, self.teardown)

    async def __aenter__(self) -> "SessionClient":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    async def close(self) -> None:
        await self.transport.close()

    async def request(
        self,
        method: str,
        path: str,
        payload: Any = None,
        *,
        params: Optional[Mapping[str, Any]] = None,
        authenticated: bool = True,
    ) -> Any:
        """Send a call and return the decoded response body.

        Raises:
            ApiError: The backend rejected the call.
            TransientApiError: No response, throttling or a server error.
            DoubleExpiryError: The call expired again after a renewal.
            RenewalFailedError: The session could not be renewed.
        """
        call = OutboundCall(
            method=method.upper(),
            path=path,
            payload=payload,
            params=params,
            authenticated=authenticated,
        )
        if authenticated:
            call.access_token = self.store.access_token
        return await self._dispatch(call)

    async def _dispatch(self, call: OutboundCall) -> Any:
        response, error = await self._send(call)
        outcome = classify(response)
        if outcome.kind is ErrorKind.SUCCESS:
            return response.payload
        if outcome.kind is ErrorKind.SESSION_EXPIRED:
            if call.authenticated:
                return await self._handle_expired(call, response)
            # a 401 on login/registration is a plain rejection
            outcome = Classification(ErrorKind.OTHER, extract_message(response.payload))
        self._fail(call, response, outcome, error)

    async def _send(self, call: OutboundCall) -> Tuple[Optional[ApiResponse], Optional[TransportError]]:
        headers = self.auth_provider.get_headers(call.access_token if call.authenticated else None)
        try:
            response = await self.transport.send(
                call.method,
                self.settings.url_for(call.path),
                headers=headers,
                payload=call.payload,
                params=call.params,
            )
        except TransportError as exc:
            return None, exc
        return response, None

    async def _handle_expired(self, call: OutboundCall, response: ApiResponse) -> Any:
        if call.retried:
            REQUEST_FAILURES.labels(kind="double_expiry").inc()
            logger.warning("%s %s rejected again after session renewal", call.method, call.path)
            raise DoubleExpiryError(
                "Session expired again after renewal",
                status=response.status,
                payload=response.payload,
            )
        call.retried = True
        call.access_token = await self.coordinator.obtain_renewed_credential(stale_token=call.access_token)
        REPLAYS.inc()
        logger.debug("Replaying %s %s with renewed session", call.method, call.path)
        return await self._dispatch(call)

    def _fail(
        self,
        call: OutboundCall,
        response: Optional[ApiResponse],
        outcome: Classification,
        error: Optional[TransportError],
    ) -> None:
        message = outcome.message or extract_message(None)
        status = response.status if response is not None else None
        payload = response.payload if response is not None else None
        REQUEST_FAILURES.labels(kind=outcome.kind.value).inc()
        logger.error("%s %s failed (status %s): %s", call.method, call.path, status, message)
        self.notifier.notify(message)
        error_cls = TransientApiError if outcome.kind is ErrorKind.TRANSIENT else ApiError
        raise error_cls(message, status=status, payload=payload) from error

    async def get(self, path: str, *, params: Optional[Mapping[str, Any]] = None) -> Any:
        return await self.request("GET", path, params=params)

    async def post(self, path: str, payload: Any = None) -> Any:
        return await self.request("POST", path, payload)

    async def put(self, path: str, payload: Any = None) -> Any:
        return await self.request("PUT", path, payload)

    async def patch(self, path: str, payload: Any = None) -> Any:
        return await self.request("PATCH", path, payload)

    async def delete(self, path: str) -> Any:
        return await self.request("DELETE", path)
