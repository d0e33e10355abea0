"""
Exception taxonomy for the session access layer.

Every failure that reaches a caller is an ``ApiError`` (or subclass) so
callers can handle the whole layer with a single ``except`` clause while
still telling the cases apart:

* ``TransientApiError`` - network failures, timeouts, throttling and
  server errors.
* ``ApiError`` - any other unsuccessful response (validation errors,
  missing resources, forbidden actions).
* ``DoubleExpiryError`` - a call expired again right after a successful
  renewal.  Fatal for that call only; the session is kept.
* ``RenewalFailedError`` - the refresh token is missing, expired or was
  rejected.  Fatal for the session; teardown has already run when this
  reaches the caller.
"""

from __future__ import annotations

from typing import Any, Optional


class AuthSessionError(Exception):
    """Base class for all errors raised by ``authsession``."""


class ApiError(AuthSessionError):
    """An unsuccessful outcome of an outbound call."""

    def __init__(
        self,
        message: str,
        *,
        status: Optional[int] = None,
        payload: Any = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.status = status
        self.payload = payload

    def __repr__(self) -> str:
        return f"{type(self).__name__}(status={self.status!r}, message={self.message!r})"


class TransientApiError(ApiError):
    """Network, timeout or server-side failure unrelated to authentication."""


class SessionExpiredError(ApiError):
    """The access token was rejected.  Absorbed by the request pipeline."""


class DoubleExpiryError(SessionExpiredError):
    """A replayed call was rejected again after a successful renewal."""


class RenewalFailedError(ApiError):
    """The session could not be renewed and has been torn down."""


class TransportError(AuthSessionError):
    """The transport could not obtain any response (connection, timeout)."""


__all__ = [
    "AuthSessionError",
    "ApiError",
    "TransientApiError",
    "SessionExpiredError",
    "DoubleExpiryError",
    "RenewalFailedError",
    "TransportError",
]
