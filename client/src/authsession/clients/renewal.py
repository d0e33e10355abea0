"""
Client for the session renewal endpoint.

The renewal call exchanges the refresh token for a new access token::

    POST {api_url}{refresh_path}
    {"refreshToken": "<refresh>"}   ->   {"accessToken": "<access>"}

It never carries an ``Authorization`` header and never goes through the
request pipeline, so an authentication failure here cannot trigger
another renewal.  Transient failures (no response, throttling, server
errors) are retried with exponential backoff; a rejected refresh token
fails immediately.
"""

from __future__ import annotations

import logging
from typing import Optional

from pydantic import ValidationError
from tenacity import AsyncRetrying, retry_if_exception_type, stop_after_attempt, wait_exponential

from ..classifier import ErrorKind, classify
from ..config import SessionClientSettings
from ..errors import RenewalFailedError, TransportError
from ..models import ApiResponse, RenewalRequest, RenewalResponse
from .transport import Transport

logger = logging.getLogger(__name__)


class TransientRenewalError(RenewalFailedError):
    """Renewal failed for a reason that may go away on retry."""


class RenewalClient:
    def __init__(self, settings: SessionClientSettings, transport: Transport) -> None:
        self.settings = settings
        self.transport = transport

    async def renew(self, refresh_token: str) -> str:
        """Return a new access token for ``refresh_token``.

        Raises:
            RenewalFailedError: The token was rejected, the response was
                malformed, or every attempt failed transiently.
        """
        retrying = AsyncRetrying(
            stop=stop_after_attempt(max(1, self.settings.renewal_attempts)),
            wait=wait_exponential(min=self.settings.renewal_backoff_min, max=self.settings.renewal_backoff_max),
            retry=retry_if_exception_type(TransientRenewalError),
            reraise=True,
        )
        async for attempt in retrying:
            with attempt:
                if attempt.retry_state.attempt_number > 1:
                    logger.info("Retrying session renewal (attempt %d)", attempt.retry_state.attempt_number)
                return await self._attempt(refresh_token)
        raise RenewalFailedError("Session renewal was not attempted")  # pragma: no cover

    async def _attempt(self, refresh_token: str) -> str:
        body = RenewalRequest(refresh_token=refresh_token).model_dump(by_alias=True)
        response: Optional[ApiResponse]
        try:
            response = await self.transport.send(
                "POST",
                self.settings.refresh_url,
                headers={"Content-Type": "application/json"},
                payload=body,
            )
        except TransportError as exc:
            logger.warning("Session renewal failed without a response: %s", exc)
            response = None

        outcome = classify(response, renewal_call=True)
        if outcome.kind is ErrorKind.SUCCESS:
            try:
                return RenewalResponse.model_validate(response.payload).access_token
            except ValidationError as exc:
                raise RenewalFailedError(
                    "Malformed renewal response", status=response.status, payload=response.payload
                ) from exc

        status = response.status if response is not None else None
        payload = response.payload if response is not None else None
        message = outcome.message or "Session renewal failed"
        if outcome.kind is ErrorKind.TRANSIENT:
            raise TransientRenewalError(message, status=status, payload=payload)
        logger.warning("Refresh token rejected (status %s): %s", status, message)
        raise RenewalFailedError(message, status=status, payload=payload)
