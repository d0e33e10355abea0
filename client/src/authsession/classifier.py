"""
Error classifier.

Maps the outcome of an outbound call (a response, or ``None`` when the
transport failed before any response arrived) to one of the kinds the
request pipeline acts on, together with a best-effort user-facing
message extracted from the response body.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Any, Optional

from .models import ApiResponse

GENERIC_ERROR_MESSAGE = "An error occurred"
NETWORK_ERROR_MESSAGE = "Network error. Please check your connection."

TRANSIENT_STATUSES = frozenset({408, 425, 429})


class ErrorKind(enum.Enum):
    SUCCESS = "success"
    SESSION_EXPIRED = "session_expired"
    SESSION_INVALID = "session_invalid"
    TRANSIENT = "transient"
    OTHER = "other"


@dataclass(frozen=True)
class Classification:
    kind: ErrorKind
    message: Optional[str] = None


def extract_message(payload: Any, default: str = GENERIC_ERROR_MESSAGE) -> str:
    """Pull a human-readable message out of an error body."""
    if isinstance(payload, dict):
        for key in ("message", "detail", "error"):
            value = payload.get(key)
            if isinstance(value, str) and value.strip():
                return value.strip()
    return default


def classify(response: Optional[ApiResponse], *, renewal_call: bool = False) -> Classification:
    """Classify a call outcome.

    Args:
        response: The response received, or ``None`` for a network
            failure.
        renewal_call: Whether the call was the renewal call itself.  An
            authentication failure there means the refresh token is no
            longer usable rather than an expired access token.
    """
    if response is None:
        return Classification(ErrorKind.TRANSIENT, NETWORK_ERROR_MESSAGE)
    status = response.status
    if response.ok:
        return Classification(ErrorKind.SUCCESS)
    if renewal_call and status in (400, 401, 403):
        return Classification(ErrorKind.SESSION_INVALID, extract_message(response.payload))
    if status == 401:
        return Classification(ErrorKind.SESSION_EXPIRED)
    message = extract_message(response.payload)
    if status >= 500 or status in TRANSIENT_STATUSES:
        return Classification(ErrorKind.TRANSIENT, message)
    return Classification(ErrorKind.OTHER, message)
