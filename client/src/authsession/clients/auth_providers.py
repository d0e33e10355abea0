"""
Authentication header construction.

Separating header logic from the session client keeps the pipeline
unaware of the credential scheme; the default provider sends the access
token as a bearer credential.
"""
from __future__ import annotations

from typing import Dict, Optional


class AuthProvider:
    """Abstract base class for authentication providers."""

    def get_headers(self, access_token: Optional[str]) -> Dict[str, str]:
        """Return headers for a call carrying ``access_token``.

        Subclasses must implement this method.
        """
        raise NotImplementedError


class BearerTokenProvider(AuthProvider):
    """``Authorization: Bearer <token>`` with a JSON content type."""

    def __init__(self, extra_headers: Optional[Dict[str, str]] = None) -> None:
        self.extra_headers = dict(extra_headers or {})

    def get_headers(self, access_token: Optional[str]) -> Dict[str, str]:
        headers: Dict[str, str] = {"Content-Type": "application/json"}
        headers.update(self.extra_headers)
        if access_token:
            headers["Authorization"] = f"Bearer {access_token}"
        return headers
