"""
Login, registration and logout on top of the session client.

Login and registration are the only places a credential is created.
They are sent without an access token, and a 401 there is reported as
an ordinary rejection (wrong password) rather than an expired session.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from pydantic import ValidationError

from .clients.session_client import SessionClient
from .errors import ApiError, AuthSessionError
from .models import AuthResponse

logger = logging.getLogger(__name__)


class AuthService:
    def __init__(
        self,
        client: SessionClient,
        *,
        login_path: str = "/auth/login",
        register_path: str = "/auth/register",
        profile_path: str = "/auth/profile",
    ) -> None:
        self.client = client
        self.login_path = login_path
        self.register_path = register_path
        self.profile_path = profile_path
        self.user: Optional[Dict[str, Any]] = None

    @property
    def is_authenticated(self) -> bool:
        return self.client.store.get() is not None

    async def login(self, credentials: Dict[str, Any]) -> Dict[str, Any]:
        data = await self.client.request("POST", self.login_path, credentials, authenticated=False)
        return self._start_session(data)

    async def register(self, user_data: Dict[str, Any]) -> Dict[str, Any]:
        data = await self.client.request("POST", self.register_path, user_data, authenticated=False)
        return self._start_session(data)

    def _start_session(self, data: Any) -> Dict[str, Any]:
        try:
            auth = AuthResponse.model_validate(data)
        except ValidationError as exc:
            raise ApiError("Malformed authentication response", payload=data) from exc
        # a pending redirect from an earlier teardown must not fire after a fresh login
        self.client.teardown.cancel_pending()
        self.client.store.set(auth.credential())
        self.user = auth.user
        logger.info("Session started")
        return data

    async def load_profile(self) -> Optional[Dict[str, Any]]:
        """Fetch the current user; a failure ends the local session."""
        try:
            data = await self.client.get(self.profile_path)
        except AuthSessionError:
            logger.warning("Could not load profile; logging out")
            self.logout()
            raise
        self.user = data.get("user") if isinstance(data, dict) else None
        return self.user

    def logout(self) -> None:
        self.client.teardown.cancel_pending()
        self.client.store.clear()
        self.user = None
        logger.info("Session closed")
