"""
Configuration
=============

Settings for the session client are read from environment variables
through the default secrets manager (see ``secrets_manager.py``), so any
value may also be supplied as a ``*_FILE`` path.  The following keys are
recognised:

``AUTHSESSION_API_URL``
    Base URL of the backend API.  Every request path is appended to it.
    Defaults to ``http://localhost:5000/api``.

``AUTHSESSION_REFRESH_PATH``
    Path of the renewal endpoint relative to the API URL
    (``/auth/refresh``).

``AUTHSESSION_LOGIN_URL``
    Login entry point handed to the navigator after teardown (``/login``).

``AUTHSESSION_REDIRECT_DELAY``
    Seconds between the "session expired" notification and the redirect
    to the login entry point (``1.0``).  ``0`` redirects on the next loop
    iteration.

``AUTHSESSION_RENEWAL_ATTEMPTS``
    How many times a transiently failing renewal call is attempted
    (``3``).

``AUTHSESSION_RENEWAL_BACKOFF_MIN`` / ``AUTHSESSION_RENEWAL_BACKOFF_MAX``
    Bounds of the exponential backoff between renewal attempts in
    seconds (``1`` and ``8``).  Rejected refresh tokens are never retried.

``AUTHSESSION_TIMEOUT``
    Total timeout in seconds for each HTTP call (``30``).

``AUTHSESSION_STORE_PATH``
    JSON file used to persist the token pair.  When unset, tokens live in
    memory for the lifetime of the process.

``LOG_LEVEL``
    Level passed to ``logging.basicConfig`` by ``configure_logging``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Optional, TypeVar

from .secrets_manager import BaseSecretsManager, get_default_secrets_manager

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class SessionClientSettings:
    api_url: str = "http://localhost:5000/api"
    refresh_path: str = "/auth/refresh"
    login_url: str = "/login"
    redirect_delay: float = 1.0
    renewal_attempts: int = 3
    renewal_backoff_min: float = 1.0
    renewal_backoff_max: float = 8.0
    timeout: float = 30.0
    store_path: Optional[str] = None
    log_level: str = "INFO"

    @property
    def refresh_url(self) -> str:
        return self.url_for(self.refresh_path)

    def url_for(self, path: str) -> str:
        if path.startswith(("http://", "https://")):
            return path
        return f"{self.api_url.rstrip('/')}/{path.lstrip('/')}"


def _parse(name: str, raw: Optional[str], default: T, cast: Callable[[str], T]) -> T:
    if raw is None or raw == "":
        return default
    try:
        value = cast(raw)
    except ValueError:
        logger.warning("Invalid value for %s: %r; using default %r", name, raw, default)
        return default
    if isinstance(value, (int, float)) and value < 0:
        logger.warning("Negative value for %s: %r; using default %r", name, raw, default)
        return default
    return value


def load_settings(secrets: Optional[BaseSecretsManager] = None) -> SessionClientSettings:
    """Build settings from the environment (or the given secrets manager)."""
    secrets = secrets or get_default_secrets_manager()
    defaults = SessionClientSettings()

    def get(name: str) -> Optional[str]:
        value = secrets.get_secret(name)
        return value.strip() if value else None

    attempts = _parse("AUTHSESSION_RENEWAL_ATTEMPTS", get("AUTHSESSION_RENEWAL_ATTEMPTS"), defaults.renewal_attempts, int)
    return SessionClientSettings(
        api_url=get("AUTHSESSION_API_URL") or defaults.api_url,
        refresh_path=get("AUTHSESSION_REFRESH_PATH") or defaults.refresh_path,
        login_url=get("AUTHSESSION_LOGIN_URL") or defaults.login_url,
        redirect_delay=_parse(
            "AUTHSESSION_REDIRECT_DELAY", get("AUTHSESSION_REDIRECT_DELAY"), defaults.redirect_delay, float
        ),
        renewal_attempts=max(1, attempts),
        renewal_backoff_min=_parse(
            "AUTHSESSION_RENEWAL_BACKOFF_MIN",
            get("AUTHSESSION_RENEWAL_BACKOFF_MIN"),
            defaults.renewal_backoff_min,
            float,
        ),
        renewal_backoff_max=_parse(
            "AUTHSESSION_RENEWAL_BACKOFF_MAX",
            get("AUTHSESSION_RENEWAL_BACKOFF_MAX"),
            defaults.renewal_backoff_max,
            float,
        ),
        timeout=_parse("AUTHSESSION_TIMEOUT", get("AUTHSESSION_TIMEOUT"), defaults.timeout, float),
        store_path=get("AUTHSESSION_STORE_PATH"),
        log_level=(get("LOG_LEVEL") or defaults.log_level).upper(),
    )


def configure_logging(level: Optional[str] = None) -> None:
    """Configure root logging the same way for every entry point.

    Without an explicit ``level`` the ``LOG_LEVEL`` setting is used, so
    it may also come from ``LOG_LEVEL_FILE``.
    """
    logging.basicConfig(level=level or load_settings().log_level)
