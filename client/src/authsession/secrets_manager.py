"""
secrets_manager
================

Small abstraction for looking up configuration values that may be
sensitive (API URLs with embedded credentials, bootstrap tokens).  The
default implementation first checks ``{name}_FILE`` and reads the value
from that file, then falls back to the plain environment variable.  This
lets operators mount values as files in containers (Docker or Kubernetes
secrets) without leaking them into the environment.  To integrate with a
real secrets backend, subclass ``BaseSecretsManager`` and override
``get_secret``.

Example usage::

    from authsession.secrets_manager import get_default_secrets_manager

    secrets = get_default_secrets_manager()
    api_url = secrets.get_secret("AUTHSESSION_API_URL")
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Dict, Optional

logger = logging.getLogger(__name__)


class BaseSecretsManager:
    """Abstract base class for secrets managers."""

    def get_secret(self, name: str) -> Optional[str]:  # pragma: no cover - override
        """Return the secret value for ``name`` or ``None`` if unavailable."""
        raise NotImplementedError


class EnvFileSecretsManager(BaseSecretsManager):
    """
    Loads secrets from environment variables and optional ``*_FILE`` paths.

    If both ``{name}`` and ``{name}_FILE`` are set, the file takes
    precedence.  Values are cached after the first lookup unless
    ``cache`` is disabled.
    """

    def __init__(self, base_path: Optional[Path] = None, *, cache: bool = True) -> None:
        #: Optional base directory to resolve relative file paths.
        self.base_path = base_path
        self._use_cache = cache
        self._cache: Dict[str, Optional[str]] = {}

    def get_secret(self, name: str) -> Optional[str]:
        if self._use_cache and name in self._cache:
            return self._cache[name]

        file_path = os.getenv(f"{name}_FILE")
        if file_path:
            path = Path(file_path)
            if not path.is_absolute() and self.base_path is not None:
                path = self.base_path / path
            try:
                value: Optional[str] = path.read_text(encoding="utf-8").strip()
            except OSError as exc:
                logger.warning("Failed to read %s_FILE (%s): %s", name, path, exc)
                value = None
        else:
            value = os.getenv(name)

        if self._use_cache:
            self._cache[name] = value
        return value


def get_default_secrets_manager() -> BaseSecretsManager:
    """Return the secrets manager selected by ``SECRETS_BACKEND``.

    Only ``env`` (environment variables and ``*_FILE`` paths) ships with
    the package; unknown backends fall back to it with a warning.
    """
    backend = os.getenv("SECRETS_BACKEND", "env").lower()
    if backend != "env":
        logger.warning("Unknown SECRETS_BACKEND %r; using environment", backend)
    return EnvFileSecretsManager(base_path=Path(os.getenv("SECRETS_BASE_PATH", "/")), cache=False)


__all__ = [
    "BaseSecretsManager",
    "EnvFileSecretsManager",
    "get_default_secrets_manager",
]
