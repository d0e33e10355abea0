"""
Session stores holding the current access/refresh token pair.

Two backends are provided: an in-memory store scoped to the running
process and a small JSON file store that survives restarts.  Both expose
the same synchronous ``get``/``set``/``clear`` contract so the refresh
coordinator can read and write the credential without yielding to the
event loop.  A store holding only one of the two tokens reports no
credential at all.
"""

from __future__ import annotations

import json
import logging
import os
from typing import Any, Dict, Optional

from pydantic import ValidationError

from .models import Credential

logger = logging.getLogger(__name__)

ACCESS_KEY = "accessToken"
REFRESH_KEY = "refreshToken"


def _credential_from(data: Dict[str, Any]) -> Optional[Credential]:
    access = data.get(ACCESS_KEY)
    refresh = data.get(REFRESH_KEY)
    if not (isinstance(access, str) and isinstance(refresh, str)):
        return None
    try:
        return Credential(access_token=access, refresh_token=refresh)
    except ValidationError:
        return None


class BaseSessionStore:
    """Abstract token store."""

    def get(self) -> Optional[Credential]:  # pragma: no cover - override
        raise NotImplementedError

    def set(self, credential: Credential) -> None:  # pragma: no cover - override
        raise NotImplementedError

    def clear(self) -> None:  # pragma: no cover - override
        raise NotImplementedError

    @property
    def access_token(self) -> Optional[str]:
        credential = self.get()
        return credential.access_token if credential else None


class MemorySessionStore(BaseSessionStore):
    """Keep tokens in a plain dict for the lifetime of the process."""

    def __init__(self, credential: Optional[Credential] = None) -> None:
        self._data: Dict[str, str] = {}
        if credential is not None:
            self.set(credential)

    def get(self) -> Optional[Credential]:
        return _credential_from(self._data)

    def set(self, credential: Credential) -> None:
        self._data = {ACCESS_KEY: credential.access_token, REFRESH_KEY: credential.refresh_token}

    def clear(self) -> None:
        self._data = {}


class FileSessionStore(BaseSessionStore):
    """Persist tokens as a JSON object at ``path``.

    The file is written on every ``set`` and removed on ``clear``.  A
    missing, unreadable or partial file reads as no credential.
    """

    def __init__(self, path: str = "session_store.json") -> None:
        self.path = path

    def _read_file(self) -> Dict[str, Any]:
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except FileNotFoundError:
            return {}
        except (OSError, ValueError) as exc:
            logger.warning("Ignoring unreadable session store %s: %s", self.path, exc)
            return {}
        return data if isinstance(data, dict) else {}

    def _write_file(self, data: Dict[str, Any]) -> None:
        tmp_path = f"{self.path}.tmp"
        with open(tmp_path, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2)
        os.replace(tmp_path, self.path)

    def get(self) -> Optional[Credential]:
        return _credential_from(self._read_file())

    def set(self, credential: Credential) -> None:
        self._write_file({ACCESS_KEY: credential.access_token, REFRESH_KEY: credential.refresh_token})

    def clear(self) -> None:
        try:
            os.remove(self.path)
        except FileNotFoundError:
            pass


def store_from_settings(store_path: Optional[str]) -> BaseSessionStore:
    """Pick the file store when a path is configured, memory otherwise."""
    if store_path:
        return FileSessionStore(store_path)
    return MemorySessionStore()
