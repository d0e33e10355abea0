"""
Client utilities for talking to the backend.

This package provides the session-aware HTTP client (the request
pipeline), the renewal endpoint client, header providers and the
transport abstraction they share.
"""

from .auth_providers import AuthProvider, BearerTokenProvider  # noqa: F401
from .renewal import RenewalClient  # noqa: F401
from .session_client import SessionClient  # noqa: F401
from .transport import AiohttpTransport, Transport  # noqa: F401
