"""
Client-side session access layer.

``authsession`` wraps outbound HTTP calls to a backend that issues
short-lived access tokens and longer-lived refresh tokens.  It attaches
the access token to every call, renews the session once when many calls
expire together, replays the expired calls, and reports every other
failure through a single exception hierarchy and a user notifier.
"""

from .auth_service import AuthService  # noqa: F401
from .classifier import Classification, ErrorKind, classify  # noqa: F401
from .clients import SessionClient  # noqa: F401
from .config import SessionClientSettings, configure_logging, load_settings  # noqa: F401
from .errors import (  # noqa: F401
    ApiError,
    AuthSessionError,
    DoubleExpiryError,
    RenewalFailedError,
    SessionExpiredError,
    TransientApiError,
    TransportError,
)
from .models import Credential, RefreshState  # noqa: F401
from .refresh import RefreshCoordinator  # noqa: F401
from .session_store import FileSessionStore, MemorySessionStore  # noqa: F401
from .teardown import TeardownHandler  # noqa: F401
