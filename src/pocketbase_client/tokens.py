"""Thread-safe token cell shared by every accessor of a session.

Holds the current auth token and fills it at most once through a
single-flight fetch, so concurrent first calls trigger a single login.
"""

import time
from collections.abc import Callable
from threading import Lock

import structlog

logger = structlog.get_logger(__name__)


class TokenStore:
    """Lock-guarded holder for the session's auth token.

    Reads, overwrites and the lazy fill all take the same lock. A failed
    fill leaves the stored value untouched.
    """

    def __init__(self, token: str | None = None):
        """Initialize the store.

        Args:
            token: Optional pre-supplied token.
        """
        self._lock = Lock()
        self._token = token or None

    @property
    def token(self) -> str | None:
        """Current token, or None when nothing is held."""
        with self._lock:
            return self._token

    def set(self, token: str) -> None:
        """Overwrite the held token unconditionally."""
        with self._lock:
            self._token = token or None

    def fetch_if_empty(self, fetch_func: Callable[[], str]) -> tuple[str, float | None]:
        """Return the held token, calling fetch_func only when none is held.

        The lock is held for the whole fetch, so callers racing on an empty
        store wait for the first fetch and then observe its token.

        Args:
            fetch_func: Function performing the login exchange.

        Returns:
            Tuple of (token, fetch_duration) where:
            - token: Held or freshly fetched token
            - fetch_duration: Duration in seconds if fetched, None if already held

        Raises:
            Whatever fetch_func raises; the store is not modified in that case.
        """
        with self._lock:
            if self._token:
                return self._token, None

            start = time.time()
            token = fetch_func()
            duration = time.time() - start
            if token:
                self._token = token
            logger.debug("Fetched fresh token", duration_seconds=round(duration, 3))
            return token, duration
