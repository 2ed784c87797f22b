"""Shared session, authorizer and request classification.

A :class:`Session` owns the base endpoint, the credential source and the
token every accessor built from it uses. Requests go through one path that
authorizes lazily, dispatches over a thread-local ``httpx.Client`` and sorts
failures into transport, server-rejected and decode errors.
"""

import threading
import time
from typing import Any, TypeVar

import httpx
import pydantic
import structlog

from .collection import Collection
from .credentials import (
    AdminEmailPassword,
    Anonymous,
    Credentials,
    PasswordCredentials,
    RecordEmailPassword,
    Token,
)
from .errors import (
    AuthorizationFailedError,
    DecodeFailedError,
    ServerRejectedError,
    TransportFailedError,
)
from .resources.backups import Backups
from .resources.files import Files
from .tokens import TokenStore
from .types import TokenResponse, adapter

logger = structlog.get_logger(__name__)

DEFAULT_TIMEOUT = 30.0

R = TypeVar("R")


def multipart(fields: dict[str, str]) -> dict[str, tuple[None, str]]:
    """Encode plain string fields as multipart parts without filenames."""
    return {name: (None, value) for name, value in fields.items()}


class Session:
    """Connection state shared by every collection and resource accessor.

    The token lives in a single :class:`TokenStore`; accessors hold a
    reference to the session, never a copy, so a login or token refresh
    performed through one accessor is seen by all of them.

    Thread-safe through thread-local storage of httpx.Client instances and
    the lock inside the token store. Can be used as a context manager for
    automatic cleanup.
    """

    def __init__(
        self,
        base_url: str,
        credentials: Credentials | None = None,
        timeout: float = DEFAULT_TIMEOUT,
        transport: httpx.BaseTransport | None = None,
    ):
        """Initialize the session.

        Args:
            base_url: Server origin (e.g., "http://127.0.0.1:8090").
            credentials: Credential source; anonymous when omitted.
            timeout: Request timeout in seconds (default: 30.0).
            transport: Optional httpx transport, mainly for tests.

        Raises:
            ValueError: If base_url is empty or timeout is not positive.
        """
        if not base_url:
            msg = "base_url cannot be empty"
            raise ValueError(msg)
        if timeout <= 0:
            msg = "timeout must be positive"
            raise ValueError(msg)

        self.base_url = base_url.rstrip("/")
        self.credentials: Credentials = credentials or Anonymous()
        self._timeout = timeout
        self._transport = transport

        initial = self.credentials.token if isinstance(self.credentials, Token) else None
        self._tokens = TokenStore(initial)

        self._local = threading.local()
        self._clients: list[httpx.Client] = []
        self._clients_lock = threading.Lock()

    @property
    def token(self) -> str | None:
        """Token currently held by the session."""
        return self._tokens.token

    def set_token(self, token: str) -> None:
        """Overwrite the session token; visible to every accessor."""
        self._tokens.set(token)

    @property
    def client(self) -> httpx.Client:
        """Get or create thread-local httpx client.

        Each thread gets its own httpx.Client instance. Clients are created
        lazily and reused within the same thread.
        """
        if not hasattr(self._local, "client") or self._local.client.is_closed:
            client = httpx.Client(
                base_url=self.base_url,
                headers={"Accept": "application/json"},
                timeout=self._timeout,
                transport=self._transport,
            )
            with self._clients_lock:
                self._clients.append(client)
            self._local.client = client
        return self._local.client

    def __enter__(self):
        """Enter context manager."""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Exit context manager and cleanup resources."""
        self.close()

    def close(self):
        """Close every HTTP client opened by this session."""
        with self._clients_lock:
            clients, self._clients = self._clients, []
        for client in clients:
            if not client.is_closed:
                client.close()

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------

    def collection(self, name: str, record_type: type[R] | Any = dict) -> Collection[R]:
        """Return a typed accessor for the named collection."""
        return Collection(self, name, record_type)

    def files(self) -> Files:
        return Files(self)

    def backups(self) -> Backups:
        return Backups(self)

    # ------------------------------------------------------------------
    # Authorizer
    # ------------------------------------------------------------------

    def authorize(self) -> None:
        """Make sure a token is held before a privileged call.

        Returns immediately when a token is already held or the session is
        anonymous. Otherwise performs the login exchange once and stores the
        token. Concurrent callers share a single login.

        Raises:
            AuthorizationFailedError: If the server rejects the credentials.
            TransportFailedError: If the login request can't be sent.
            DecodeFailedError: If the login response carries no token.
        """
        credentials = self.credentials
        if not isinstance(credentials, (AdminEmailPassword, RecordEmailPassword)):
            return

        _token, duration = self._tokens.fetch_if_empty(lambda: self._login(credentials))
        if duration is not None:
            logger.info(
                "Authorized session",
                base_url=self.base_url,
                identity=credentials.email,
                duration_seconds=round(duration, 3),
            )

    def _login(self, credentials: PasswordCredentials) -> str:
        operation = "authorize"
        response = self._dispatch(
            operation,
            "POST",
            credentials.login_path(),
            json={"identity": credentials.email, "password": credentials.password},
        )
        if not response.is_success:
            raise AuthorizationFailedError(operation, response.status_code, response.text)
        return self.decode(operation, response, TokenResponse).token

    # ------------------------------------------------------------------
    # Requests
    # ------------------------------------------------------------------

    def request(
        self,
        operation: str,
        method: str,
        path: str,
        *,
        params: dict[str, Any] | None = None,
        json: Any = None,
        form: dict[str, str] | None = None,
        files: dict[str, Any] | None = None,
    ) -> httpx.Response:
        """Authorize, send one request and reject non-2xx responses.

        Args:
            operation: Short call-site name used in errors and logs.
            method: HTTP method.
            path: Absolute API path (e.g., "/api/backups").
            params: Optional query parameters.
            json: Optional JSON body.
            form: Optional string fields sent as multipart form data.
            files: Optional file parts sent alongside ``form``.

        Returns:
            The successful httpx.Response.

        Raises:
            AuthorizationFailedError: If the lazy login is rejected.
            TransportFailedError: If the request can't be sent.
            ServerRejectedError: If the server answers with a non-2xx status.
        """
        self.authorize()

        parts = None
        if form is not None or files is not None:
            parts = multipart(form or {}) | (files or {})

        response = self._dispatch(
            operation,
            method,
            path,
            token=self._tokens.token,
            params=params,
            json=json,
            files=parts,
        )
        if not response.is_success:
            raise ServerRejectedError(operation, response.status_code, response.text)
        return response

    def _dispatch(
        self,
        operation: str,
        method: str,
        path: str,
        token: str | None = None,
        **kwargs,
    ) -> httpx.Response:
        # Never reads the token store: _login runs while the store lock is held.
        headers = {}
        if token:
            headers["Authorization"] = token

        start_time = time.time()
        logger.debug("Making API request", operation=operation, method=method, path=path)
        try:
            response = self.client.request(method, path, headers=headers, **kwargs)
        except httpx.RequestError as exc:
            raise TransportFailedError(operation, str(exc) or type(exc).__name__) from exc

        logger.debug(
            "API request completed",
            operation=operation,
            status_code=response.status_code,
            duration_seconds=round(time.time() - start_time, 3),
        )
        return response

    def decode(self, operation: str, response: httpx.Response, model_type: type[R] | Any) -> R:
        """Validate a JSON response body into ``model_type``.

        Raises:
            DecodeFailedError: If the body is not JSON or doesn't match.
        """
        try:
            return adapter(model_type).validate_json(response.content)
        except pydantic.ValidationError as exc:
            raise DecodeFailedError(operation, str(exc)) from exc
