"""Shared fixtures: an in-process fake PocketBase server on httpx.MockTransport."""

import re
import threading
from collections.abc import Callable
from typing import Any

import httpx
import pytest

from pocketbase_client import session as pb_session

BASE_URL = "http://127.0.0.1:8090"
# Admin tokens issued by the fixture server have the same length as real ones.
ADMIN_TOKEN = "a" * 207

Handler = Callable[[httpx.Request], httpx.Response]


class FakeServer:
    """Routes requests by (method, path) and records every request it sees."""

    def __init__(self):
        self._routes: dict[tuple[str, str], Handler] = {}
        self._lock = threading.Lock()
        self.requests: list[httpx.Request] = []

    def add(
        self,
        method: str,
        path: str,
        status: int = 200,
        json: Any = None,
        text: str | None = None,
    ) -> None:
        """Register a canned response; a fresh Response is built per request."""
        if text is not None:
            self._routes[(method, path)] = lambda _req: httpx.Response(status, text=text)
        else:
            self._routes[(method, path)] = lambda _req: httpx.Response(status, json=json)

    def add_handler(self, method: str, path: str, handler: Handler) -> None:
        self._routes[(method, path)] = handler

    def handle(self, request: httpx.Request) -> httpx.Response:
        request.read()
        with self._lock:
            self.requests.append(request)
        handler = self._routes.get((request.method, request.url.path))
        if handler is None:
            return httpx.Response(404, json={"code": 404, "message": "Not found."})
        return handler(request)

    def calls(self, method: str, path: str) -> list[httpx.Request]:
        return [r for r in self.requests if r.method == method and r.url.path == path]

    @staticmethod
    def form(request: httpx.Request) -> dict[str, str]:
        """Decode the filename-less parts of a multipart request body."""
        assert request.headers["Content-Type"].startswith("multipart/form-data")
        fields = re.findall(rb'name="([^"]+)"\r\n\r\n(.*?)\r\n--', request.content, re.S)
        return {name.decode(): value.decode() for name, value in fields}


@pytest.fixture
def server() -> FakeServer:
    """Fake server with a working admin login."""
    fake = FakeServer()
    fake.add(
        "POST",
        "/api/admins/auth-with-password",
        json={"token": ADMIN_TOKEN, "admin": {"id": "admin1"}},
    )
    return fake


@pytest.fixture
def make_session(server: FakeServer):
    """Factory building sessions wired to the fake server."""
    sessions: list[pb_session.Session] = []

    def factory(credentials=None) -> pb_session.Session:
        s = pb_session.Session(
            BASE_URL,
            credentials=credentials,
            transport=httpx.MockTransport(server.handle),
        )
        sessions.append(s)
        return s

    yield factory
    for s in sessions:
        s.close()
