"""Credential sources a session can authorize with."""

from dataclasses import dataclass, field
from typing import TypeAlias
from urllib.parse import quote


@dataclass(frozen=True)
class Anonymous:
    """No credentials; privileged calls go out without a token."""


@dataclass(frozen=True)
class AdminEmailPassword:
    """Admin login performed lazily on the first privileged call."""

    email: str
    password: str = field(repr=False)

    def login_path(self) -> str:
        return "/api/admins/auth-with-password"


@dataclass(frozen=True)
class RecordEmailPassword:
    """Auth collection record login performed lazily on the first privileged call."""

    email: str
    password: str = field(repr=False)
    collection: str = "users"

    def login_path(self) -> str:
        return f"/api/collections/{quote(self.collection, safe='')}/auth-with-password"


@dataclass(frozen=True)
class Token:
    """Pre-supplied token; the login exchange is skipped entirely."""

    token: str = field(repr=False)


Credentials: TypeAlias = Anonymous | AdminEmailPassword | RecordEmailPassword | Token
PasswordCredentials: TypeAlias = AdminEmailPassword | RecordEmailPassword
