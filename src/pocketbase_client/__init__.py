"""PocketBase client.

Typed client library for the PocketBase HTTP API: generic record
collections, auth flows, file tokens and backups over one shared,
lazily authorized session.
"""

from .collection import Collection
from .config import ClientConfig, configure_logging, create_session, load_config
from .credentials import (
    AdminEmailPassword,
    Anonymous,
    RecordEmailPassword,
    Token,
)
from .errors import (
    AuthorizationFailedError,
    DecodeFailedError,
    InvalidArgumentError,
    PocketBaseError,
    ServerRejectedError,
    TransportFailedError,
)
from .resources.backups import Backups, zip_name
from .resources.files import Files
from .session import DEFAULT_TIMEOUT, Session
from .types import ListParams, ListResult

__version__ = "0.1.0"

__all__ = [
    "DEFAULT_TIMEOUT",
    "AdminEmailPassword",
    "Anonymous",
    "AuthorizationFailedError",
    "Backups",
    "ClientConfig",
    "Collection",
    "DecodeFailedError",
    "Files",
    "InvalidArgumentError",
    "ListParams",
    "ListResult",
    "PocketBaseError",
    "RecordEmailPassword",
    "ServerRejectedError",
    "Session",
    "Token",
    "TransportFailedError",
    "configure_logging",
    "create_session",
    "load_config",
    "zip_name",
]
