"""Exception hierarchy for the PocketBase client.

Every failure raised by this package derives from :class:`PocketBaseError`
and belongs to exactly one kind, so callers can tell a refused login from an
unreachable server from a malformed response body.
"""


class PocketBaseError(Exception):
    """Base class for all client errors."""


class InvalidArgumentError(PocketBaseError, ValueError):
    """Raised when a call receives unusable local input (e.g. an empty key)."""


class TransportFailedError(PocketBaseError):
    """Raised when the request could not be delivered to the server."""

    def __init__(self, operation: str, reason: str):
        self.operation = operation
        super().__init__(f"[{operation}] can't send request to pocketbase: {reason}")


class ServerRejectedError(PocketBaseError):
    """Raised when the server answers with a non-2xx status.

    The status code and the raw response body are kept verbatim.
    """

    def __init__(self, operation: str, status_code: int, body: str):
        self.operation = operation
        self.status_code = status_code
        self.body = body
        super().__init__(
            f"[{operation}] pocketbase returned status: {status_code}, msg: {body}"
        )


class AuthorizationFailedError(ServerRejectedError):
    """Raised when the login exchange performed by the authorizer is rejected."""


class DecodeFailedError(PocketBaseError):
    """Raised when a response body does not match the expected shape."""

    def __init__(self, operation: str, reason: str):
        self.operation = operation
        super().__init__(f"[{operation}] can't decode response: {reason}")
