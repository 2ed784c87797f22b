"""File access token requests."""

from typing import TYPE_CHECKING

from ..types import TokenResponse

if TYPE_CHECKING:
    from ..session import Session


class Files:
    """Sub-client for the ``/api/files`` endpoints."""

    def __init__(self, session: "Session"):
        self._session = session

    def get_token(self) -> str:
        """Request a private file access token for the current auth model.

        Returns:
            The short-lived file token.
        """
        response = self._session.request("files-token", "POST", "/api/files/token")
        return self._session.decode("files-token", response, TokenResponse).token
