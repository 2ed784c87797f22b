"""Backup archive management.

List, create, upload, delete and restore server backups, and build
download URLs for them.
"""

from typing import IO, TYPE_CHECKING
from urllib.parse import quote, urlencode

from ..errors import InvalidArgumentError
from ..types import BackupFileInfo

if TYPE_CHECKING:
    from ..session import Session

ZIP_SUFFIX = ".zip"


def zip_name(backup_name: str) -> str:
    """Normalize a backup name to a lower-case ``.zip`` file name.

    Applying it twice gives the same result as applying it once.

    Examples:
        >>> zip_name("Foo")
        'foo.zip'
        >>> zip_name("Foo.zip")
        'foo.zip'
    """
    name = backup_name.lower()
    if not name.endswith(ZIP_SUFFIX):
        name += ZIP_SUFFIX
    return name


class Backups:
    """Sub-client for the ``/api/backups`` endpoints (admin only)."""

    def __init__(self, session: "Session"):
        self._session = session

    def full_list(self) -> list[BackupFileInfo]:
        """Return every backup file available on the server."""
        response = self._session.request("backup-list", "GET", "/api/backups")
        return self._session.decode("backup-list", response, list[BackupFileInfo])

    def create(self, name: str | None = None) -> None:
        """Start a new backup.

        Args:
            name: Optional archive name, normalized with :func:`zip_name`.
                The server picks a name when omitted.
        """
        form = {"name": zip_name(name)} if name else None
        self._session.request("backup-create", "POST", "/api/backups", form=form)

    def upload(self, key: str, file: IO[bytes] | bytes) -> None:
        """Upload an existing backup archive under ``key``.

        Example:
            with open("./backups/pb_backup.zip", "rb") as f:
                session.backups().upload("pb_backup.zip", f)
        """
        self._session.request(
            "backup-upload",
            "POST",
            "/api/backups/upload",
            form={"name": key},
            files={"file": (key, file, "application/zip")},
        )

    def delete(self, key: str) -> None:
        self._session.request(
            "backup-delete", "DELETE", f"/api/backups/{quote(key, safe='')}"
        )

    def restore(self, key: str) -> None:
        """Start restoring the app data from an existing backup."""
        self._session.request(
            "backup-restore",
            "POST",
            f"/api/backups/{quote(key.lower(), safe='')}/restore",
        )

    def get_download_url(self, token: str, key: str) -> str:
        """Build the download URL of a backup without contacting the server.

        Args:
            token: File token, e.g. from ``session.files().get_token()``.
            key: Backup file key.

        Raises:
            InvalidArgumentError: If token or key is blank.
        """
        if not token.strip() or not key.strip():
            msg = "can't build a backup download URL without a token and a key"
            raise InvalidArgumentError(msg)
        return f"{self._session.base_url}/api/backups/{key}?{urlencode({'token': token})}"
