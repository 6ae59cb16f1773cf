"""Upload client for a dufs-style HTTP file server.

Files are stored with a plain PUT at ``<base>/<path>/<filename>`` and
served back from the same URL.

Usage:
    with DufsUploader(base_url=settings.dufs_url, path="images") as up:
        url = up.upload(Path("output/characters.yaml.jpg"))
"""

import logging
from pathlib import Path

import httpx

from lldiff.clients.base import BaseClient
from lldiff.errors import NetworkFailure

logger = logging.getLogger(__name__)


class DufsUploader(BaseClient):
    """PUT-based uploader with optional digest authentication.

    Args:
        base_url: Server base URL
        path: Path prefix under which images are stored
        user: Digest-auth user (auth enabled if user or password is set)
        password: Digest-auth password
    """

    def __init__(
        self,
        base_url: str,
        path: str = "images",
        user: str | None = None,
        password: str | None = None,
    ) -> None:
        auth = httpx.DigestAuth(user or "", password or "") if (user or password) else None
        super().__init__(auth=auth)
        self.root_url = base_url.rstrip("/")
        self.path = path.rstrip("/")

    def remote_url(self, filename: str) -> str:
        """Retrieval URL of an uploaded file."""
        if not self.path:
            return f"{self.root_url}/{filename}"
        return f"{self.root_url}/{self.path}/{filename}"

    def upload(self, local_path: Path) -> str | None:
        """Upload one file.

        Returns:
            The retrieval URL on a 2xx response, None otherwise
        """
        url = self.remote_url(local_path.name)
        try:
            self._send("PUT", url, content=local_path.read_bytes())
        except NetworkFailure as e:
            logger.warning("Upload of %s failed: %s", local_path.name, e)
            return None
        return url
