"""Game login API client.

The login endpoint answers every request, valid or not, with an
``x-res-version`` header carrying the current resource version. A login
request with empty credentials is enough to read it.

Usage:
    with GameAPIClient(endpoint=settings.api_endpoint) as api:
        res_version = api.fetch_res_version("4.2.0")
"""

from lldiff.clients.base import BaseClient


RES_VERSION_HEADER = "x-res-version"


class GameAPIClient(BaseClient):
    """Client for the game's login endpoint.

    Args:
        endpoint: Full login URL
        placeholder_res_version: Resource version sent in the login request
    """

    def __init__(self, endpoint: str, placeholder_res_version: str = "R2503000") -> None:
        super().__init__()
        self.endpoint = endpoint
        self.placeholder_res_version = placeholder_res_version

    def fetch_res_version(self, client_version: str) -> str | None:
        """Send one login request and read the resource version header.

        The response status is ignored; only the header matters.

        Args:
            client_version: Resolved client version (sent in two headers)

        Returns:
            Resource version with line terminators trimmed, or None if the
            header is absent or empty

        Raises:
            NetworkFailure: On transport errors
        """
        response = self._send(
            "POST",
            self.endpoint,
            check_status=False,
            json={"device_specific_id": "", "player_id": "", "version": 1},
            headers={
                "content-type": "application/json",
                "x-client-version": client_version,
                "user-agent": f"inspix-android/{client_version}",
                RES_VERSION_HEADER: self.placeholder_res_version,
                "x-device-type": "android",
            },
        )
        value = response.headers.get(RES_VERSION_HEADER, "").strip("\r\n").strip()
        return value or None
