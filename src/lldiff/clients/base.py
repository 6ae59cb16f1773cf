"""Base synchronous HTTP client.

All HTTP clients inherit from this base to ensure consistent behavior:
- One blocking request per call, no retries
- The HTTP client's default timeout
- Transport errors and unexpected statuses mapped to NetworkFailure
- Request/response logging

Usage:
    class MyClient(BaseClient):
        def __init__(self, token: str):
            super().__init__(
                base_url="https://api.example.com",
                headers={"Authorization": f"Bearer {token}"},
            )

        def get_data(self, key: str) -> dict:
            return self.get(f"/data/{key}")
"""

import logging
from typing import Any

import httpx

from lldiff.errors import NetworkFailure


logger = logging.getLogger(__name__)


class BaseClient:
    """Base synchronous HTTP client.

    Args:
        base_url: Base URL for relative endpoints ("" for absolute URLs only)
        headers: Default headers for all requests
        auth: Optional httpx auth (e.g. DigestAuth)
    """

    def __init__(
        self,
        base_url: str = "",
        headers: dict[str, str] | None = None,
        auth: httpx.Auth | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.headers = headers or {}
        self.auth = auth
        self._client: httpx.Client | None = None

    def __enter__(self) -> "BaseClient":
        """Context manager entry."""
        self._client = httpx.Client(
            base_url=self.base_url,
            headers=self.headers,
            auth=self.auth,
        )
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        """Context manager exit."""
        if self._client:
            self._client.close()
            self._client = None

    def _send(
        self,
        method: str,
        endpoint: str,
        *,
        check_status: bool = True,
        **kwargs: Any,
    ) -> httpx.Response:
        """Make one HTTP request and return the raw response.

        Args:
            method: HTTP method (GET, POST, PUT, ...)
            endpoint: Path relative to base_url, or an absolute URL
            check_status: Raise on non-2xx statuses (default: True)
            **kwargs: Passed through to httpx (json, content, headers, ...)

        Returns:
            The httpx response

        Raises:
            NetworkFailure: On transport errors, or non-2xx when check_status
        """
        if not self._client:
            raise RuntimeError("Client not initialized. Use with context manager.")

        if self.base_url and not endpoint.startswith(("/", "http://", "https://")):
            endpoint = f"/{endpoint}"

        logger.debug("%s %s%s", method, self.base_url, endpoint)

        try:
            response = self._client.request(method, endpoint, **kwargs)
        except httpx.HTTPError as e:
            logger.warning("%s %s failed: %s", method, endpoint, e)
            raise NetworkFailure(f"Request failed: {e}") from e

        logger.debug("Response: %d for %s", response.status_code, endpoint)

        if check_status and not response.is_success:
            error_body = response.text[:500]
            logger.warning(
                "HTTP error: %d %s - %s",
                response.status_code, endpoint, error_body,
            )
            raise NetworkFailure(
                message=f"HTTP request failed: {response.status_code}",
                status_code=response.status_code,
                response_body=error_body,
            )

        return response

    def _request(
        self,
        method: str,
        endpoint: str,
        json_data: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        """Make a request and parse the JSON response body.

        Raises:
            NetworkFailure: On transport errors, non-2xx or invalid JSON
        """
        response = self._send(method, endpoint, json=json_data)
        try:
            return response.json()
        except ValueError as e:
            logger.warning("Failed to parse JSON response: %s", e)
            raise NetworkFailure(
                message=f"Invalid JSON response: {e}",
                status_code=response.status_code,
                response_body=response.text[:500],
            ) from e

    def get(self, endpoint: str) -> dict[str, Any]:
        """Convenience method for JSON GET requests."""
        return self._request("GET", endpoint)

    def post(self, endpoint: str, json_data: dict[str, Any] | None = None) -> dict[str, Any]:
        """Convenience method for JSON POST requests."""
        return self._request("POST", endpoint, json_data=json_data)
