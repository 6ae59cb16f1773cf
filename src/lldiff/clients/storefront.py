"""App store page client.

Fetches raw storefront HTML with a browser-like User-Agent. Version
extraction lives in lldiff.pipeline.versions so it can be tested without
network access.

Usage:
    with StorefrontClient(user_agent=settings.web_ua) as store:
        html = store.fetch_page(settings.apple_url)
"""

from lldiff.clients.base import BaseClient


class StorefrontClient(BaseClient):
    """Client for app store product pages.

    Args:
        user_agent: Browser-like User-Agent header value
    """

    def __init__(self, user_agent: str) -> None:
        super().__init__(headers={"User-Agent": user_agent})

    def fetch_page(self, url: str) -> str:
        """Fetch a page and return its body text.

        Raises:
            NetworkFailure: On transport errors or non-2xx status
        """
        return self._send("GET", url).text
