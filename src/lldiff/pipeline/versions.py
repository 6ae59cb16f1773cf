"""VersionResolver — discover the current client and resource versions.

Client version: App Store page first, Google Play page second; the first
non-empty token wins. Resource version: ``x-res-version`` header of one
login request carrying the client version. Every lookup is a single attempt.
"""

import logging
import re
from dataclasses import dataclass

from lldiff.clients import GameAPIClient, StorefrontClient
from lldiff.config import Settings, settings as default_settings
from lldiff.errors import NetworkFailure, VersionUnavailable

logger = logging.getLogger(__name__)

_APPLE_PATTERN = re.compile(r'"primarySubtitle":"(\d+\.\d+\.\d+)"')
_GOOGLE_PLAY_PATTERN = re.compile(r'\[\["(\d+\.\d+\.\d+)"\]\]')


@dataclass(frozen=True)
class VersionPair:
    """Client/resource version pair resolved once per run."""

    client_version: str
    resource_version: str

    def __str__(self) -> str:
        return f"client={self.client_version} res={self.resource_version}"


def extract_apple_version(text: str) -> str | None:
    """First dotted triple under the App Store ``primarySubtitle`` key."""
    match = _APPLE_PATTERN.search(text or "")
    return match.group(1) if match else None


def extract_google_play_version(text: str) -> str | None:
    """First ``[["x.y.z"]]`` token in a Google Play page."""
    match = _GOOGLE_PLAY_PATTERN.search(text or "")
    return match.group(1) if match else None


class VersionResolver:
    """Resolves a VersionPair from the storefronts and the login API.

    Usage:
        pair = VersionResolver().resolve()
        print(pair.client_version, pair.resource_version)
    """

    def __init__(self, config: Settings | None = None) -> None:
        self.config = config or default_settings

    def _scrape(self, store: StorefrontClient, url: str, extract) -> str | None:
        try:
            page = store.fetch_page(url)
        except NetworkFailure as e:
            logger.warning("Storefront fetch failed for %s: %s", url, e)
            return None
        return extract(page)

    def resolve_client_version(self) -> str:
        """Client version from the primary, then the secondary storefront.

        Raises:
            VersionUnavailable: If neither page yields a version
        """
        logger.info("Fetching client version from Apple App Store...")
        with StorefrontClient(user_agent=self.config.web_ua) as store:
            version = self._scrape(store, self.config.apple_url, extract_apple_version)
            if not version:
                logger.warning("Apple App Store failed, trying Google Play...")
                version = self._scrape(
                    store, self.config.google_play_url, extract_google_play_version,
                )

        if not version:
            logger.error("Failed to detect client version.")
            raise VersionUnavailable("Failed to detect client version")

        logger.info("Client version: %s", version)
        return version

    def resolve_resource_version(self, client_version: str) -> str:
        """Resource version from one login request.

        Raises:
            VersionUnavailable: On transport failure or a missing header
        """
        logger.info("Fetching resource version from API...")
        try:
            with GameAPIClient(
                endpoint=self.config.api_endpoint,
                placeholder_res_version=self.config.placeholder_res_version,
            ) as api:
                res_version = api.fetch_res_version(client_version)
        except NetworkFailure as e:
            logger.error("Resource version lookup failed: %s", e)
            raise VersionUnavailable(f"Failed to detect resource version: {e}") from e

        if not res_version:
            logger.error("Failed to detect resource version.")
            raise VersionUnavailable("Failed to detect resource version")

        logger.info("Resource version: %s", res_version)
        return res_version

    def resolve(self) -> VersionPair:
        """Resolve both versions.

        Raises:
            VersionUnavailable: If either version cannot be discovered
        """
        logger.info("=== Version Detection ===")
        client_version = self.resolve_client_version()
        resource_version = self.resolve_resource_version(client_version)
        return VersionPair(client_version=client_version, resource_version=resource_version)
