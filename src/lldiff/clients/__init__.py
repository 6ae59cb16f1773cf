"""HTTP client layer for link-like-diff.

Synchronous httpx clients for:
- App store pages: client version discovery
- Game login API: resource version discovery
- OneBot v11: private messages and group forward bundles
- dufs: rendered image upload
"""

from lldiff.clients.base import BaseClient
from lldiff.clients.dufs import DufsUploader
from lldiff.clients.game_api import GameAPIClient
from lldiff.clients.onebot import MessageSegment, OneBotClient, OneBotResponse
from lldiff.clients.storefront import StorefrontClient

__all__ = [
    "BaseClient",
    "DufsUploader",
    "GameAPIClient",
    "MessageSegment",
    "OneBotClient",
    "OneBotResponse",
    "StorefrontClient",
]
