"""NotificationBatcher — deliver the change report as one forward bundle.

Protocol, strictly ordered:
  1. Summary private message (versions, time, every changed path)
  2. One private message per rendered file, in change-set order
  3. One group forward message referencing every id collected above

Steps 1 and 2 degrade per message: a failed send is logged with the raw
response and its id is left out. Only a failed step 3 is an error.
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from enum import Enum

from lldiff.clients import MessageSegment, OneBotClient
from lldiff.config import Settings, settings as default_settings
from lldiff.errors import BackendRejected, ConfigMissing, NetworkFailure
from lldiff.pipeline.renderer import RenderedImage
from lldiff.pipeline.versions import VersionPair

logger = logging.getLogger(__name__)

TAG = "[link-like-diff]"


class MessageRole(str, Enum):
    SUMMARY = "summary"
    PER_FILE = "per-file"


@dataclass(frozen=True)
class MessageRecord:
    """A successfully sent private message, in send order."""

    message_id: int
    role: MessageRole
    source_path: str | None = None


def build_summary_text(
    versions: VersionPair | None,
    changed: list[str],
    now: datetime | None = None,
) -> str:
    """Summary message body: time, versions and one bullet per path."""
    now = now or datetime.now()
    client = versions.client_version if versions else "unknown"
    resource = versions.resource_version if versions else "unknown"
    lines = [
        f"{TAG} 更新摘要",
        "━━━━━━━━━━━━━━━━━━",
        f"🕐 时间：{now.strftime('%Y-%m-%d %H:%M:%S')}",
        f"📦 客户端版本：{client or 'unknown'}",
        f"🗂 资源版本：{resource or 'unknown'}",
        "",
        f"📄 变更文件（{len(changed)} 个）：",
    ]
    lines.extend(f"  • {path}" for path in changed)
    return "\n".join(lines)


class NotificationBatcher:
    """Sends the summary, per-file messages and the forward bundle.

    Args:
        config: Settings override
        client: OneBot client override (default: built from settings)
    """

    def __init__(self, config: Settings | None = None, client: OneBotClient | None = None) -> None:
        self.config = config or default_settings
        self._client = client

    def _make_client(self) -> OneBotClient:
        if self._client is not None:
            return self._client
        return OneBotClient(base_url=self.config.onebot_url, token=self.config.onebot_token)

    def check_config(self) -> None:
        """Raise ConfigMissing if any notification target is unset."""
        missing = self.config.missing_notify_fields()
        if missing:
            logger.error("Missing required environment variables: %s", " ".join(missing))
            raise ConfigMissing(missing)

    def notify(
        self,
        versions: VersionPair | None,
        changed: list[str],
        images: dict[str, RenderedImage],
    ) -> list[MessageRecord]:
        """Run the three-step notification protocol.

        Args:
            versions: Resolved versions for the summary (None -> "unknown")
            changed: Change set in order
            images: Rendered images keyed by source path

        Returns:
            Records of the messages that were sent, in send order

        Raises:
            ConfigMissing: Before any HTTP call, if targets are unset
            BackendRejected, NetworkFailure: If the forward call fails
        """
        logger.info("=== Notify (OneBot11) ===")
        self.check_config()

        if not changed:
            logger.info("No changed files – nothing to notify.")
            return []

        records: list[MessageRecord] = []
        with self._make_client() as bot:
            logger.info("Sending metadata summary message...")
            summary = [MessageSegment.text(build_summary_text(versions, changed))]
            message_id = self._send_private(bot, summary, "metadata")
            if message_id is not None:
                logger.info("  metadata message_id: %s", message_id)
                records.append(MessageRecord(message_id, MessageRole.SUMMARY))

            for path in changed:
                image = images.get(path)
                if image is None:
                    logger.debug("No rendered image for %s, skipping.", path)
                    continue

                logger.info("Sending private message for: %s", path)
                segments = [
                    MessageSegment.text(f"{TAG} 变更文件：{path}\n"),
                    MessageSegment.image(image.reference),
                ]
                message_id = self._send_private(bot, segments, path)
                if message_id is not None:
                    logger.info("  message_id: %s", message_id)
                    records.append(MessageRecord(message_id, MessageRole.PER_FILE, path))

            self._forward(bot, [r.message_id for r in records])

        return records

    def _send_private(self, bot: OneBotClient, segments: list[MessageSegment], label: str) -> int | None:
        try:
            return bot.send_private_msg(self.config.notify_user_id, segments)
        except BackendRejected as e:
            logger.warning("send_private_msg (%s) failed: %s", label, e.response_body)
        except NetworkFailure as e:
            logger.warning("send_private_msg (%s) failed: %s", label, e)
        return None

    def _forward(self, bot: OneBotClient, message_ids: list[int]) -> None:
        if not message_ids:
            logger.warning("No message IDs to forward.")
            return

        logger.info("Sending group forward message (%d messages)...", len(message_ids))
        try:
            bot.send_group_forward_msg(self.config.notify_group_id, message_ids)
        except BackendRejected as e:
            logger.error("send_group_forward_msg failed: %s", e.response_body)
            raise
        except NetworkFailure as e:
            logger.error("send_group_forward_msg failed: %s", e)
            raise
        logger.info("Group forward message sent successfully.")
