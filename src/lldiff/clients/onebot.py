"""OneBot v11 HTTP API client.

Provides the two calls the notify stage needs:
- send_private_msg: one message (text + optional image) to a user
- send_group_forward_msg: bundle earlier messages, by id, into one
  forward message posted to a group

API Documentation: https://github.com/botuniverse/onebot-11

A call succeeds only when the JSON body reports ``"status": "ok"``.
Anything else raises BackendRejected carrying the raw body.

Usage:
    with OneBotClient(base_url=settings.onebot_url, token=settings.onebot_token) as bot:
        msg_id = bot.send_private_msg(10001, [MessageSegment.text("hello")])
        bot.send_group_forward_msg(20002, [msg_id])
"""

import logging
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from lldiff.clients.base import BaseClient
from lldiff.errors import BackendRejected

logger = logging.getLogger(__name__)


class MessageSegment(BaseModel):
    """One segment of a OneBot message array."""

    type: str
    data: dict[str, Any] = Field(default_factory=dict)

    @classmethod
    def text(cls, text: str) -> "MessageSegment":
        return cls(type="text", data={"text": text})

    @classmethod
    def image(cls, file: str) -> "MessageSegment":
        """Image segment; ``file`` is an http(s):// or file:// URI."""
        return cls(type="image", data={"file": file})

    @classmethod
    def node(cls, message_id: int) -> "MessageSegment":
        """Forward node referencing an already-sent message."""
        return cls(type="node", data={"id": message_id})


class PrivateMessageRequest(BaseModel):
    user_id: int
    message: list[MessageSegment]


class GroupForwardRequest(BaseModel):
    group_id: int
    messages: list[MessageSegment]


class OneBotResponse(BaseModel):
    """Parsed OneBot action response."""

    model_config = ConfigDict(extra="allow")

    status: str | None = None
    retcode: int | None = None
    data: dict[str, Any] | None = None

    @property
    def ok(self) -> bool:
        return self.status == "ok"

    @property
    def message_id(self) -> int | None:
        if not self.data:
            return None
        value = self.data.get("message_id")
        return value if isinstance(value, int) and not isinstance(value, bool) else None


class OneBotClient(BaseClient):
    """Client for a OneBot v11 HTTP endpoint.

    Args:
        base_url: API base URL (e.g. http://127.0.0.1:3000)
        token: Optional bearer token
    """

    def __init__(self, base_url: str, token: str | None = None) -> None:
        headers = {"Content-Type": "application/json"}
        if token:
            headers["Authorization"] = f"Bearer {token}"
        super().__init__(base_url=base_url, headers=headers)

    def _call(self, action: str, payload: BaseModel) -> OneBotResponse:
        """POST an action and validate its status field.

        Raises:
            NetworkFailure: Transport error or non-2xx status
            BackendRejected: Body unparsable or status is not "ok"
        """
        response = self._send("POST", f"/{action}", json=payload.model_dump())
        body = response.text
        try:
            parsed = OneBotResponse.model_validate_json(body)
        except ValidationError as e:
            raise BackendRejected(f"{action}: unparsable response ({e.error_count()} errors)", body) from e

        if not parsed.ok:
            raise BackendRejected(f"{action}: status={parsed.status!r}", body)
        return parsed

    def send_private_msg(self, user_id: int, segments: list[MessageSegment]) -> int:
        """Send a private message.

        Returns:
            The backend-assigned message id

        Raises:
            NetworkFailure, BackendRejected
        """
        parsed = self._call(
            "send_private_msg",
            PrivateMessageRequest(user_id=user_id, message=segments),
        )
        if parsed.message_id is None:
            raise BackendRejected("send_private_msg: response has no message_id", parsed.model_dump_json())
        return parsed.message_id

    def send_group_forward_msg(self, group_id: int, message_ids: list[int]) -> OneBotResponse:
        """Forward previously sent messages to a group as one bundle.

        Raises:
            NetworkFailure, BackendRejected
        """
        return self._call(
            "send_group_forward_msg",
            GroupForwardRequest(
                group_id=group_id,
                messages=[MessageSegment.node(mid) for mid in message_ids],
            ),
        )
