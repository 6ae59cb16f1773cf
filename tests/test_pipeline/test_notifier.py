"""Tests for NotificationBatcher — summary, per-file sends and forward bundle."""

import json
from datetime import datetime

import httpx
import pytest

from lldiff.config import Settings
from lldiff.errors import BackendRejected, ConfigMissing
from lldiff.pipeline.notifier import MessageRole, NotificationBatcher, build_summary_text
from lldiff.pipeline.renderer import RenderedImage
from lldiff.pipeline.versions import VersionPair

BASE = "http://onebot.local:3000"
PRIVATE = f"{BASE}/send_private_msg"
FORWARD = f"{BASE}/send_group_forward_msg"
VERSIONS = VersionPair(client_version="4.2.0", resource_version="R2510100")


# --- Fixtures ---


def make_settings(**overrides) -> Settings:
    values = dict(onebot_url=BASE, notify_user_id=10001, notify_group_id=20002, onebot_token=None)
    values.update(overrides)
    return Settings(_env_file=None, **values)


def ok(message_id: int) -> httpx.Response:
    return httpx.Response(200, json={"status": "ok", "retcode": 0, "data": {"message_id": message_id}})


def failed() -> httpx.Response:
    return httpx.Response(200, json={"status": "failed", "retcode": 100, "data": None})


def sent_bodies(route) -> list[dict]:
    return [json.loads(call.request.content) for call in route.calls]


def forwarded_ids(route) -> list[int]:
    body = json.loads(route.calls.last.request.content)
    return [node["data"]["id"] for node in body["messages"]]


@pytest.fixture
def images(tmp_path):
    """Both files rendered; only characters.yaml uploaded."""
    return {
        "characters.yaml": RenderedImage(
            "characters.yaml",
            tmp_path / "characters.yaml.jpg",
            "https://files.example.com/images/characters.yaml.jpg",
        ),
        "events.yaml": RenderedImage("events.yaml", tmp_path / "events.yaml.jpg"),
    }


# --- Tests ---


class TestSummaryText:
    """Tests for the summary message body."""

    def test_contains_versions_time_and_paths(self):
        """Summary lists time, both versions, count and every path."""
        text = build_summary_text(VERSIONS, ["b.yaml", "a.yaml"], now=datetime(2026, 10, 18, 9, 30, 0))

        assert "2026-10-18 09:30:00" in text
        assert "4.2.0" in text
        assert "R2510100" in text
        assert "（2 个）" in text
        assert text.index("  • b.yaml") < text.index("  • a.yaml")

    def test_unknown_versions(self):
        """Missing versions render as unknown."""
        text = build_summary_text(None, ["a.yaml"])
        assert text.count("unknown") == 2


class TestConfig:
    """Tests for the configuration pre-check."""

    @pytest.mark.parametrize("field", ["onebot_url", "notify_user_id", "notify_group_id"])
    def test_missing_field_fails_before_http(self, respx_mock, field, images):
        """Any unset target raises ConfigMissing and makes no request."""
        batcher = NotificationBatcher(make_settings(**{field: None}))

        with pytest.raises(ConfigMissing) as exc_info:
            batcher.notify(VERSIONS, ["characters.yaml"], images)

        assert field.upper() in exc_info.value.fields
        assert len(respx_mock.calls) == 0

    def test_all_missing_listed(self):
        """Every missing name is reported."""
        batcher = NotificationBatcher(make_settings(onebot_url=None, notify_user_id=None, notify_group_id=None))

        with pytest.raises(ConfigMissing) as exc_info:
            batcher.check_config()

        assert exc_info.value.fields == ["ONEBOT_URL", "NOTIFY_USER_ID", "NOTIFY_GROUP_ID"]


class TestNotify:
    """Tests for the three-step protocol."""

    def test_upload_mixed_scenario(self, respx_mock, images):
        """1 summary + 2 file sends; forward bundles 3 ids in send order."""
        private = respx_mock.post(PRIVATE).mock(side_effect=[ok(101), ok(102), ok(103)])
        forward = respx_mock.post(FORWARD).mock(return_value=ok(900))

        records = NotificationBatcher(make_settings()).notify(
            VERSIONS, ["characters.yaml", "events.yaml"], images,
        )

        assert private.call_count == 3
        bodies = sent_bodies(private)
        assert all(b["user_id"] == 10001 for b in bodies)
        assert [seg["type"] for seg in bodies[0]["message"]] == ["text"]
        assert bodies[1]["message"][1] == {
            "type": "image",
            "data": {"file": "https://files.example.com/images/characters.yaml.jpg"},
        }
        assert "characters.yaml" in bodies[1]["message"][0]["data"]["text"]
        assert bodies[2]["message"][1]["data"]["file"].startswith("file://")

        assert forward.call_count == 1
        assert json.loads(forward.calls.last.request.content)["group_id"] == 20002
        assert forwarded_ids(forward) == [101, 102, 103]
        assert [r.role for r in records] == [MessageRole.SUMMARY, MessageRole.PER_FILE, MessageRole.PER_FILE]
        assert [r.source_path for r in records] == [None, "characters.yaml", "events.yaml"]

    def test_unrendered_file_skipped(self, respx_mock, images):
        """Files without an image get no message but stay in the summary."""
        del images["events.yaml"]
        private = respx_mock.post(PRIVATE).mock(side_effect=[ok(201), ok(202)])
        forward = respx_mock.post(FORWARD).mock(return_value=ok(900))

        NotificationBatcher(make_settings()).notify(VERSIONS, ["characters.yaml", "events.yaml"], images)

        assert private.call_count == 2
        summary_text = sent_bodies(private)[0]["message"][0]["data"]["text"]
        assert "events.yaml" in summary_text
        assert forwarded_ids(forward) == [201, 202]

    def test_failed_send_omitted_from_forward(self, respx_mock, images):
        """A rejected per-file send is logged and left out; order is kept."""
        private = respx_mock.post(PRIVATE).mock(side_effect=[ok(301), failed(), ok(303)])
        forward = respx_mock.post(FORWARD).mock(return_value=ok(900))

        records = NotificationBatcher(make_settings()).notify(
            VERSIONS, ["characters.yaml", "events.yaml"], images,
        )

        assert private.call_count == 3
        assert forwarded_ids(forward) == [301, 303]
        assert [r.message_id for r in records] == [301, 303]

    def test_failed_summary_omitted(self, respx_mock, images):
        """A failed summary only drops its own id."""
        respx_mock.post(PRIVATE).mock(side_effect=[failed(), ok(402), ok(403)])
        forward = respx_mock.post(FORWARD).mock(return_value=ok(900))

        NotificationBatcher(make_settings()).notify(VERSIONS, ["characters.yaml", "events.yaml"], images)

        assert forwarded_ids(forward) == [402, 403]

    def test_transport_error_on_send_not_fatal(self, respx_mock, images):
        """An HTTP-level send failure is recovered like a rejection."""
        respx_mock.post(PRIVATE).mock(side_effect=[ok(501), httpx.Response(502), ok(503)])
        forward = respx_mock.post(FORWARD).mock(return_value=ok(900))

        NotificationBatcher(make_settings()).notify(VERSIONS, ["characters.yaml", "events.yaml"], images)

        assert forwarded_ids(forward) == [501, 503]

    @pytest.mark.respx(assert_all_called=False)
    def test_no_ids_no_forward(self, respx_mock, images):
        """If every send fails the forward call is skipped."""
        respx_mock.post(PRIVATE).mock(return_value=failed())
        forward = respx_mock.post(FORWARD).mock(return_value=ok(900))

        records = NotificationBatcher(make_settings()).notify(
            VERSIONS, ["characters.yaml", "events.yaml"], images,
        )

        assert records == []
        assert forward.call_count == 0

    def test_forward_rejection_escalates(self, respx_mock, images):
        """A rejected forward call raises."""
        respx_mock.post(PRIVATE).mock(side_effect=[ok(1), ok(2), ok(3)])
        respx_mock.post(FORWARD).mock(return_value=failed())

        with pytest.raises(BackendRejected):
            NotificationBatcher(make_settings()).notify(
                VERSIONS, ["characters.yaml", "events.yaml"], images,
            )

    def test_at_most_n_plus_one_sends(self, respx_mock, tmp_path):
        """N files never produce more than N+1 private sends."""
        paths = [f"f{i}.yaml" for i in range(5)]
        rendered = {p: RenderedImage(p, tmp_path / f"{p}.jpg") for p in paths}
        private = respx_mock.post(PRIVATE).mock(side_effect=[ok(i) for i in range(6)])
        forward = respx_mock.post(FORWARD).mock(return_value=ok(900))

        NotificationBatcher(make_settings()).notify(VERSIONS, paths, rendered)

        assert private.call_count == 6
        assert forward.call_count == 1
        assert forwarded_ids(forward) == list(range(6))

    def test_empty_change_set_sends_nothing(self, respx_mock):
        """Nothing changed: no HTTP calls at all."""
        assert NotificationBatcher(make_settings()).notify(VERSIONS, [], {}) == []
        assert len(respx_mock.calls) == 0

    def test_bearer_token(self, respx_mock, images):
        """Configured token is sent on every call."""
        private = respx_mock.post(PRIVATE).mock(side_effect=[ok(1), ok(2), ok(3)])
        forward = respx_mock.post(FORWARD).mock(return_value=ok(900))

        NotificationBatcher(make_settings(onebot_token="tok")).notify(
            VERSIONS, ["characters.yaml", "events.yaml"], images,
        )

        assert all(c.request.headers["Authorization"] == "Bearer tok" for c in private.calls)
        assert forward.calls.last.request.headers["Authorization"] == "Bearer tok"
