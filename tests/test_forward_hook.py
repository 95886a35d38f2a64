"""
Tests for the forwarding hook and its backend client.

Tests cover:
- Payload wrapping with session name and transcript context
- Request headers sent to the event server
- Error mapping (timeout, connection failure, HTTP error)
- The hook always answers continue: true
"""

import json

import httpx
import pytest

from hook_monitor.config import HookConfig
from hook_monitor.errors import UpstreamError, UpstreamTimeoutError, UpstreamUnavailableError
from hook_monitor.hooks.client import BackendClient
from hook_monitor.hooks.forward import build_payload, run
from hook_monitor.hooks.session_names import SessionNames, derive_session_name

BACKEND_URL = "http://backend.test/events"


@pytest.fixture
def names(tmp_path):
    return SessionNames(tmp_path / "session-names.json")


@pytest.fixture
def config(tmp_path):
    return HookConfig(
        backend_url=BACKEND_URL,
        api_key="secret",
        timeout=1.0,
        transcript_lines=2,
        session_names_file=tmp_path / "session-names.json",
    )


@pytest.fixture
def transcript(tmp_path):
    path = tmp_path / "transcript.jsonl"
    lines = [
        {"type": "user", "message": {"role": "user", "content": "hi"}},
        {"type": "assistant", "message": {"role": "assistant", "content": [{"type": "text", "text": "one"}]}},
        {"type": "assistant", "message": {"role": "assistant", "content": [{"type": "text", "text": "two"}]}},
    ]
    path.write_text("\n".join(json.dumps(line) for line in lines) + "\n")
    return path


def make_client(handler, timeout=1.0):
    return BackendClient(BACKEND_URL, "secret", timeout=timeout, transport=httpx.MockTransport(handler))


class TestBuildPayload:
    """Tests for build_payload()."""

    def test_wraps_event(self, names):
        raw = {"hook_event_name": "SessionStart", "session_id": "ses_1"}
        payload = build_payload(raw, names, now="2025-01-01T00:00:00Z")

        assert payload["event"]["hook_event_name"] == "SessionStart"
        assert payload["event"]["session_name"] == derive_session_name("ses_1")
        assert payload["conversation"] is None
        assert payload["recentConversation"] == []
        assert payload["timestamp"] == "2025-01-01T00:00:00Z"

    def test_adds_transcript_context(self, names, transcript):
        raw = {"hook_event_name": "Stop", "session_id": "ses_1", "transcript_path": str(transcript)}
        payload = build_payload(raw, names, transcript_lines=2)

        assert payload["conversation"]["message"]["content"][0]["text"] == "two"
        assert [e["message"]["content"][0]["text"] for e in payload["recentConversation"]] == ["one", "two"]

    def test_missing_transcript_degrades(self, names, tmp_path):
        raw = {"hook_event_name": "Stop", "session_id": "ses_1",
               "transcript_path": str(tmp_path / "missing.jsonl")}
        payload = build_payload(raw, names)

        assert payload["conversation"] is None
        assert payload["recentConversation"] == []

    def test_no_session_id(self, names):
        payload = build_payload({"hook_event_name": "Notification"}, names)
        assert payload["event"]["session_name"] == "unknown"


class TestBackendClient:
    """Tests for BackendClient.post_event()."""

    def test_sends_headers_and_body(self):
        seen = {}

        def handler(request: httpx.Request):
            seen["headers"] = request.headers
            seen["body"] = json.loads(request.content)
            return httpx.Response(
                200,
                json={"success": True, "message": "Event received", "total_events": 3},
                headers={"X-Server-Version": "1.0.0", "X-Events-Count": "3"},
            )

        payload = {"event": {"hook_event_name": "Stop", "session_id": "s"}}
        result = make_client(handler).post_event(payload)

        assert result["total_events"] == 3
        assert seen["headers"]["X-API-Key"] == "secret"
        assert seen["headers"]["X-Hook-Event"] == "Stop"
        assert seen["body"] == payload

    def test_timeout(self):
        def handler(request):
            raise httpx.ReadTimeout("timed out", request=request)

        with pytest.raises(UpstreamTimeoutError):
            make_client(handler).post_event({"hook_event_name": "Stop"})

    def test_connection_failure(self):
        def handler(request):
            raise httpx.ConnectError("refused", request=request)

        with pytest.raises(UpstreamUnavailableError):
            make_client(handler).post_event({"hook_event_name": "Stop"})

    def test_http_error(self):
        def handler(request):
            return httpx.Response(401, json={"success": False, "error": "Invalid API key"})

        with pytest.raises(UpstreamError) as exc_info:
            make_client(handler).post_event({"hook_event_name": "Stop"})
        assert exc_info.value.status_code == 401


class TestRun:
    """Tests for the hook entry logic."""

    def test_success_message(self, config):
        def handler(request):
            return httpx.Response(200, json={"success": True, "message": "Event received"})

        output = run(json.dumps({"hook_event_name": "Stop", "session_id": "s"}), config, make_client(handler))
        assert output == {"continue": True, "message": "Event received"}

    def test_backend_down_still_continues(self, config):
        def handler(request):
            raise httpx.ConnectError("refused", request=request)

        output = run(json.dumps({"hook_event_name": "Stop", "session_id": "s"}), config, make_client(handler))

        assert output["continue"] is True
        assert "Backend hook error" in output["message"]

    def test_invalid_stdin_still_continues(self, config):
        def handler(request):
            pytest.fail("no request expected")

        output = run("not json", config, make_client(handler))
        assert output["continue"] is True

    def test_rejected_key_still_continues(self, config):
        def handler(request):
            return httpx.Response(401, json={"success": False, "error": "Invalid API key"})

        output = run(json.dumps({"hook_event_name": "Stop", "session_id": "s"}), config, make_client(handler))

        assert output["continue"] is True
        assert "401" in output["message"]
