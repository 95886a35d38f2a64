"""
Tests for event decoding and EventIngestor.

Tests cover:
- Flat and wrapped body shapes decode to the same record
- Rejection of unrecognized shapes
- Authentication and malformed JSON leave the store untouched
- Record immutability
"""

import json

import pytest
from pydantic import ValidationError

from hook_monitor.backend.ingest import EventIngestor, decode_event
from hook_monitor.backend.store import EventStore
from hook_monitor.errors import AuthError, MalformedInputError

API_KEY = "test-key"

FLAT_EVENT = {
    "hook_event_name": "PostToolUse",
    "session_id": "abcdef1234567890",
    "session_name": "brave-otter",
    "timestamp": "2025-01-01T10:00:00Z",
    "tool_name": "Read",
    "tool_input": {"file_path": "/tmp/a.py"},
}


class TestDecodeEvent:
    """Tests for decode_event()."""

    def test_flat_shape(self):
        """Flat body: event fields at top level, no context."""
        record = decode_event(FLAT_EVENT)

        assert record.kind == "PostToolUse"
        assert record.session_id == "abcdef1234567890"
        assert record.session_name == "brave-otter"
        assert record.timestamp == "2025-01-01T10:00:00Z"
        assert record.tool_name == "Read"
        assert record.context == {}
        assert record.raw == FLAT_EVENT

    def test_wrapped_shape_matches_flat(self):
        """Wrapped body decodes to the same kind, session and payload."""
        wrapped = {
            "event": FLAT_EVENT,
            "conversation": {"type": "assistant"},
            "recentConversation": [],
            "timestamp": "2025-01-01T10:00:00Z",
        }
        flat = decode_event(FLAT_EVENT)
        record = decode_event(wrapped)

        assert record.kind == flat.kind
        assert record.session_id == flat.session_id
        assert record.session_name == flat.session_name
        assert record.timestamp == flat.timestamp
        assert record.payload == flat.payload
        assert record.context == {"conversation": {"type": "assistant"}, "recentConversation": []}
        assert record.raw == wrapped

    def test_wrapper_timestamp_wins(self):
        """The wrapper timestamp takes precedence over the event timestamp."""
        record = decode_event({"event": FLAT_EVENT, "timestamp": "2030-01-01T00:00:00Z"})
        assert record.timestamp == "2030-01-01T00:00:00Z"

    def test_missing_timestamp_uses_received_at(self):
        event = {"hook_event_name": "Stop", "session_id": "s1"}
        record = decode_event(event, received_at="2025-06-01T00:00:00Z")
        assert record.timestamp == "2025-06-01T00:00:00Z"

    @pytest.mark.parametrize("body", [
        [1, 2, 3],
        "text",
        42,
        None,
        {"foo": "bar"},
        {"event": "not-an-object"},
        {"event": {"session_id": "s1"}},
        {"hook_event_name": "Stop"},
        {"hook_event_name": 5, "session_id": "s1"},
    ])
    def test_rejects_unrecognized_shapes(self, body):
        """Bodies that match neither shape raise MalformedInputError."""
        with pytest.raises(MalformedInputError):
            decode_event(body)

    def test_record_is_frozen(self):
        record = decode_event(FLAT_EVENT)
        with pytest.raises(ValidationError):
            record.kind = "Stop"

    def test_payload_does_not_alias_input(self):
        """Later changes to the input body do not leak into the record."""
        body = json.loads(json.dumps(FLAT_EVENT))
        record = decode_event(body)
        body["tool_input"]["file_path"] = "/changed"

        assert record.tool_input["file_path"] == "/tmp/a.py"
        assert record.raw["tool_input"]["file_path"] == "/tmp/a.py"


class TestEventIngestor:
    """Tests for EventIngestor.ingest()."""

    @pytest.fixture
    def store(self):
        return EventStore(capacity=3)

    @pytest.fixture
    def ingestor(self, store):
        return EventIngestor(store, api_key=API_KEY)

    def test_ingest_appends(self, ingestor, store):
        result = ingestor.ingest(json.dumps(FLAT_EVENT).encode(), API_KEY)

        assert result.total_events == 1
        assert len(store) == 1
        assert store.snapshot()[0].kind == "PostToolUse"

    @pytest.mark.parametrize("key", [None, "", "wrong-key", "test-key "])
    def test_bad_key_never_mutates(self, ingestor, store, key):
        with pytest.raises(AuthError):
            ingestor.ingest(json.dumps(FLAT_EVENT).encode(), key)
        assert len(store) == 0

    def test_auth_checked_before_parsing(self, ingestor, store):
        """A bad key is reported even when the body is also malformed."""
        with pytest.raises(AuthError):
            ingestor.ingest(b"{not json", "wrong-key")
        assert len(store) == 0

    @pytest.mark.parametrize("body", [
        b"{not json",
        b"",
        b"\xff\xfe",
        b"[1, 2",
        b'{"hook_event_name": "Stop", "session_id": "s", "x": NaN}',
        b'{"hook_event_name": "Stop", "session_id": "s", "x": Infinity}',
        b'{"hook_event_name": "Stop", "session_id": "s", "tool_input": {"n": -Infinity}}',
    ])
    def test_malformed_json_never_mutates(self, ingestor, store, body):
        with pytest.raises(MalformedInputError):
            ingestor.ingest(body, API_KEY)
        assert len(store) == 0

    def test_deeply_nested_body_rejected(self, ingestor, store):
        """Nesting deep enough to exhaust recursion is reported as malformed."""
        depth = 100_000
        body = b'{"hook_event_name": "Stop", "session_id": "s", "x": ' + b"[" * depth + b"]" * depth + b"}"
        with pytest.raises(MalformedInputError):
            ingestor.ingest(body, API_KEY)
        assert len(store) == 0

    def test_snapshot_records_cannot_be_changed(self, ingestor, store):
        """Editing a snapshot's nested payload leaves the stored record intact."""
        ingestor.ingest(json.dumps(FLAT_EVENT).encode(), API_KEY)

        copy = store.snapshot()[0]
        copy.payload["tool_name"] = "Write"
        copy.tool_input["file_path"] = "/changed"
        copy.raw.clear()

        stored = store.snapshot()[0]
        assert stored.tool_name == "Read"
        assert stored.tool_input["file_path"] == "/tmp/a.py"
        assert stored.raw == FLAT_EVENT

    def test_logs_received_event(self, ingestor, caplog):
        """A diagnostic line names the kind, session name and short id."""
        with caplog.at_level("INFO", logger="hook_monitor.backend.ingest"):
            ingestor.ingest(json.dumps(FLAT_EVENT).encode(), API_KEY)

        assert "Received PostToolUse event from session brave-otter (abcdef12)" in caplog.text

    def test_logs_unnamed_session(self, ingestor, caplog):
        event = {"hook_event_name": "Stop", "session_id": "1234567890"}
        with caplog.at_level("INFO", logger="hook_monitor.backend.ingest"):
            ingestor.ingest(json.dumps(event).encode(), API_KEY)

        assert "from session unnamed (12345678)" in caplog.text
