"""
Event ingestion: authenticate, decode, store.

Hooks post one of two body shapes:

    flat:     {"hook_event_name": "...", "session_id": "...", ...}
    wrapped:  {"event": {"hook_event_name": "...", ...},
               "conversation": {...}, "recentConversation": [...],
               "timestamp": "..."}

Both decode to the same EventRecord. Bodies matching neither shape are
rejected rather than filled in with defaults.
"""

import copy
import json
import logging
import secrets
from datetime import datetime, timezone
from typing import Any, Optional

from ..errors import AuthError, MalformedInputError
from .models import EventRecord, IngestResult
from .store import EventStore

logger = logging.getLogger(__name__)


def _reject_constant(name: str):
    # NaN and Infinity are not JSON and cannot be serialized back out
    raise MalformedInputError(f"Invalid JSON constant: {name}")


def _require_str(event: dict, key: str) -> str:
    value = event.get(key)
    if not isinstance(value, str):
        raise MalformedInputError(f"Event is missing required string field '{key}'")
    return value


def decode_event(body: Any, received_at: Optional[str] = None) -> EventRecord:
    """Decode a parsed JSON body into an EventRecord.

    Args:
        body: Parsed JSON value
        received_at: Timestamp used when neither wrapper nor event carries one

    Raises:
        MalformedInputError: If the body is neither the flat nor the wrapped shape.
    """
    if not isinstance(body, dict):
        raise MalformedInputError("Event payload must be a JSON object")

    raw = copy.deepcopy(body)

    if "event" in body:
        event = body["event"]
        if not isinstance(event, dict):
            raise MalformedInputError("Wrapped payload 'event' must be a JSON object")
        context = {k: v for k, v in body.items() if k not in ("event", "timestamp")}
        timestamp = body.get("timestamp") or event.get("timestamp")
    elif "hook_event_name" in body:
        event = body
        context = {}
        timestamp = body.get("timestamp")
    else:
        raise MalformedInputError(
            "Unrecognized payload: expected 'hook_event_name' or a wrapped 'event' object"
        )

    kind = _require_str(event, "hook_event_name")
    session_id = _require_str(event, "session_id")
    session_name = event.get("session_name")

    if not isinstance(timestamp, str) or not timestamp:
        timestamp = received_at or datetime.now(timezone.utc).isoformat()

    return EventRecord(
        kind=kind,
        session_id=session_id,
        session_name=session_name if isinstance(session_name, str) else None,
        timestamp=timestamp,
        payload=copy.deepcopy(event),
        context=copy.deepcopy(context),
        raw=raw,
    )


class EventIngestor:
    """Admits authenticated event bodies into an EventStore."""

    def __init__(self, store: EventStore, api_key: str):
        self._store = store
        self._api_key = api_key

    def check_key(self, api_key: Optional[str]) -> None:
        """Raise AuthError unless api_key matches the configured key."""
        if not api_key or not secrets.compare_digest(
            api_key.encode("utf-8"), self._api_key.encode("utf-8")
        ):
            raise AuthError()

    def ingest(self, body: bytes, api_key: Optional[str]) -> IngestResult:
        """Validate a raw request body and append it to the store.

        Raises:
            AuthError: Missing or wrong key; the store is not touched.
            MalformedInputError: Body is not JSON or has no recognizable shape.
        """
        self.check_key(api_key)

        try:
            parsed = json.loads(body, parse_constant=_reject_constant)
            record = decode_event(parsed)
        except (ValueError, UnicodeDecodeError, RecursionError):
            raise MalformedInputError()

        total = self._store.append(record)

        logger.info(
            f"Received {record.kind} event from session "
            f"{record.session_name or 'unnamed'} ({record.short_session_id or 'unknown'})"
        )
        logger.debug(f"Store now holds {total}/{self._store.capacity} events")

        return IngestResult(total_events=total)
