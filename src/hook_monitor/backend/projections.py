"""
Read-only projections over a snapshot of the event store.

Every function takes the records newest first (as EventStore.snapshot()
returns them) and recomputes its view from scratch.
"""

from typing import Any, Iterable, Optional

from .models import (
    Badge, ChatMessage, EventDetails, EventRecord, FileOperation, Stats, TimelineEntry,
)

POST_TOOL_USE = "PostToolUse"
USER_PROMPT_SUBMIT = "UserPromptSubmit"

FILE_TOOLS = ("Read", "Write", "Edit", "Glob", "Grep")
MODIFYING_TOOLS = ("Write", "Edit")

# Dedup fingerprint length for chat messages
CHAT_PREFIX_LENGTH = 50

_BADGES = {
    "session": Badge(category="session", css_class="badge-session", icon="🏁"),
    "prompt": Badge(category="prompt", css_class="badge-prompt", icon="👤"),
    "tool": Badge(category="tool", css_class="badge-tool", icon="🛠️"),
    "stop": Badge(category="stop", css_class="badge-stop", icon="🛑"),
    "other": Badge(category="other", css_class="badge-other", icon="📝"),
}

_KIND_CATEGORIES = {
    "SessionStart": "session",
    "SessionEnd": "session",
    "UserPromptSubmit": "prompt",
    "PreToolUse": "tool",
    "PostToolUse": "tool",
    "Stop": "stop",
    "SubagentStop": "stop",
}


def badge_for(kind: str) -> Badge:
    """Map an event kind to its timeline badge."""
    return _BADGES[_KIND_CATEGORIES.get(kind, "other")]


def extract_path(record: EventRecord) -> Optional[str]:
    """Best path-like value for a record.

    Tries tool_input.file_path, tool_input.path, tool_input.pattern, then cwd.
    """
    tool_input = record.tool_input
    for key in ("file_path", "path", "pattern"):
        value = tool_input.get(key)
        if isinstance(value, str) and value:
            return value
    cwd = record.payload.get("cwd")
    return cwd if isinstance(cwd, str) and cwd else None


def timeline(records: Iterable[EventRecord]) -> list[TimelineEntry]:
    """One entry per record, newest first."""
    return [
        TimelineEntry(
            kind=record.kind,
            badge=badge_for(record.kind),
            timestamp=record.timestamp,
            session_id=record.short_session_id,
            session_name=record.session_name or "Unknown",
            details=EventDetails(
                message=record.prompt,
                tool=record.tool_name,
                path=extract_path(record),
            ),
        )
        for record in records
    ]


def _assistant_message(entry: Any, fallback_timestamp: str) -> Optional[ChatMessage]:
    """Build an assistant message from one transcript entry, if it is one."""
    if not isinstance(entry, dict) or entry.get("type") != "assistant":
        return None
    message = entry.get("message")
    if not isinstance(message, dict):
        return None

    blocks = message.get("content")
    text_parts: list[str] = []
    thinking_parts: list[str] = []
    if isinstance(blocks, str):
        text_parts.append(blocks)
    elif isinstance(blocks, list):
        for block in blocks:
            if not isinstance(block, dict):
                continue
            if block.get("type") == "text" and isinstance(block.get("text"), str):
                text_parts.append(block["text"])
            elif block.get("type") == "thinking" and isinstance(block.get("thinking"), str):
                thinking_parts.append(block["thinking"])

    content = "\n".join(text_parts)
    thinking = "\n".join(thinking_parts)
    if not content and not thinking:
        return None

    timestamp = entry.get("timestamp")
    return ChatMessage(
        role="assistant",
        content=content,
        thinking=thinking or None,
        timestamp=timestamp if isinstance(timestamp, str) and timestamp else fallback_timestamp,
    )


def _conversation_entries(record: EventRecord) -> list[Any]:
    entries: list[Any] = []
    recent = record.context.get("recentConversation")
    if isinstance(recent, list):
        entries.extend(recent)
    last = record.context.get("conversation")
    if last is not None:
        entries.append(last)
    return entries


def chat_messages(records: Iterable[EventRecord]) -> list[ChatMessage]:
    """User prompts and assistant replies, oldest first.

    The same transcript lines arrive again with every later event, so messages
    are deduplicated on role plus the first CHAT_PREFIX_LENGTH characters of
    content; the first occurrence wins. Distinct messages sharing that prefix
    collapse into one.
    """
    messages: list[ChatMessage] = []
    seen: set[str] = set()

    def add(message: ChatMessage) -> None:
        key = f"{message.role}:{message.content[:CHAT_PREFIX_LENGTH]}"
        if key in seen:
            return
        seen.add(key)
        messages.append(message)

    for record in reversed(list(records)):
        if record.kind == USER_PROMPT_SUBMIT and record.prompt:
            add(ChatMessage(role="user", content=record.prompt, timestamp=record.timestamp))

        for entry in _conversation_entries(record):
            message = _assistant_message(entry, record.timestamp)
            if message:
                add(message)

    return messages


def file_operations(records: Iterable[EventRecord]) -> list[FileOperation]:
    """File-touching tool invocations, newest first."""
    return [
        FileOperation(
            tool=record.tool_name,
            path=extract_path(record),
            timestamp=record.timestamp,
            session_id=record.short_session_id,
            details=record.tool_input,
        )
        for record in records
        if record.kind == POST_TOOL_USE and record.tool_name in FILE_TOOLS
    ]


def stats(records: Iterable[EventRecord]) -> Stats:
    """Aggregate counts in a single pass."""
    result = Stats()
    sessions: set[str] = set()

    for record in records:
        result.total_events += 1
        result.events_by_kind[record.kind] = result.events_by_kind.get(record.kind, 0) + 1
        if record.session_id:
            sessions.add(record.session_id)
        if record.kind == POST_TOOL_USE:
            result.tool_uses += 1
            tool = record.tool_name or "unknown"
            result.tools_by_name[tool] = result.tools_by_name.get(tool, 0) + 1
            if tool in MODIFYING_TOOLS:
                result.files_modified += 1

    result.sessions = len(sessions)
    return result
