from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field


class EventRecord(BaseModel):
    """One normalized hook notification, as held by the event store."""

    model_config = ConfigDict(frozen=True)

    kind: str  # hook_event_name: 'SessionStart' | 'UserPromptSubmit' | 'PostToolUse' | 'Stop' | ...
    session_id: str
    session_name: Optional[str] = None
    timestamp: str
    # Hook event fields (tool_name, tool_input, prompt, cwd, ...)
    payload: dict[str, Any] = Field(default_factory=dict)
    # Wrapper context sent alongside the event (conversation, recentConversation)
    context: dict[str, Any] = Field(default_factory=dict)
    # Complete body as received
    raw: dict[str, Any] = Field(default_factory=dict)

    @property
    def short_session_id(self) -> str:
        return self.session_id[:8]

    @property
    def tool_name(self) -> Optional[str]:
        value = self.payload.get("tool_name")
        return value if isinstance(value, str) else None

    @property
    def tool_input(self) -> dict[str, Any]:
        value = self.payload.get("tool_input")
        return value if isinstance(value, dict) else {}

    @property
    def prompt(self) -> Optional[str]:
        value = self.payload.get("prompt")
        return value if isinstance(value, str) and value else None


class IngestResult(BaseModel):
    """Outcome of a successful ingestion."""
    total_events: int


class IngestResponse(BaseModel):
    success: bool = True
    message: str = "Event received"
    total_events: int


class ErrorResponse(BaseModel):
    success: bool = False
    error: str


class HealthResponse(BaseModel):
    status: str = "healthy"
    events_count: int
    uptime_seconds: int


# ---------- Projections ----------

class Badge(BaseModel):
    """Coarse category shown next to a timeline entry."""
    category: str  # 'session' | 'prompt' | 'tool' | 'stop' | 'other'
    css_class: str
    icon: str


class EventDetails(BaseModel):
    message: Optional[str] = None
    tool: Optional[str] = None
    path: Optional[str] = None


class TimelineEntry(BaseModel):
    kind: str
    badge: Badge
    timestamp: str
    session_id: str
    session_name: str
    details: EventDetails


class ChatMessage(BaseModel):
    role: str  # 'user' | 'assistant'
    content: str
    thinking: Optional[str] = None
    timestamp: str


class FileOperation(BaseModel):
    tool: str
    path: Optional[str] = None
    timestamp: str
    session_id: str
    details: dict[str, Any] = Field(default_factory=dict)


class Stats(BaseModel):
    total_events: int = 0
    sessions: int = 0
    tool_uses: int = 0
    files_modified: int = 0
    events_by_kind: dict[str, int] = Field(default_factory=dict)
    tools_by_name: dict[str, int] = Field(default_factory=dict)
