"""
Forwarding hook - posts Claude Code hook events to the event server.

Reads the hook event from stdin, adds the friendly session name and the most
recent transcript lines, and posts everything to the event server. The host
is never blocked: stdout always carries {"continue": true, ...} and errors go
to the log (stderr).

Configure in .claude/settings.json:
    {
      "hooks": {
        "SessionStart": [{"type": "command", "command": "hook-monitor-forward"}],
        "UserPromptSubmit": [{"type": "command", "command": "hook-monitor-forward"}],
        "PostToolUse": [{"type": "command", "command": "hook-monitor-forward"}],
        "Stop": [{"type": "command", "command": "hook-monitor-forward"}]
      }
    }
"""

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any, Optional

from ..config import HookConfig, is_debug_enabled
from ..errors import HookMonitorError, TranscriptReadError
from ..logger import configure_logging
from .client import BackendClient
from .session_names import SessionNames
from .transcript import last_entry, read_transcript, recent_conversation

logger = logging.getLogger(__name__)


def build_payload(
    raw_event: dict[str, Any],
    names: SessionNames,
    transcript_lines: int = 20,
    now: Optional[str] = None,
) -> dict[str, Any]:
    """Wrap a raw hook event with session name and conversation context."""
    session_id = raw_event.get("session_id")
    transcript_path = raw_event.get("transcript_path")

    conversation = None
    recent: list[dict[str, Any]] = []
    if transcript_path:
        try:
            entries = read_transcript(transcript_path)
            conversation = last_entry(entries)
            recent = recent_conversation(entries, transcript_lines)
        except TranscriptReadError as e:
            logger.warning(str(e))

    return {
        "event": {
            **raw_event,
            "session_name": names.get(session_id) if session_id else "unknown",
        },
        "conversation": conversation,
        "recentConversation": recent,
        "timestamp": now or datetime.now(timezone.utc).isoformat(),
    }


def run(stdin_text: str, config: HookConfig, client: Optional[BackendClient] = None) -> dict[str, Any]:
    """Handle one hook invocation and return the hook output.

    Never raises; failures are logged and reported in the message.
    """
    client = client or BackendClient(config.backend_url, config.api_key, timeout=config.timeout)

    try:
        raw_event = json.loads(stdin_text)
        if not isinstance(raw_event, dict):
            raise ValueError("hook input must be a JSON object")

        payload = build_payload(
            raw_event,
            SessionNames(config.session_names_file),
            transcript_lines=config.transcript_lines,
        )
        response = client.post_event(payload)
        return {
            "continue": True,
            "message": response.get("message") or "Posted event to backend",
        }
    except (HookMonitorError, ValueError) as e:
        logger.error(f"Backend hook error: {e}")
        return {"continue": True, "message": f"Backend hook error: {e}"}
    except Exception as e:
        logger.exception("Unexpected backend hook failure")
        return {"continue": True, "message": f"Backend hook error: {e}"}


def main():
    """Main entry point"""
    config = HookConfig.from_env()
    configure_logging(debug=is_debug_enabled(), error_log=config.error_log)

    output = run(sys.stdin.read(), config)
    print(json.dumps(output))
    sys.exit(0)


if __name__ == "__main__":
    main()
