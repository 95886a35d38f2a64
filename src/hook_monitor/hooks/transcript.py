"""Claude Code transcript (JSONL) reading."""

import json
import logging
from pathlib import Path
from typing import Any, Optional

from ..errors import TranscriptReadError

logger = logging.getLogger(__name__)


def parse_transcript(text: str) -> list[dict[str, Any]]:
    """Parse JSONL transcript content into entries.

    Blank lines, invalid JSON and non-object lines are skipped.
    """
    entries = []
    for line_number, line in enumerate(text.splitlines(), start=1):
        line = line.strip()
        if not line:
            continue
        try:
            entry = json.loads(line)
        except json.JSONDecodeError:
            logger.debug(f"Skipping invalid transcript line {line_number}")
            continue
        if isinstance(entry, dict):
            entries.append(entry)
    return entries


def read_transcript(path: str | Path) -> list[dict[str, Any]]:
    """Read and parse a transcript file.

    Raises:
        TranscriptReadError: If the file cannot be read.
    """
    try:
        text = Path(path).read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise TranscriptReadError(str(path), str(e))
    return parse_transcript(text)


def last_entry(entries: list[dict[str, Any]]) -> Optional[dict[str, Any]]:
    return entries[-1] if entries else None


def recent_conversation(entries: list[dict[str, Any]], limit: int = 20) -> list[dict[str, Any]]:
    """Last `limit` transcript entries, oldest first."""
    if limit <= 0:
        return []
    return entries[-limit:]
