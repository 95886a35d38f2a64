"""
Friendly session names.

Each session id maps to a short `adjective-noun` name. Names are derived
deterministically from the id and remembered in a JSON file, so a name set
by hand in that file wins over the derived one.
"""

import hashlib
import json
import logging
from pathlib import Path

logger = logging.getLogger(__name__)

ADJECTIVES = [
    "amber", "bold", "brave", "bright", "calm", "clever", "cosmic", "crisp",
    "daring", "eager", "fancy", "gentle", "golden", "happy", "jolly", "keen",
    "lively", "lucky", "mellow", "misty", "noble", "quiet", "rapid", "silent",
    "sleek", "sunny", "swift", "tidy", "vivid", "witty", "young", "zesty",
]

NOUNS = [
    "badger", "comet", "dolphin", "eagle", "falcon", "forest", "garden", "harbor",
    "island", "jaguar", "kestrel", "lantern", "meadow", "nebula", "otter", "panda",
    "phoenix", "quartz", "raven", "river", "sparrow", "summit", "tiger", "valley",
    "walrus", "willow", "canyon", "beacon", "glacier", "orchid", "pebble", "zephyr",
]


def derive_session_name(session_id: str) -> str:
    """
    Deterministically derive a friendly name from a session id.

    Same id always produces the same name.
    """
    digest = hashlib.sha256(session_id.encode()).digest()
    adjective = ADJECTIVES[digest[0] % len(ADJECTIVES)]
    noun = NOUNS[digest[1] % len(NOUNS)]
    return f"{adjective}-{noun}"


class SessionNames:
    """File-backed session_id -> name lookup."""

    def __init__(self, path: Path):
        self.path = Path(path)

    def _load(self) -> dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            with open(self.path, encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.debug(f"Cannot read session names from {self.path}: {e}")
            return {}
        if not isinstance(data, dict):
            return {}
        return {k: v for k, v in data.items() if isinstance(v, str)}

    def _save(self, names: dict[str, str]) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.path, "w", encoding="utf-8") as f:
                json.dump(names, f, indent=2, sort_keys=True)
        except OSError as e:
            logger.debug(f"Cannot persist session names to {self.path}: {e}")

    def get(self, session_id: str) -> str:
        """Return the name for a session, assigning and storing one if needed."""
        names = self._load()
        name = names.get(session_id)
        if name:
            return name

        name = derive_session_name(session_id)
        names[session_id] = name
        self._save(names)
        return name
