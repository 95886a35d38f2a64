"""
Hook Monitor Configuration

Configuration for the event server and for the hook scripts that feed it.
Values come from environment variables; CLI flags override them.
"""

import os
from dataclasses import dataclass, field
from pathlib import Path

from . import __version__


# Environment variable names
ENV_SERVER_HOST = "HOOK_SERVER_HOST"
ENV_SERVER_PORT = "HOOK_SERVER_PORT"
ENV_API_KEY = "HOOK_API_KEY"
ENV_MAX_EVENTS = "HOOK_MAX_EVENTS"
ENV_CORS_ORIGINS = "CORS_ORIGINS"
ENV_DEBUG = "DEBUG_LOGGING"
ENV_BACKEND_URL = "HOOK_BACKEND_URL"
ENV_TIMEOUT = "HOOK_TIMEOUT"
ENV_TRANSCRIPT_LINES = "HOOK_TRANSCRIPT_LINES"
ENV_SESSION_NAMES_FILE = "HOOK_SESSION_NAMES_FILE"
ENV_ERROR_LOG = "HOOK_ERROR_LOG"

# Defaults
DEFAULT_HOST = "127.0.0.1"
DEFAULT_PORT = 3030
DEFAULT_API_KEY = "demo-key-12345"
DEFAULT_MAX_EVENTS = 50
DEFAULT_BACKEND_URL = f"http://localhost:{DEFAULT_PORT}/events"
DEFAULT_TIMEOUT = 5.0
DEFAULT_TRANSCRIPT_LINES = 20
DEFAULT_SESSION_NAMES_FILE = Path.home() / ".claude" / "hooks" / "session-names.json"

SERVER_VERSION = __version__


def is_debug_enabled() -> bool:
    """Check if verbose logging is enabled via DEBUG_LOGGING."""
    return os.getenv(ENV_DEBUG, "").lower() in ("true", "1", "yes")


def _parse_origins(origins: str) -> list[str]:
    """Parse comma-separated CORS origins into a list."""
    if not origins:
        return []
    return [origin.strip() for origin in origins.split(",") if origin.strip()]


@dataclass
class ServerConfig:
    """Configuration for the event server."""

    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT
    api_key: str = DEFAULT_API_KEY
    max_events: int = DEFAULT_MAX_EVENTS
    cors_origins: list[str] = field(default_factory=list)

    def __post_init__(self):
        if self.max_events < 1:
            raise ValueError(f"max_events must be at least 1, got {self.max_events}")

    @classmethod
    def from_env(cls) -> "ServerConfig":
        """Load configuration from environment variables."""
        return cls(
            host=os.environ.get(ENV_SERVER_HOST, DEFAULT_HOST),
            port=int(os.environ.get(ENV_SERVER_PORT, DEFAULT_PORT)),
            api_key=os.environ.get(ENV_API_KEY, DEFAULT_API_KEY),
            max_events=int(os.environ.get(ENV_MAX_EVENTS, DEFAULT_MAX_EVENTS)),
            cors_origins=_parse_origins(os.environ.get(ENV_CORS_ORIGINS, "")),
        )


@dataclass
class HookConfig:
    """Configuration shared by the hook scripts."""

    backend_url: str = DEFAULT_BACKEND_URL
    api_key: str = DEFAULT_API_KEY
    timeout: float = DEFAULT_TIMEOUT
    transcript_lines: int = DEFAULT_TRANSCRIPT_LINES
    session_names_file: Path = DEFAULT_SESSION_NAMES_FILE
    error_log: Path | None = None

    @classmethod
    def from_env(cls) -> "HookConfig":
        """Load configuration from environment variables."""
        error_log = os.environ.get(ENV_ERROR_LOG)
        return cls(
            backend_url=os.environ.get(ENV_BACKEND_URL, DEFAULT_BACKEND_URL),
            api_key=os.environ.get(ENV_API_KEY, DEFAULT_API_KEY),
            timeout=float(os.environ.get(ENV_TIMEOUT, DEFAULT_TIMEOUT)),
            transcript_lines=int(
                os.environ.get(ENV_TRANSCRIPT_LINES, DEFAULT_TRANSCRIPT_LINES)
            ),
            session_names_file=Path(
                os.environ.get(ENV_SESSION_NAMES_FILE, DEFAULT_SESSION_NAMES_FILE)
            ).expanduser(),
            error_log=Path(error_log).expanduser() if error_log else None,
        )
