"""Custom exceptions for the hook monitor server and hooks."""

from typing import Optional


class HookMonitorError(Exception):
    """Base exception for hook monitor operations."""

    pass


class AuthError(HookMonitorError):
    """Raised when the X-API-Key header is missing or does not match."""

    def __init__(self, message: str = "Invalid API key"):
        super().__init__(message)


class MalformedInputError(HookMonitorError):
    """Raised when an event body is not JSON or has no recognizable shape."""

    def __init__(self, message: str = "Invalid JSON payload"):
        super().__init__(message)


class UpstreamError(HookMonitorError):
    """Raised when the event server rejects a forwarded event."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class UpstreamTimeoutError(UpstreamError):
    """Raised when posting to the event server exceeds the configured timeout."""

    def __init__(self, timeout: float):
        self.timeout = timeout
        super().__init__(f"Backend request timed out after {timeout:g}s")


class UpstreamUnavailableError(UpstreamError):
    """Raised when the event server cannot be reached."""

    pass


class TranscriptReadError(HookMonitorError):
    """Raised when a transcript file cannot be read."""

    def __init__(self, path: str, reason: str):
        self.path = path
        super().__init__(f"Failed to read transcript {path}: {reason}")
