"""Hook event monitor: an event server plus Claude Code hook scripts that feed it."""

__version__ = "1.0.0"
