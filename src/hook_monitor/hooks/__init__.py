"""Claude Code hook scripts: event forwarding and session context injection."""
