"""
UserPromptSubmit hook - injects session context into the prompt.

Adds the current session id and friendly name to Claude's context on every
prompt, so they are available without a tool call. Extra lines (git branch,
environment, working directory) can be switched on with flags.

Usage:
    hook-monitor-context
    hook-monitor-context --format "Session: {name} [{short_id}]" --git-branch --cwd
"""

import argparse
import json
import logging
import os
import subprocess
import sys
from typing import Any, Optional

from ..config import HookConfig, is_debug_enabled
from ..logger import configure_logging
from .session_names import SessionNames

logger = logging.getLogger(__name__)

DEFAULT_FORMAT = "Session: {name} ({session_id})"


def git_branch(cwd: Optional[str]) -> Optional[str]:
    """Current git branch in cwd, or None outside a repository."""
    try:
        result = subprocess.run(
            ["git", "branch", "--show-current"],
            cwd=cwd or None,
            capture_output=True,
            text=True,
            timeout=2,
        )
    except (OSError, subprocess.SubprocessError):
        return None
    if result.returncode != 0:
        return None
    return result.stdout.strip() or None


def build_context(
    hook_input: dict[str, Any],
    names: SessionNames,
    fmt: str = DEFAULT_FORMAT,
    include_git_branch: bool = False,
    environment_var: Optional[str] = None,
    include_cwd: bool = False,
) -> str:
    """Assemble the additional context text for one prompt."""
    session_id = hook_input.get("session_id")
    if not isinstance(session_id, str) or not session_id:
        raise ValueError("hook input has no session_id")

    cwd = hook_input.get("cwd") if isinstance(hook_input.get("cwd"), str) else None
    parts = [
        fmt.format(
            name=names.get(session_id),
            session_id=session_id,
            short_id=session_id[:8],
        )
    ]

    if include_git_branch:
        branch = git_branch(cwd)
        if branch:
            parts.append(f"Git branch: {branch}")

    if environment_var and os.environ.get(environment_var):
        parts.append(f"Environment: {os.environ[environment_var]}")

    if include_cwd and cwd:
        parts.append(f"Working directory: {cwd}")

    return "\n".join(parts)


def run(stdin_text: str, names: SessionNames, args: argparse.Namespace) -> dict[str, Any]:
    """Handle one hook invocation. Never raises."""
    try:
        hook_input = json.loads(stdin_text)
        if not isinstance(hook_input, dict):
            raise ValueError("hook input must be a JSON object")

        context = build_context(
            hook_input,
            names,
            fmt=args.format,
            include_git_branch=args.git_branch,
            environment_var=args.environment_var,
            include_cwd=args.cwd,
        )
        return {
            "hookSpecificOutput": {
                "hookEventName": "UserPromptSubmit",
                "additionalContext": context,
            }
        }
    except (ValueError, KeyError, IndexError) as e:
        logger.error(f"UserPromptSubmit error: {e}")
        return {"continue": True}
    except Exception:
        logger.exception("Unexpected UserPromptSubmit failure")
        return {"continue": True}


def parse_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    """Parse command line arguments"""
    parser = argparse.ArgumentParser(description="Inject session context on UserPromptSubmit")
    parser.add_argument(
        "--format",
        type=str,
        default=DEFAULT_FORMAT,
        help="Context line template; fields: {name}, {session_id}, {short_id}",
    )
    parser.add_argument("--git-branch", action="store_true", help="Add the current git branch")
    parser.add_argument(
        "--environment-var",
        type=str,
        default=None,
        help="Add the value of this environment variable as 'Environment: ...'",
    )
    parser.add_argument("--cwd", action="store_true", help="Add the working directory")
    return parser.parse_args(argv)


def main():
    """Main entry point"""
    args = parse_args()
    config = HookConfig.from_env()
    configure_logging(debug=is_debug_enabled(), error_log=config.error_log)

    output = run(sys.stdin.read(), SessionNames(config.session_names_file), args)
    print(json.dumps(output))
    sys.exit(0)


if __name__ == "__main__":
    main()
