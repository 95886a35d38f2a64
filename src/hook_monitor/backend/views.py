"""
HTML pages for the event monitor.

Each page is assembled from a projection at request time. Pages reload
themselves every few seconds; chat bubbles are turned into Markdown in the
browser by marked.
"""

import json
from html import escape
from typing import Optional

from .models import ChatMessage, EventRecord, FileOperation, Stats, TimelineEntry

REFRESH_SECONDS = 3

NAV_ITEMS = [
    ("/", "Dashboard"),
    ("/chat", "Chat"),
    ("/files", "File Operations"),
    ("/transactions", "Transactions"),
    ("/analytics", "Analytics"),
]

_STYLE = """
body { font-family: Inter, sans-serif; margin: 0; display: flex; background: #f9fafb; color: #1f2937; }
nav { width: 14rem; background: #fff; border-right: 1px solid #e5e7eb; min-height: 100vh; padding: 1rem; }
nav a { display: block; padding: .5rem .75rem; border-radius: .375rem; color: #4b5563; text-decoration: none; }
nav a.active { background: #eff6ff; color: #2563eb; font-weight: 600; }
main { flex: 1; padding: 1.5rem 2rem; overflow-x: auto; }
.cards { display: flex; gap: 1rem; margin-bottom: 1.5rem; }
.card { background: #fff; border: 1px solid #e5e7eb; border-radius: .5rem; padding: 1rem 1.25rem; min-width: 8rem; }
.card .value { font-size: 1.5rem; font-weight: 600; }
.card .label { font-size: .75rem; color: #6b7280; text-transform: uppercase; }
table { width: 100%; border-collapse: collapse; background: #fff; }
th, td { text-align: left; padding: .5rem .75rem; border-bottom: 1px solid #f3f4f6; font-size: .875rem; vertical-align: top; }
th { font-size: .75rem; color: #6b7280; text-transform: uppercase; }
.badge { padding: .125rem .5rem; border-radius: 9999px; font-size: .75rem; font-weight: 600; }
.badge-session { background: #dcfce7; color: #15803d; }
.badge-prompt { background: #dbeafe; color: #1d4ed8; }
.badge-tool { background: #f3e8ff; color: #7e22ce; }
.badge-stop { background: #fee2e2; color: #b91c1c; }
.badge-other { background: #f3f4f6; color: #374151; }
.message { background: #fff; border: 1px solid #e5e7eb; border-radius: .5rem; padding: .75rem 1rem; margin-bottom: .75rem; }
.message.user { border-left: 4px solid #3b82f6; }
.message.assistant { border-left: 4px solid #a855f7; }
.role { font-size: .75rem; font-weight: 700; color: #6b7280; text-transform: uppercase; }
.thinking { color: #6b7280; font-style: italic; }
pre, code { font-family: 'JetBrains Mono', monospace; font-size: .75rem; white-space: pre-wrap; }
.empty { color: #9ca3af; }
"""

_MARKDOWN_SCRIPT = """
<script src="https://cdn.jsdelivr.net/npm/marked/marked.min.js"></script>
<script>
document.querySelectorAll('[data-markdown]').forEach(function (el) {
    if (window.marked) { el.innerHTML = marked.parse(el.textContent); }
});
</script>
"""


def _page(title: str, active: str, body: str, extra_script: str = "") -> str:
    links = "\n".join(
        f'<a href="{href}" class="{"active" if href == active else ""}">{escape(label)}</a>'
        for href, label in NAV_ITEMS
    )
    return f"""<!DOCTYPE html>
<html lang="en">
<head>
<meta charset="UTF-8">
<meta name="viewport" content="width=device-width, initial-scale=1.0">
<meta http-equiv="refresh" content="{REFRESH_SECONDS}">
<title>Claude Hooks - {escape(title)}</title>
<style>{_STYLE}</style>
</head>
<body>
<nav>
<h1>Claude Hooks</h1>
<p class="label">Event Monitor</p>
{links}
</nav>
<main>
<h2>{escape(title)}</h2>
{body}
</main>
{extra_script}
</body>
</html>
"""


def _cell(value: Optional[str]) -> str:
    return escape(value) if value else '<span class="empty">-</span>'


def _stat_cards(summary: Stats) -> str:
    cards = [
        ("Total Events", summary.total_events),
        ("Sessions", summary.sessions),
        ("Tool Uses", summary.tool_uses),
        ("Files Modified", summary.files_modified),
    ]
    return '<div class="cards">' + "".join(
        f'<div class="card"><div class="value">{value}</div>'
        f'<div class="label">{label}</div></div>'
        for label, value in cards
    ) + "</div>"


def _empty(message: str) -> str:
    return f'<p class="empty">{escape(message)}</p>'


def render_dashboard(entries: list[TimelineEntry], summary: Stats) -> str:
    if entries:
        rows = "\n".join(
            f"<tr><td>{entry.badge.icon} "
            f'<span class="badge {entry.badge.css_class}">{escape(entry.kind)}</span></td>'
            f"<td>{escape(entry.session_name)} <code>{escape(entry.session_id)}</code></td>"
            f"<td>{_cell(entry.details.message)}</td>"
            f"<td>{_cell(entry.details.tool)}</td>"
            f"<td>{_cell(entry.details.path)}</td>"
            f"<td>{escape(entry.timestamp)}</td></tr>"
            for entry in entries
        )
        table = (
            "<table><thead><tr><th>Event</th><th>Session</th><th>Message</th>"
            "<th>Tool</th><th>Path</th><th>Time</th></tr></thead>"
            f"<tbody>{rows}</tbody></table>"
        )
    else:
        table = _empty("No events received yet.")
    return _page("Dashboard", "/", _stat_cards(summary) + table)


def render_chat(messages: list[ChatMessage]) -> str:
    if messages:
        body = "\n".join(
            f'<div class="message {escape(message.role)}">'
            f'<div class="role">{escape(message.role)} · {escape(message.timestamp)}</div>'
            + (
                f'<div class="thinking" data-markdown>{escape(message.thinking)}</div>'
                if message.thinking else ""
            )
            + f"<div data-markdown>{escape(message.content)}</div></div>"
            for message in messages
        )
    else:
        body = _empty("No conversation captured yet.")
    return _page("Chat", "/chat", body, _MARKDOWN_SCRIPT)


def render_files(operations: list[FileOperation]) -> str:
    if operations:
        rows = "\n".join(
            f"<tr><td>{escape(op.tool)}</td><td>{_cell(op.path)}</td>"
            f"<td>{escape(op.timestamp)}</td>"
            f"<td><pre>{escape(json.dumps(op.details, indent=2))}</pre></td></tr>"
            for op in operations
        )
        body = (
            "<table><thead><tr><th>Operation</th><th>File</th><th>Time</th>"
            f"<th>Details</th></tr></thead><tbody>{rows}</tbody></table>"
        )
    else:
        body = _empty("No file operations recorded yet.")
    return _page("File Operations", "/files", body)


def render_transactions(records: list[EventRecord]) -> str:
    if records:
        rows = "\n".join(
            f"<tr><td>{escape(record.kind)}</td><td><code>{escape(record.short_session_id)}</code></td>"
            f"<td>{escape(record.timestamp)}</td>"
            f"<td><pre>{escape(json.dumps(record.raw, indent=2, default=str))}</pre></td></tr>"
            for record in records
        )
        body = (
            "<table><thead><tr><th>Event</th><th>Session</th><th>Time</th>"
            f"<th>Payload</th></tr></thead><tbody>{rows}</tbody></table>"
        )
    else:
        body = _empty("No events received yet.")
    return _page("Transactions", "/transactions", body)


def _breakdown(title: str, counts: dict[str, int]) -> str:
    if not counts:
        return f"<h3>{escape(title)}</h3>" + _empty("Nothing recorded yet.")
    rows = "".join(
        f"<tr><td>{escape(name)}</td><td>{count}</td></tr>"
        for name, count in sorted(counts.items(), key=lambda item: (-item[1], item[0]))
    )
    return f"<h3>{escape(title)}</h3><table><tbody>{rows}</tbody></table>"


def render_analytics(summary: Stats) -> str:
    body = (
        _stat_cards(summary)
        + _breakdown("Events by type", summary.events_by_kind)
        + _breakdown("Tool uses by tool", summary.tools_by_name)
    )
    return _page("Analytics", "/analytics", body)
