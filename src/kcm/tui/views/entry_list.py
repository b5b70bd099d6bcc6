"""Entry list renderer.

This module provides the render_entry_list function that builds the main
selector panel: one line per kubeconfig with the cursor, the active marker and
the expiry marker. A scan error is shown in place of the list.
"""

from __future__ import annotations

from rich.panel import Panel
from rich.text import Text

from ..models import SelectionState


def _viewport_offset(cursor: int, total: int, limit: int | None) -> int:
    """Return the first visible line so the cursor stays on screen."""
    if limit is None or limit <= 0 or total <= limit:
        return 0
    return min(max(cursor - limit + 1, 0), total - limit)


def render_entry_list(state: SelectionState, viewport_limit: int | None = None) -> Panel:
    """Build Rich Panel listing the ranked kubeconfigs.

    Args:
        state: Current selection state
        viewport_limit: Maximum lines to render (None = no limit)

    Returns:
        Rich Panel component ready for rendering
    """
    if state.scan_failed:
        content = Text(str(state.error), style="red")
        content.append("\n\nPress r to rescan or q to quit", style="dim")
        return Panel(content, title="Scan failed", border_style="red", padding=(1, 2))

    if not state.entries:
        content = Text("No kubeconfigs found", justify="center", style="dim italic")
        return Panel(content, title="Select a cluster", border_style="dim", padding=(1, 2))

    offset = _viewport_offset(state.cursor, len(state.entries), viewport_limit)
    end = len(state.entries) if viewport_limit is None else offset + viewport_limit

    content = Text()
    for index in range(offset, min(end, len(state.entries))):
        entry = state.entries[index]
        selected = index == state.cursor

        content.append(">" if selected else " ", style="bold cyan")
        content.append(" [")
        if state.is_active(entry):
            content.append("x", style="green")
        else:
            content.append(" ")
        content.append("] ")
        if entry.expired(state.now):
            content.append("[")
            content.append("EXPIRED", style="red")
            content.append("] ")
        content.append(entry.name, style="bold" if selected else "")
        content.append("\n")
    content.rstrip()

    return Panel(content, title="Select a cluster", border_style="blue", padding=(0, 1))
