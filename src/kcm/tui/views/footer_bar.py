"""Footer bar renderer for status indicators.

This module provides the render_footer_bar function that displays
a status bar with the entry count, the active kubeconfig, errors and a help hint.
"""

from __future__ import annotations

from rich.text import Text

from ..tui_utils import truncate_text


def render_footer_bar(
    entry_count: int,
    active: str = "",
    error_message: str | None = None,
    terminal_width: int = 80,
) -> Text:
    """Build Rich Text displaying footer status bar.

    Args:
        entry_count: Number of kubeconfigs found
        active: Name of the active kubeconfig, or "" if none
        error_message: Current error message to display, if any
        terminal_width: Terminal width for truncation calculations

    Returns:
        Rich Text component ready for rendering
    """
    parts = []

    if entry_count > 0:
        count_text = "1 kubeconfig" if entry_count == 1 else f"{entry_count} kubeconfigs"
        parts.append((count_text, "green"))
    else:
        parts.append(("No kubeconfigs", "dim"))

    if active:
        parts.append((" | ", "dim"))
        parts.append((f"active: {active}", "green"))

    help_hint = "Press ? for help"

    # Error message (truncated if needed)
    if error_message:
        used = sum(len(text) for text, _ in parts) + len(" | ") * 2 + len(help_hint)
        available_width = terminal_width - used

        if available_width > 10:  # Minimum space for meaningful error
            parts.append((" | ", "dim"))
            parts.append((truncate_text(error_message, available_width), "red"))

    parts.append((" | ", "dim"))
    parts.append((help_hint, "cyan"))

    footer = Text()
    for text, style in parts:
        footer.append(text, style=style)

    return footer
