"""Help panel renderer for keybinding reference.

This module provides the render_help_panel function that displays
a table of the selector's keybindings.
"""

from __future__ import annotations

from rich.panel import Panel
from rich.table import Table

from ..keybindings import KEY_BINDINGS, KeyBinding


def render_help_panel(bindings: tuple[KeyBinding, ...] = KEY_BINDINGS) -> Panel:
    """Build Rich Panel displaying keybinding reference table.

    Args:
        bindings: Keybindings to list

    Returns:
        Rich Panel component with one row per binding
    """
    table = Table(
        show_header=True,
        header_style="bold magenta",
        border_style="blue",
        padding=(0, 1),
    )
    table.add_column("Key", style="cyan", no_wrap=True)
    table.add_column("Action", style="yellow")

    for binding in bindings:
        table.add_row(binding.label, binding.description)

    return Panel(
        table,
        title="[bold white]Keybindings[/bold white]",
        border_style="blue",
        padding=(0, 1),
    )
