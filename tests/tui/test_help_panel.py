"""Tests for help panel rendering."""

from __future__ import annotations

from io import StringIO

from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from kcm.tui.keybindings import KEY_BINDINGS
from kcm.tui.views.help_panel import render_help_panel


def _render_to_text(panel: Panel) -> str:
    """Helper to render panel to text for assertions."""
    console = Console(file=StringIO(), width=100, legacy_windows=False)
    console.print(panel)
    return console.file.getvalue()  # type: ignore


class TestRenderHelpPanel:
    """Tests for help panel rendering."""

    def test_returns_panel(self) -> None:
        """Verify return type is Rich Panel."""
        panel = render_help_panel()
        assert isinstance(panel, Panel)
        assert "Keybindings" in str(panel.title)

    def test_table_has_row_per_binding(self) -> None:
        """Every binding is listed."""
        table = render_help_panel().renderable
        assert isinstance(table, Table)
        assert [c.header for c in table.columns] == ["Key", "Action"]
        assert table.row_count == len(KEY_BINDINGS)

    def test_rendered_text(self) -> None:
        """Rendered output includes the keys and actions."""
        output = _render_to_text(render_help_panel())
        assert "Activate and quit" in output
        assert "q/ctrl+c" in output
        assert "Clear active kubeconfig" in output
