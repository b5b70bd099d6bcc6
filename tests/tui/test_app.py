"""Tests for the selector loop, inbox handling and keyboard input."""

from __future__ import annotations

import os
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

from kcm.config import Config, WatchDir
from kcm.exceptions import PointerError
from kcm.tui.app import KcmApp
from kcm.tui.models import MoveDown, Refresh

SUFFIX = ".kubeconfig.txt"


@pytest.fixture
def downloads(tmp_path: Path) -> Path:
    directory = tmp_path / "downloads"
    directory.mkdir()
    for name in ("a.kubeconfig.txt", "b.kubeconfig.txt"):
        (directory / name).write_text(name)
    return directory


@pytest.fixture
def config(tmp_path: Path, downloads: Path) -> Config:
    return Config(
        watch_dirs=(WatchDir(dir=str(downloads), file_suffix=SUFFIX),),
        kubeconfig_link=str(tmp_path / ".cluster"),
        refresh_seconds=0,
    )


@pytest.fixture
def app(config: Config) -> KcmApp:
    return KcmApp(config)


def _run_with_keys(app: KcmApp, keys: list[str | None]) -> int:
    """Run the loop with scripted key presses and a fake Live display."""
    keys = list(keys)

    def _next_key(timeout: float = 0.1):
        return keys.pop(0) if keys else "q"

    with patch("kcm.tui.app.cbreak_terminal"), patch("kcm.tui.app.Live") as mock_live, patch.object(
        app, "_poll_keyboard", side_effect=_next_key
    ):
        mock_live.return_value.__enter__.return_value = MagicMock()
        return app.run()


class TestInbox:
    """Tests for event processing."""

    def test_start_loads_entries_and_active(self, app: KcmApp, downloads: Path, config: Config) -> None:
        """Starting scans and reads the link."""
        os.symlink(downloads / "b.kubeconfig.txt", config.kubeconfig_link)

        app.start()

        assert [e.name for e in app.state.entries] == ["a.kubeconfig.txt", "b.kubeconfig.txt"]
        assert app.state.active == "b.kubeconfig.txt"
        assert app.inbox.empty()

    def test_events_applied_in_order(self, app: KcmApp, downloads: Path) -> None:
        """Posted events and their results are all processed."""
        app.start()
        (downloads / "c.kubeconfig.txt").write_text("c")

        app.post(MoveDown())
        app.post(Refresh())
        app.process_inbox()

        assert app.state.cursor == 1
        assert len(app.state.entries) == 3

    def test_handle_key_posts_event(self, app: KcmApp) -> None:
        """Bound keys are queued as events; others are ignored."""
        app.handle_key("j")
        app.handle_key("x")
        assert app.inbox.get_nowait() == MoveDown()
        assert app.inbox.empty()


class TestRun:
    """Tests for the main loop."""

    def test_quit(self, app: KcmApp, config: Config) -> None:
        """Quitting exits cleanly without touching the link."""
        assert _run_with_keys(app, [None, "q"]) == 0
        assert app.state.activated is None
        assert not Path(config.kubeconfig_link).is_symlink()

    def test_activate_second_entry(self, app: KcmApp, config: Config, downloads: Path) -> None:
        """Moving down and selecting activates that entry and exits."""
        assert _run_with_keys(app, ["down", "\r"]) == 0

        assert app.state.activated.name == "b.kubeconfig.txt"
        assert os.readlink(config.kubeconfig_link) == str(downloads / "b.kubeconfig.txt")

    def test_failed_activation_exit_code(self, app: KcmApp) -> None:
        """A link failure is reported through the exit code."""
        with patch.object(
            app.effects.pointer, "set_active", side_effect=PointerError("read-only")
        ):
            assert _run_with_keys(app, ["e"]) == 1
        assert isinstance(app.state.error, PointerError)

    def test_keyboard_interrupt(self, app: KcmApp) -> None:
        """Ctrl+C delivered as SIGINT ends the loop with 130."""
        with patch("kcm.tui.app.cbreak_terminal"), patch("kcm.tui.app.Live"), patch.object(
            app, "_poll_keyboard", side_effect=KeyboardInterrupt
        ):
            assert app.run() == 130


class TestPollKeyboard:
    """Tests for escape sequence handling."""

    def _poll(self, app: KcmApp, chars: list[str]) -> str | None:
        with patch("kcm.tui.app.select.select") as mock_select, patch("kcm.tui.app.sys.stdin") as stdin:
            mock_select.return_value = ([stdin], [], [])
            stdin.read.side_effect = chars
            return app._poll_keyboard(timeout=0.1)

    def test_up_arrow(self, app: KcmApp) -> None:
        assert self._poll(app, ["\x1b", "[", "A"]) == "up"

    def test_down_arrow(self, app: KcmApp) -> None:
        assert self._poll(app, ["\x1b", "[", "B"]) == "down"

    def test_plain_key(self, app: KcmApp) -> None:
        assert self._poll(app, ["q"]) == "q"

    def test_no_input(self, app: KcmApp) -> None:
        with patch("kcm.tui.app.select.select", return_value=([], [], [])):
            assert app._poll_keyboard(timeout=0.01) is None

    def test_lone_escape(self, app: KcmApp) -> None:
        with patch("kcm.tui.app.select.select") as mock_select, patch("kcm.tui.app.sys.stdin") as stdin:
            mock_select.side_effect = [([stdin], [], []), ([], [], [])]
            stdin.read.side_effect = ["\x1b"]
            assert app._poll_keyboard(timeout=0.1) == "\x1b"
