"""Main selector loop and layout.

This module wires the selection machine to the terminal: key presses and
command results share one inbox queue, events are applied one at a time, and
the commands each event returns are run in order before the next event.
"""

from __future__ import annotations

import contextlib
import logging
import queue
import select
import sys
import termios
import tty
from collections.abc import Iterator
from pathlib import Path

from rich.console import Console
from rich.layout import Layout
from rich.live import Live

from ..config import Config
from .effects import EffectRunner
from .keybindings import KeybindingHandler
from .machine import SelectionMachine
from .models import Command, Event, Exit, SelectionState
from .poller import WatchPoller
from .tui_utils import get_terminal_size
from .views.entry_list import render_entry_list
from .views.footer_bar import render_footer_bar
from .views.help_panel import render_help_panel

logger = logging.getLogger(__name__)

# Escape sequence suffixes for the arrow keys we bind
ARROW_KEYS = {"A": "up", "B": "down", "C": "right", "D": "left"}


@contextlib.contextmanager
def cbreak_terminal(stream=None) -> Iterator[None]:
    """Put the terminal in cbreak mode so single key presses can be read."""
    stream = stream if stream is not None else sys.stdin
    if not stream.isatty():
        yield
        return
    fd = stream.fileno()
    saved = termios.tcgetattr(fd)
    try:
        tty.setcbreak(fd, termios.TCSANOW)
        yield
    finally:
        termios.tcsetattr(fd, termios.TCSAFLUSH, saved)


class KcmApp:
    """Interactive kubeconfig selector."""

    def __init__(
        self,
        config: Config,
        effects: EffectRunner | None = None,
        machine: SelectionMachine | None = None,
    ):
        """Initialize the selector.

        Args:
            config: Runtime configuration
            effects: Command interpreter (defaults to one built from config)
            machine: Selection machine (defaults to a fresh one)
        """
        self.config = config
        self.console = Console()
        self.effects = effects if effects is not None else EffectRunner(config)
        self.machine = machine if machine is not None else SelectionMachine()
        self.keybinding_handler = KeybindingHandler()

        self.inbox: queue.Queue[Event] = queue.Queue()
        self.should_quit = False
        self.watch_poller: WatchPoller | None = None

        self.terminal_width, self.terminal_height = get_terminal_size()

    @property
    def state(self) -> SelectionState:
        return self.machine.state

    def dispatch(self, commands: tuple[Command, ...]) -> None:
        """Run commands in order, queueing the events they produce."""
        for command in commands:
            if isinstance(command, Exit):
                self.should_quit = True
                continue
            event = self.effects.run(command)
            if event is not None:
                self.inbox.put(event)

    def post(self, event: Event) -> None:
        self.inbox.put(event)

    def process_inbox(self) -> None:
        """Apply every pending event, including those queued while processing."""
        try:
            while True:
                event = self.inbox.get_nowait()
                self.dispatch(self.machine.apply(event))
        except queue.Empty:
            pass

    def start(self) -> None:
        """Request the first scan and active link read."""
        self.dispatch(self.machine.start())
        self.process_inbox()

    def _start_watch_poller(self) -> None:
        """Start background watch poller thread if polling is enabled."""
        if self.config.refresh_seconds <= 0:
            return
        self.watch_poller = WatchPoller(
            directories=[Path(w.dir) for w in self.config.watch_dirs],
            inbox=self.inbox,
            refresh_seconds=self.config.refresh_seconds,
        )
        self.watch_poller.start()

    def _poll_keyboard(self, timeout: float = 0.1) -> str | None:
        """Poll for keyboard input with timeout.

        Args:
            timeout: Timeout in seconds

        Returns:
            Key string if key pressed, None otherwise
        """
        ready, _, _ = select.select([sys.stdin], [], [], timeout)
        if not ready:
            return None
        try:
            key = sys.stdin.read(1)
            if key != "\x1b":
                return key
            # Arrow keys arrive as ESC [ A..D
            ready, _, _ = select.select([sys.stdin], [], [], 0.05)
            if not ready:
                return key
            if sys.stdin.read(1) != "[":
                return key
            ready, _, _ = select.select([sys.stdin], [], [], 0.05)
            if not ready:
                return key
            return ARROW_KEYS.get(sys.stdin.read(1), key)
        except Exception as err:
            logger.warning(f"Error reading keyboard input: {err}")
            return None

    def handle_key(self, key: str) -> None:
        event = self.keybinding_handler.handle_key(key)
        if event is not None:
            self.post(event)

    def _build_layout(self) -> Layout:
        """Build the selector layout."""
        layout = Layout()
        if self.state.help_visible:
            layout.split_column(
                Layout(name="main", ratio=1),
                Layout(name="help", size=len(self.keybinding_handler.bindings) + 6),
                Layout(name="footer", size=1),
            )
        else:
            layout.split_column(
                Layout(name="main", ratio=1),
                Layout(name="footer", size=1),
            )
        return layout

    def _render_layout(self, layout: Layout) -> None:
        """Render all panels into the layout."""
        state = self.state
        # Panel border and padding take four rows
        viewport_limit = max(self.terminal_height - 5, 1)
        layout["main"].update(render_entry_list(state, viewport_limit=viewport_limit))

        if state.help_visible:
            layout["help"].update(render_help_panel(self.keybinding_handler.bindings))

        error_message = None
        if state.error is not None and not state.scan_failed:
            error_message = f"Error: {state.error}"
        layout["footer"].update(
            render_footer_bar(
                entry_count=len(state.entries),
                active=state.active,
                error_message=error_message,
                terminal_width=self.terminal_width,
            )
        )

    def exit_code(self) -> int:
        """Return 1 if the session ended with a failed activation, else 0."""
        if self.state.activated is not None and self.state.error is not None:
            return 1
        return 0

    def run(self) -> int:
        """Run the main selector loop.

        Returns:
            Exit code (0 for success, non-zero for error)
        """
        try:
            self.start()
            self._start_watch_poller()

            with cbreak_terminal(), Live(
                self._build_layout(),
                console=self.console,
                refresh_per_second=4,
                screen=True,
            ) as live:
                logger.info("Selector loop started")

                while not self.should_quit:
                    self.process_inbox()
                    if self.should_quit:
                        break

                    self.terminal_width, self.terminal_height = get_terminal_size()
                    layout = self._build_layout()
                    self._render_layout(layout)
                    live.update(layout)

                    key = self._poll_keyboard(timeout=0.1)
                    if key:
                        self.handle_key(key)

            # Deliver results of the final commands, e.g. a failed activation
            self.process_inbox()
            logger.info("Selector loop exited")
            return self.exit_code()

        except KeyboardInterrupt:
            logger.info("Selector interrupted by user")
            return 130

        finally:
            if self.watch_poller:
                self.watch_poller.stop()
