"""Keyboard input handling for the selector.

This module maps key presses to selector events. The same table drives the
help panel, so every binding listed there is one that actually works.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from .models import (
    Activate,
    ClearActive,
    Delete,
    Event,
    MoveDown,
    MoveUp,
    Quit,
    Refresh,
    ToggleHelp,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class KeyBinding:
    """A set of keys producing one event."""

    keys: tuple[str, ...]
    label: str
    description: str
    event: type[Event]


KEY_BINDINGS: tuple[KeyBinding, ...] = (
    KeyBinding(("up", "w", "k"), "↑/w/k", "Move up", MoveUp),
    KeyBinding(("down", "s", "j"), "↓/s/j", "Move down", MoveDown),
    KeyBinding(("e", "enter", " "), "e/enter/space", "Activate and quit", Activate),
    KeyBinding(("r",), "r", "Refresh", Refresh),
    KeyBinding(("d",), "d", "Delete file", Delete),
    KeyBinding(("c",), "c", "Clear active kubeconfig", ClearActive),
    KeyBinding(("?",), "?", "Toggle help", ToggleHelp),
    KeyBinding(("q", "ctrl+c"), "q/ctrl+c", "Quit", Quit),
)

# Raw characters some terminals send for named keys
KEY_ALIASES = {
    "\n": "enter",
    "\r": "enter",
    "\x03": "ctrl+c",
}


class KeybindingHandler:
    """Translates key presses into selector events."""

    def __init__(self, bindings: tuple[KeyBinding, ...] = KEY_BINDINGS) -> None:
        self.bindings = bindings
        self._lookup: dict[str, type[Event]] = {}
        for binding in bindings:
            for key in binding.keys:
                self._lookup[key] = binding.event

    def handle_key(self, key: str) -> Event | None:
        """Return the event for a key press, or None if the key is unassigned.

        Args:
            key: Key identifier (e.g., "up", "down", "q", "\\r")
        """
        key = KEY_ALIASES.get(key, key)
        event_type = self._lookup.get(key)
        if event_type is None:
            logger.debug(f"Key {key!r} not assigned")
            return None
        return event_type()
