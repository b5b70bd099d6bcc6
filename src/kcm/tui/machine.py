"""Selection state machine.

The machine applies one event at a time to its SelectionState and returns the
commands the caller should run, in order. It never touches the filesystem; the
results of those commands come back later as events.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import assert_never

from ..entries import Entry, rank_entries
from ..exceptions import ScanError
from .models import (
    USER_EVENTS,
    Activate,
    ActiveResolved,
    ClearActive,
    ClearPointer,
    Command,
    Delete,
    DeleteEntry,
    Error,
    Event,
    Exit,
    MoveDown,
    MoveUp,
    Quit,
    ReadActive,
    Refresh,
    ScanCompleted,
    ScanEntries,
    SelectionState,
    SetPointer,
    Tick,
    ToggleHelp,
)

logger = logging.getLogger(__name__)

# Events that act on the entry list and are ignored while a scan error is shown
LIST_EVENTS = (MoveUp, MoveDown, Activate, Delete, ClearActive)


class SelectionMachine:
    """Reconciles scanned entries, the active link and user input."""

    def __init__(self, state: SelectionState | None = None):
        self.state = state if state is not None else SelectionState()

    def start(self) -> tuple[Command, ...]:
        """Commands that bring the initial empty state up to date."""
        return (ScanEntries(), ReadActive())

    def apply(self, event: Event) -> tuple[Command, ...]:
        """Apply a single event and return the commands it triggers."""
        state = self.state
        # Failures of the final Activate commands still need to be reported
        if state.finished and not isinstance(event, Error):
            logger.debug(f"Ignoring {event!r} after session finished")
            return ()

        if isinstance(event, USER_EVENTS):
            if state.scan_failed and isinstance(event, LIST_EVENTS):
                return ()
            if state.error is not None and not state.scan_failed:
                state.error = None

        match event:
            case ScanCompleted(entries=entries, error=error, scanned_at=scanned_at):
                return self._on_scan_completed(entries, error, scanned_at)
            case ActiveResolved(name=name):
                state.active = name
                return ()
            case MoveUp():
                if state.cursor > 0:
                    state.cursor -= 1
                return ()
            case MoveDown():
                if state.cursor < len(state.entries) - 1:
                    state.cursor += 1
                return ()
            case Activate():
                return self._on_activate()
            case Refresh():
                return (ScanEntries(),)
            case Delete():
                return self._on_delete()
            case ClearActive():
                if not state.active:
                    return ()
                return (ClearPointer(), ReadActive())
            case Quit():
                state.finished = True
                return (Exit(),)
            case Error(error=error):
                logger.warning(f"Command failed: {error}")
                state.error = error
                return ()
            case ToggleHelp():
                state.help_visible = not state.help_visible
                return ()
            case Tick(now=now):
                self._on_tick(now)
                return ()
            case _:
                assert_never(event)

    def _on_scan_completed(
        self,
        entries: tuple[Entry, ...],
        error: ScanError | None,
        scanned_at: datetime | None = None,
    ) -> tuple[Command, ...]:
        state = self.state
        if error is not None:
            logger.warning(f"Scan failed: {error}")
            state.error = error
            return ()

        if scanned_at is not None:
            state.now = scanned_at
        cursor_was_valid = 0 <= state.cursor < len(state.entries)
        state.entries = rank_entries(entries, state.now)
        if cursor_was_valid and state.entries:
            state.cursor = min(state.cursor, len(state.entries) - 1)
        else:
            state.cursor = 0
        if state.scan_failed:
            state.error = None
        return ()

    def _on_activate(self) -> tuple[Command, ...]:
        state = self.state
        entry = state.selected
        if entry is None:
            return ()
        state.finished = True
        state.activated = entry
        return (ClearPointer(), SetPointer(entry), Exit())

    def _on_delete(self) -> tuple[Command, ...]:
        state = self.state
        entry = state.selected
        if entry is None:
            return ()
        commands: list[Command] = []
        if state.is_active(entry):
            commands.append(ClearPointer())
        commands.extend([DeleteEntry(entry), ScanEntries(), ReadActive()])
        return tuple(commands)

    def _on_tick(self, now: datetime) -> None:
        state = self.state
        selected = state.selected
        state.now = now
        state.entries = rank_entries(state.entries, now)
        if selected is not None:
            state.cursor = state.entries.index(selected)
