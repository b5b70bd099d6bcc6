"""State, event and command models for the selector.

Events are everything the selection machine reacts to: key presses already
translated into actions, and the results of commands run by the effect runner.
Commands are plain data describing I/O the machine wants performed.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Union

from ..entries import Entry, utc_now
from ..exceptions import MutationError, ScanError

# Events


@dataclass(frozen=True)
class ScanCompleted:
    entries: tuple[Entry, ...] = ()
    error: ScanError | None = None
    # when the scan ran, entries are ranked against it
    scanned_at: datetime | None = None


@dataclass(frozen=True)
class ActiveResolved:
    name: str = ""


@dataclass(frozen=True)
class MoveUp:
    pass


@dataclass(frozen=True)
class MoveDown:
    pass


@dataclass(frozen=True)
class Activate:
    pass


@dataclass(frozen=True)
class Refresh:
    pass


@dataclass(frozen=True)
class Delete:
    pass


@dataclass(frozen=True)
class ClearActive:
    pass


@dataclass(frozen=True)
class Quit:
    pass


@dataclass(frozen=True)
class Error:
    error: Exception


@dataclass(frozen=True)
class ToggleHelp:
    pass


@dataclass(frozen=True)
class Tick:
    now: datetime


Event = Union[
    ScanCompleted,
    ActiveResolved,
    MoveUp,
    MoveDown,
    Activate,
    Refresh,
    Delete,
    ClearActive,
    Quit,
    Error,
    ToggleHelp,
    Tick,
]

# Events that come from the keyboard rather than from command results
USER_EVENTS = (MoveUp, MoveDown, Activate, Refresh, Delete, ClearActive, Quit, ToggleHelp)

# Commands


@dataclass(frozen=True)
class ScanEntries:
    pass


@dataclass(frozen=True)
class ReadActive:
    pass


@dataclass(frozen=True)
class ClearPointer:
    pass


@dataclass(frozen=True)
class SetPointer:
    entry: Entry


@dataclass(frozen=True)
class DeleteEntry:
    entry: Entry


@dataclass(frozen=True)
class Exit:
    pass


Command = Union[ScanEntries, ReadActive, ClearPointer, SetPointer, DeleteEntry, Exit]


@dataclass
class SelectionState:
    """Live selector state, owned by the selection machine."""

    entries: list[Entry] = field(default_factory=list)
    cursor: int = 0
    active: str = ""
    error: Exception | None = None
    help_visible: bool = False
    finished: bool = False
    activated: Entry | None = None
    now: datetime = field(default_factory=utc_now)

    @property
    def selected(self) -> Entry | None:
        """Entry under the cursor, or None if the list is empty."""
        if 0 <= self.cursor < len(self.entries):
            return self.entries[self.cursor]
        return None

    @property
    def scan_failed(self) -> bool:
        return isinstance(self.error, ScanError)

    @property
    def mutation_failed(self) -> bool:
        return isinstance(self.error, MutationError)

    def is_active(self, entry: Entry) -> bool:
        return bool(self.active) and entry.name == self.active

    def __repr__(self) -> str:
        return (
            f"SelectionState(entries={len(self.entries)}, cursor={self.cursor}, "
            f"active={self.active!r}, error={self.error!r})"
        )
