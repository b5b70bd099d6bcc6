"""Command interpreter for the selection machine.

This is the only place the selector touches the filesystem. Each command is
run to completion and its outcome is returned as an event for the inbox.
"""

from __future__ import annotations

import logging

from ..config import Config
from ..entries import Entry, scan_entries, utc_now
from ..exceptions import MutationError, ScanError
from ..pointer import ActivePointer
from .models import (
    ActiveResolved,
    ClearPointer,
    Command,
    DeleteEntry,
    Error,
    Event,
    Exit,
    ReadActive,
    ScanCompleted,
    ScanEntries,
    SetPointer,
)

logger = logging.getLogger(__name__)


class EffectRunner:
    """Runs commands against the watch directories and the active link."""

    def __init__(self, config: Config, pointer: ActivePointer | None = None):
        """Initialize effect runner.

        Args:
            config: Runtime configuration with the watch directories
            pointer: Active link tracker (defaults to the configured link)
        """
        self.config = config
        self.pointer = pointer if pointer is not None else ActivePointer(config.kubeconfig_link)

    def run(self, command: Command) -> Event | None:
        """Run one command and return the event describing its outcome.

        Returns:
            The resulting event, or None for commands with nothing to report
        """
        logger.debug(f"Running {command!r}")
        match command:
            case ScanEntries():
                return self._scan()
            case ReadActive():
                return ActiveResolved(self.pointer.read_active())
            case ClearPointer():
                self.pointer.clear_active()
                return None
            case SetPointer(entry=entry):
                try:
                    self.pointer.set_active(entry)
                except MutationError as err:
                    return Error(err)
                return None
            case DeleteEntry(entry=entry):
                return self._delete(entry)
            case Exit():
                return None
            case _:
                raise TypeError(f"Unknown command: {command!r}")

    def run_all(self, commands: tuple[Command, ...]) -> list[Event]:
        """Run commands in order, collecting their events.

        A failing command does not stop the ones after it.
        """
        events: list[Event] = []
        for command in commands:
            event = self.run(command)
            if event is not None:
                events.append(event)
        return events

    def _scan(self) -> ScanCompleted:
        try:
            entries = scan_entries(self.config.watch_dirs)
        except ScanError as err:
            return ScanCompleted(error=err)
        return ScanCompleted(entries=tuple(entries), scanned_at=utc_now())

    def _delete(self, entry: Entry) -> Error | None:
        try:
            entry.path.unlink()
        except OSError as err:
            logger.error(f"Failed to delete {entry.path}: {err}")
            return Error(MutationError(f"Failed to delete {entry.name}: {err}"))
        logger.info(
            "Deleted kubeconfig",
            extra={"extra_context": {"entry": str(entry.path)}},
        )
        return None
