"""Background polling of the watch directories.

This module implements mtime-based change detection for the watch directories.
It never scans or touches entries itself; it only posts events to the inbox.
"""

from __future__ import annotations

import logging
import queue
import threading
from collections.abc import Callable
from datetime import datetime
from pathlib import Path

from ..entries import utc_now
from .models import Event, Refresh, Tick

logger = logging.getLogger(__name__)


class WatchPoller:
    """Background thread that polls watch directories for changes.

    Posts a Refresh event when a directory's mtime changes (a file was added,
    removed or renamed) and a Tick every cycle so expiry markers stay current.
    """

    def __init__(
        self,
        directories: list[Path],
        inbox: queue.Queue[Event],
        refresh_seconds: float = 2.0,
        clock: Callable[[], datetime] = utc_now,
    ):
        """Initialize watch poller.

        Args:
            directories: Watch directories to monitor
            inbox: Queue to publish events to
            refresh_seconds: Polling interval in seconds
            clock: Source of the current time for Tick events
        """
        self.directories = directories
        self.inbox = inbox
        self.refresh_seconds = refresh_seconds
        self.clock = clock

        # Track mtimes for change detection, None for missing directories
        self._mtimes: dict[Path, float | None] = {}

        # Thread control
        self._thread: threading.Thread | None = None
        self._stop_event = threading.Event()

    def _get_mtime(self, path: Path) -> float | None:
        """Get modification time of a directory, returning None if it can't be read."""
        try:
            return path.stat().st_mtime
        except OSError:
            return None

    def _prime(self) -> None:
        """Record current mtimes so the first cycle doesn't report old changes."""
        for directory in self.directories:
            self._mtimes[directory] = self._get_mtime(directory)

    def _check_dir_changed(self, path: Path) -> bool:
        """Check if a directory changed, appeared or vanished since the last poll."""
        current_mtime = self._get_mtime(path)
        previous_mtime = self._mtimes.get(path)
        self._mtimes[path] = current_mtime
        return current_mtime != previous_mtime

    def _put(self, event: Event) -> None:
        try:
            self.inbox.put_nowait(event)
        except queue.Full:
            logger.warning(f"Inbox full, dropping {event!r}")

    def _poll_cycle(self) -> None:
        """Execute one polling cycle over all watch directories."""
        changed = [d for d in self.directories if self._check_dir_changed(d)]
        if changed:
            logger.debug(f"Watch directories changed: {[str(d) for d in changed]}")
            self._put(Refresh())
        self._put(Tick(self.clock()))

    def _run(self) -> None:
        """Main polling loop running in background thread."""
        logger.info(f"WatchPoller started with refresh interval {self.refresh_seconds}s")

        while not self._stop_event.wait(self.refresh_seconds):
            try:
                self._poll_cycle()
            except Exception as err:
                # Catch all exceptions to prevent thread crash
                logger.error(f"Error in poll cycle: {err}", exc_info=True)

        logger.info("WatchPoller stopped")

    def start(self) -> None:
        """Start the background polling thread."""
        if self._thread is not None and self._thread.is_alive():
            logger.warning("WatchPoller already running")
            return

        self._prime()
        self._stop_event.clear()
        self._thread = threading.Thread(target=self._run, daemon=True, name="WatchPoller")
        self._thread.start()

    def stop(self) -> None:
        """Stop the background polling thread gracefully."""
        if self._thread is None:
            return

        self._stop_event.set()
        self._thread.join(timeout=self.refresh_seconds * 2)

        if self._thread.is_alive():
            logger.warning("WatchPoller thread did not stop within timeout")

        self._thread = None
