"""Kubeconfig discovery, expiration and ranking.

Entries are immutable snapshots of the files found in the watch directories.
They are never updated in place; a fresh scan replaces them.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from pathlib import Path

from .config import WatchDir
from .exceptions import ScanError

logger = logging.getLogger(__name__)

# Expiry is decided by this fixed window; the configured lifespan is only displayed.
EXPIRY_WINDOW = timedelta(minutes=150)


@dataclass(frozen=True)
class Entry:
    """One kubeconfig file discovered in a watch directory."""

    name: str
    location_dir: Path
    timestamp: datetime | None = None
    lifespan_minutes: int = 0

    @property
    def path(self) -> Path:
        return self.location_dir / self.name

    @property
    def lifespan(self) -> timedelta:
        return timedelta(minutes=self.lifespan_minutes)

    def expired(self, now: datetime | None = None) -> bool:
        return is_expired(self, now if now is not None else utc_now())


def utc_now() -> datetime:
    return datetime.now(tz=UTC)


def is_expired(entry: Entry, now: datetime) -> bool:
    """Return True if the entry is older than the expiry window.

    Entries with a zero lifespan or without a timestamp never expire.
    """
    if entry.lifespan_minutes == 0 or entry.timestamp is None:
        return False
    return now > entry.timestamp + EXPIRY_WINDOW


def rank_entries(entries: Iterable[Entry], now: datetime) -> list[Entry]:
    """Order entries fresh-first, newest-first within each bucket.

    Both passes are stable, so entries with equal keys keep their scan order.
    Entries without a timestamp follow the timestamped ones in their bucket.
    """
    ranked = sorted(
        entries,
        key=lambda e: e.timestamp.timestamp() if e.timestamp is not None else float("-inf"),
        reverse=True,
    )
    ranked.sort(key=lambda e: is_expired(e, now))
    return ranked


def parse_timestamp(name: str, file_format: str) -> datetime:
    """Parse a file name against a strptime format covering the whole name.

    Names without zone information are taken as UTC.

    Raises:
        ScanError: If the name does not match the format
    """
    try:
        parsed = datetime.strptime(name, file_format)
    except ValueError as err:
        raise ScanError(f"{name} does not match format {file_format!r}: {err}") from err
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed


def _scan_dir(watch_dir: WatchDir) -> list[Entry]:
    root = Path(watch_dir.dir)
    try:
        children = sorted(root.iterdir())
    except OSError as err:
        raise ScanError(f"Failed to read watch directory {root}: {err}") from err

    found: list[Entry] = []
    for child in children:
        # symlinks are kept even when they point at a directory
        is_dir = child.is_dir() and not child.is_symlink()
        if is_dir or not child.name.endswith(watch_dir.file_suffix):
            continue
        timestamp = None
        if watch_dir.file_format:
            timestamp = parse_timestamp(child.name, watch_dir.file_format)
        found.append(
            Entry(
                name=child.name,
                location_dir=root,
                timestamp=timestamp,
                lifespan_minutes=watch_dir.lifespan,
            )
        )
    return found


def scan_entries(watch_dirs: Sequence[WatchDir]) -> list[Entry]:
    """Return every matching file across the watch directories, unsorted.

    Any unreadable directory or unparsable name fails the whole scan.

    Raises:
        ScanError: On the first directory or file name that cannot be handled
    """
    entries: list[Entry] = []
    for watch_dir in watch_dirs:
        entries.extend(_scan_dir(watch_dir))
    logger.debug(f"Scanned {len(watch_dirs)} watch dir(s), found {len(entries)} entries")
    return entries
