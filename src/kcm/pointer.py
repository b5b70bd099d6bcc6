"""The active kubeconfig symlink.

External tools read ``$KUBECONFIG``, which points at this link. The link is
always removed before it is recreated, never replaced in place.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

from .entries import Entry
from .exceptions import PointerError

logger = logging.getLogger(__name__)


class ActivePointer:
    """Reads, clears and sets the symlink naming the active kubeconfig."""

    def __init__(self, link_path: Path | str):
        self.link_path = Path(link_path)

    def read_active(self) -> str:
        """Return the base name of the link target, or "" if there is no link."""
        try:
            target = os.readlink(self.link_path)
        except OSError:
            return ""
        return Path(target).name

    def clear_active(self) -> None:
        """Remove the link if present. Failures are logged, never raised."""
        try:
            self.link_path.unlink()
        except FileNotFoundError:
            return
        except OSError as err:
            logger.warning(f"Failed to remove active link {self.link_path}: {err}")
            return
        logger.debug(f"Removed active link {self.link_path}")

    def set_active(self, entry: Entry) -> None:
        """Point the link at ``entry``. The caller clears the old link first.

        Raises:
            PointerError: If the symlink cannot be created
        """
        try:
            os.symlink(entry.path, self.link_path)
        except OSError as err:
            raise PointerError(f"Failed to activate {entry.name}: {err}") from err
        logger.info(
            "Activated kubeconfig",
            extra={"extra_context": {"entry": str(entry.path), "link": str(self.link_path)}},
        )
