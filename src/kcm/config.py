"""Configuration loading for kcm.

The config file is a JSON document at ``~/.kcm``. It is created with defaults the
first time kcm runs, with ``$HOME`` replaced by the user's home directory.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field, replace
from pathlib import Path

from .exceptions import ConfigError

logger = logging.getLogger(__name__)

HOME_PLACEHOLDER = "$HOME"
CONFIG_FILENAME = ".kcm"


@dataclass(frozen=True)
class WatchDir:
    """One directory to scan and how to interpret its file names."""

    dir: str
    file_suffix: str
    file_format: str = ""
    lifespan: int = 0  # minutes until a file expires, 0 never expires

    @classmethod
    def from_dict(cls, payload: dict) -> WatchDir:
        """Create a WatchDir from its JSON representation."""
        lifespan = payload.get("Lifespan", 0)
        if not isinstance(lifespan, int) or isinstance(lifespan, bool) or lifespan < 0:
            raise ValueError(f"Lifespan must be a non-negative integer, got {lifespan!r}")
        return cls(
            dir=str(payload["Dir"]),
            file_suffix=str(payload.get("FileSuffix", "")),
            file_format=str(payload.get("FileFormat", "")),
            lifespan=lifespan,
        )

    def to_dict(self) -> dict:
        return {
            "Dir": self.dir,
            "FileSuffix": self.file_suffix,
            "FileFormat": self.file_format,
            "Lifespan": self.lifespan,
        }


@dataclass(frozen=True)
class Config:
    """Runtime configuration loaded from the kcm config file."""

    watch_dirs: tuple[WatchDir, ...] = field(default_factory=tuple)
    kubeconfig_link: str = ""
    refresh_seconds: float = 2.0

    @classmethod
    def from_dict(cls, payload: dict) -> Config:
        """Create a Config object from a raw dictionary."""
        watch_dirs_raw = payload.get("WatchDirs", [])
        if not isinstance(watch_dirs_raw, list):
            raise TypeError("WatchDirs must be a list")

        refresh_seconds = float(payload.get("RefreshSeconds", 2.0))
        if refresh_seconds < 0:
            raise ValueError(f"RefreshSeconds must not be negative, got {refresh_seconds}")

        return cls(
            watch_dirs=tuple(WatchDir.from_dict(item) for item in watch_dirs_raw),
            kubeconfig_link=str(payload["KubeconfigLink"]),
            refresh_seconds=refresh_seconds,
        )

    def to_dict(self) -> dict:
        return {
            "WatchDirs": [watch_dir.to_dict() for watch_dir in self.watch_dirs],
            "KubeconfigLink": self.kubeconfig_link,
            "RefreshSeconds": self.refresh_seconds,
        }

    def replace(self, old: str, new: str) -> Config:
        """Return a copy with ``old`` replaced by ``new`` in every path."""
        return replace(
            self,
            kubeconfig_link=self.kubeconfig_link.replace(old, new),
            watch_dirs=tuple(
                replace(watch_dir, dir=watch_dir.dir.replace(old, new))
                for watch_dir in self.watch_dirs
            ),
        )


DEFAULT_CONFIG = Config(
    watch_dirs=(
        WatchDir(
            dir="$HOME/Downloads",
            file_suffix=".kubeconfig.txt",
            file_format="cluster-bot-%Y-%m-%d-%H%M%S.kubeconfig.txt",
            lifespan=150,
        ),
    ),
    kubeconfig_link="$HOME/.cluster",
)


def load_config(path: Path) -> Config:
    """Load configuration from the provided path."""
    try:
        with path.open("r", encoding="utf-8") as handle:
            data = json.load(handle)
        return Config.from_dict(data)
    except (OSError, json.JSONDecodeError) as err:
        raise ConfigError(f"Failed to read config {path}: {err}") from err
    except (KeyError, TypeError, ValueError) as err:
        raise ConfigError(f"Invalid config {path}: {err}") from err


def write_config(path: Path, config: Config) -> None:
    """Serialize the configuration as indented JSON."""
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        with path.open("w", encoding="utf-8") as handle:
            json.dump(config.to_dict(), handle, indent="\t")
            handle.write("\n")
    except OSError as err:
        raise ConfigError(f"Failed to write config {path}: {err}") from err


def ensure_config(path: Path | None = None, home: Path | None = None) -> Config:
    """Load the user's config, creating it with defaults on first run.

    Args:
        path: Config file location (defaults to ``~/.kcm``)
        home: Home directory used for ``$HOME`` substitution

    Returns:
        The loaded or newly written configuration

    Raises:
        ConfigError: If the home directory or config file cannot be used
    """
    if home is None:
        try:
            home = Path.home()
        except RuntimeError as err:
            raise ConfigError(f"Could not resolve home directory: {err}") from err

    if path is None:
        path = home / CONFIG_FILENAME

    if path.exists():
        logger.debug(f"Loading config from {path}")
        return load_config(path)

    config = DEFAULT_CONFIG.replace(HOME_PLACEHOLDER, str(home))
    write_config(path, config)
    logger.info(
        "Wrote default config",
        extra={"extra_context": {"config_path": str(path)}},
    )
    return config
