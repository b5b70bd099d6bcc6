"""Tests for config loading and first-run defaults."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from kcm.config import (
    DEFAULT_CONFIG,
    Config,
    WatchDir,
    ensure_config,
    load_config,
    write_config,
)
from kcm.exceptions import ConfigError


@pytest.fixture
def payload() -> dict:
    return {
        "WatchDirs": [
            {
                "Dir": "/home/me/Downloads",
                "FileSuffix": ".kubeconfig.txt",
                "FileFormat": "cluster-bot-%Y-%m-%d-%H%M%S.kubeconfig.txt",
                "Lifespan": 150,
            }
        ],
        "KubeconfigLink": "/home/me/.cluster",
    }


class TestConfigFromDict:
    """Tests for Config.from_dict."""

    def test_parses_watch_dirs(self, payload: dict) -> None:
        """Watch dirs and the link are read from their JSON keys."""
        config = Config.from_dict(payload)

        assert config.watch_dirs == (
            WatchDir(
                dir="/home/me/Downloads",
                file_suffix=".kubeconfig.txt",
                file_format="cluster-bot-%Y-%m-%d-%H%M%S.kubeconfig.txt",
                lifespan=150,
            ),
        )
        assert config.kubeconfig_link == "/home/me/.cluster"
        assert config.refresh_seconds == 2.0

    def test_optional_fields_default(self) -> None:
        """FileFormat and Lifespan are optional."""
        config = Config.from_dict(
            {"WatchDirs": [{"Dir": "/d", "FileSuffix": ".yaml"}], "KubeconfigLink": "/l"}
        )
        assert config.watch_dirs[0].file_format == ""
        assert config.watch_dirs[0].lifespan == 0

    def test_round_trip(self, payload: dict) -> None:
        """to_dict produces what from_dict reads."""
        config = Config.from_dict(payload)
        assert Config.from_dict(config.to_dict()) == config

    def test_negative_lifespan_rejected(self, payload: dict) -> None:
        """Lifespan must not be negative."""
        payload["WatchDirs"][0]["Lifespan"] = -1
        with pytest.raises(ValueError, match="Lifespan"):
            Config.from_dict(payload)

    def test_negative_refresh_rejected(self, payload: dict) -> None:
        """RefreshSeconds must not be negative."""
        payload["RefreshSeconds"] = -1
        with pytest.raises(ValueError, match="RefreshSeconds"):
            Config.from_dict(payload)

    def test_watch_dirs_must_be_list(self, payload: dict) -> None:
        """WatchDirs must be a list."""
        payload["WatchDirs"] = {"Dir": "/d"}
        with pytest.raises(TypeError):
            Config.from_dict(payload)


class TestReplace:
    """Tests for placeholder substitution."""

    def test_replaces_home_in_all_paths(self) -> None:
        """$HOME is substituted in the link and each watch dir."""
        config = DEFAULT_CONFIG.replace("$HOME", "/home/me")

        assert config.kubeconfig_link == "/home/me/.cluster"
        assert config.watch_dirs[0].dir == "/home/me/Downloads"
        assert DEFAULT_CONFIG.kubeconfig_link == "$HOME/.cluster"


class TestLoadConfig:
    """Tests for load_config."""

    def test_invalid_json_raises_config_error(self, tmp_path: Path) -> None:
        """Corrupt config files are bootstrap errors."""
        path = tmp_path / ".kcm"
        path.write_text("{not json")
        with pytest.raises(ConfigError, match="Failed to read config"):
            load_config(path)

    def test_missing_key_raises_config_error(self, tmp_path: Path) -> None:
        """A config without the link is invalid."""
        path = tmp_path / ".kcm"
        path.write_text(json.dumps({"WatchDirs": []}))
        with pytest.raises(ConfigError, match="Invalid config"):
            load_config(path)


class TestEnsureConfig:
    """Tests for ensure_config."""

    def test_first_run_writes_defaults(self, tmp_path: Path) -> None:
        """Without a config file, defaults are written with $HOME replaced."""
        config = ensure_config(home=tmp_path)

        path = tmp_path / ".kcm"
        assert path.exists()
        assert config.kubeconfig_link == str(tmp_path / ".cluster")
        assert config.watch_dirs[0].dir == str(tmp_path / "Downloads")
        assert config.watch_dirs[0].lifespan == 150

        written = json.loads(path.read_text())
        assert written["KubeconfigLink"] == str(tmp_path / ".cluster")
        assert "$HOME" not in path.read_text()

    def test_existing_config_is_loaded(self, tmp_path: Path, payload: dict) -> None:
        """An existing file is loaded as-is."""
        path = tmp_path / "custom.json"
        path.write_text(json.dumps(payload))

        config = ensure_config(path, home=tmp_path)

        assert config.kubeconfig_link == "/home/me/.cluster"

    def test_second_run_reads_written_file(self, tmp_path: Path) -> None:
        """The defaults written on first run are read back on the next."""
        first = ensure_config(home=tmp_path)
        second = ensure_config(home=tmp_path)
        assert first == second

    def test_unwritable_location_raises(self, tmp_path: Path) -> None:
        """Failing to create the config is a bootstrap error."""
        blocker = tmp_path / "file"
        blocker.write_text("x")
        with pytest.raises(ConfigError, match="Failed to write config"):
            ensure_config(blocker / "sub" / ".kcm", home=tmp_path)

    def test_write_config_uses_tabs(self, tmp_path: Path) -> None:
        """Config files are indented with tabs."""
        path = tmp_path / ".kcm"
        write_config(path, DEFAULT_CONFIG)
        assert "\n\t\"WatchDirs\"" in path.read_text()
