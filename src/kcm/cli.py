"""CLI entry point for kcm.

This module handles command-line argument parsing, logging setup, config
bootstrap and the two commands: the interactive selector and the listing.
"""

from __future__ import annotations

import argparse
import json
import logging
import logging.handlers
import os
import sys
from datetime import UTC, datetime
from pathlib import Path

from rich.console import Console
from rich.table import Table

from .config import Config, ensure_config
from .entries import rank_entries, scan_entries, utc_now
from .exceptions import ConfigError, ScanError
from .pointer import ActivePointer
from .tui.app import KcmApp
from .tui.tui_utils import format_lifespan, format_timestamp, yes_no

logger = logging.getLogger(__name__)

KUBECONFIG_ENV = "KUBECONFIG"


class JSONFormatter(logging.Formatter):
    """Custom JSON formatter for structured logging."""

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSON.

        Args:
            record: Log record to format

        Returns:
            JSON-formatted log line
        """
        log_data = {
            "timestamp": datetime.fromtimestamp(record.created, tz=UTC).isoformat(),
            "level": record.levelname,
            "event": record.getMessage(),
            "context": {
                "module": record.module,
                "function": record.funcName,
                "line": record.lineno,
            },
        }

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        if hasattr(record, "extra_context"):
            log_data["context"].update(record.extra_context)

        return json.dumps(log_data)


def _setup_logging(log_file: Path, debug: bool) -> None:
    """Setup structured JSON logging to file.

    Args:
        log_file: Path to log file
        debug: Enable debug level logging
    """
    log_file.parent.mkdir(parents=True, exist_ok=True)

    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG if debug else logging.INFO)

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    # Create rotating file handler (10MB max, 3 backups)
    file_handler = logging.handlers.RotatingFileHandler(
        log_file,
        maxBytes=10 * 1024 * 1024,
        backupCount=3,
        encoding="utf-8",
    )
    file_handler.setFormatter(JSONFormatter())
    file_handler.setLevel(logging.DEBUG if debug else logging.INFO)

    root_logger.addHandler(file_handler)

    logger.info(
        "Logging initialized",
        extra={"extra_context": {"log_file": str(log_file), "debug": debug}},
    )


def _log_path() -> Path:
    """Return the log file location under ~/.cache.

    Raises:
        ConfigError: If the home directory cannot be resolved
    """
    try:
        home = Path.home()
    except RuntimeError as err:
        raise ConfigError(f"Cannot resolve home directory: {err}") from err
    return home / ".cache" / "kcm" / "kcm.log"


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="kcm",
        description=(
            "KubeConfig Manager keeps track of your kubeconfig files "
            "and lets you switch between them"
        ),
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Path to the kcm config file (default: ~/.kcm)",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug logging",
    )

    subparsers = parser.add_subparsers(dest="command")
    subparsers.add_parser(
        "run",
        help="Run the selector interface; the same as running kcm with no command",
    )
    subparsers.add_parser(
        "list",
        help="List kubeconfig files found in the watch directories",
    )
    return parser


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command line arguments.

    Returns:
        Parsed arguments
    """
    return _build_parser().parse_args(argv)


def build_entry_table(config: Config) -> Table:
    """Scan the watch directories and build the listing table.

    Raises:
        ScanError: If the scan fails
    """
    now = utc_now()
    entries = rank_entries(scan_entries(config.watch_dirs), now)
    active = ActivePointer(config.kubeconfig_link).read_active()

    table = Table(show_header=True, header_style="bold magenta")
    table.add_column("Active", style="green")
    table.add_column("Path")
    table.add_column("Expired", style="red")
    table.add_column("Created At")
    table.add_column("Valid For")

    for entry in entries:
        table.add_row(
            "yes" if active and entry.name == active else "",
            str(entry.path),
            yes_no(entry.expired(now)),
            format_timestamp(entry.timestamp),
            format_lifespan(entry.lifespan_minutes),
        )
    return table


def run_list(config: Config, console: Console) -> int:
    """Print the ranked kubeconfigs as a table.

    Returns:
        Exit code (0=success, 1=scan failure)
    """
    try:
        table = build_entry_table(config)
    except ScanError as err:
        console.print(f"[red]Error: {err}[/red]")
        logger.error("List scan failed", extra={"extra_context": {"error": str(err)}})
        return 1
    console.print(table)
    return 0


def run_selector(config: Config, console: Console) -> int:
    """Run the interactive selector.

    Returns:
        Exit code (0=success, 1=activation failed, 130=interrupted)
    """
    if not os.environ.get(KUBECONFIG_ENV):
        console.print(f"{KUBECONFIG_ENV} needs to be set:")
        console.print(f"\texport {KUBECONFIG_ENV}={config.kubeconfig_link}", highlight=False)
        return 0

    app = KcmApp(config)
    exit_code = app.run()

    state = app.state
    if state.activated is not None:
        if exit_code == 0:
            console.print(f"{state.activated.name} is now your active kubeconfig.")
        else:
            console.print(f"[red]Error: {state.error}[/red]")
    return exit_code


def main(argv: list[str] | None = None) -> int:
    """Main entry point for kcm.

    Returns:
        Exit code (0=success, 1=error, 130=SIGINT)
    """
    args = _parse_args(argv)
    console = Console()

    try:
        log_file = _log_path()
        _setup_logging(log_file, args.debug)
        config = ensure_config(args.config)
    except ConfigError as err:
        console.print(f"[red]Error loading config: {err}[/red]")
        logger.error(
            "Failed to load config",
            extra={"extra_context": {"error": str(err)}},
            exc_info=True,
        )
        return 1

    logger.info(
        "Config loaded",
        extra={
            "extra_context": {
                "command": args.command or "run",
                "watch_dirs": [w.dir for w in config.watch_dirs],
                "kubeconfig_link": config.kubeconfig_link,
            }
        },
    )

    if args.command == "list":
        return run_list(config, console)

    try:
        return run_selector(config, console)
    except KeyboardInterrupt:
        logger.info("kcm interrupted by user (KeyboardInterrupt)")
        return 130
    except Exception as err:
        logger.error(
            "kcm crashed with unhandled exception",
            extra={"extra_context": {"error": str(err)}},
            exc_info=True,
        )
        console.print(f"[red]Fatal error: {err}[/red]")
        console.print(f"[dim]Check logs at: {log_file}[/dim]")
        return 1


if __name__ == "__main__":
    sys.exit(main())
