"""TUI utility functions for formatting and display helpers."""

import shutil
from datetime import datetime, timedelta


def format_duration(seconds: float) -> str:
    """
    Format duration in seconds to HH:MM:SS string.

    Args:
        seconds: Duration in seconds (can be float)

    Returns:
        String formatted as HH:MM:SS (e.g., "02:30:00")

    Examples:
        >>> format_duration(0)
        '00:00:00'
        >>> format_duration(9000)
        '02:30:00'
    """
    if seconds < 0:
        seconds = 0

    td = timedelta(seconds=int(seconds))
    total_seconds = int(td.total_seconds())
    hours, remainder = divmod(total_seconds, 3600)
    minutes, secs = divmod(remainder, 60)

    return f"{hours:02d}:{minutes:02d}:{secs:02d}"


def format_lifespan(minutes: int) -> str:
    """
    Format a configured lifespan, where 0 means the file never expires.

    Examples:
        >>> format_lifespan(150)
        '02:30:00'
        >>> format_lifespan(0)
        'never'
    """
    if minutes == 0:
        return "never"
    return format_duration(minutes * 60)


def format_timestamp(timestamp: datetime | None) -> str:
    """
    Format an entry timestamp for display, "-" when the file has none.

    Examples:
        >>> from datetime import UTC
        >>> format_timestamp(datetime(2024, 5, 1, 9, 30, tzinfo=UTC))
        '2024-05-01 09:30:00 +0000'
    """
    if timestamp is None:
        return "-"
    return timestamp.strftime("%Y-%m-%d %H:%M:%S %z")


def yes_no(value: bool) -> str:
    return "yes" if value else "no"


def truncate_text(text: str, max_len: int) -> str:
    """
    Truncate text to max length, adding ellipsis if needed.

    Examples:
        >>> truncate_text("short", 10)
        'short'
        >>> truncate_text("this is a long text", 10)
        'this is...'
    """
    if len(text) <= max_len:
        return text

    if max_len <= 3:
        return "..."[:max_len]

    return text[: max_len - 3] + "..."


def get_terminal_size() -> tuple[int, int]:
    """
    Get terminal size as (columns, rows) tuple, defaulting to (80, 24).
    """
    try:
        size = shutil.get_terminal_size(fallback=(80, 24))
        return (size.columns, size.lines)
    except Exception:
        return (80, 24)
