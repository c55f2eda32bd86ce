"""
Utility functions for the HoopSync live stat-keeper client.

This module contains common time helpers used throughout the application.
"""
import re
from datetime import datetime, timezone

_MMSS_RE = re.compile(r"^\s*(\d{1,2}):([0-5]\d)\s*$")


def fmt_mmss(seconds: int) -> str:
    """
    Format seconds as MM:SS string.

    Args:
        seconds: Number of seconds to format

    Returns:
        Formatted time string in MM:SS format

    Example:
        >>> fmt_mmss(90)
        '01:30'
        >>> fmt_mmss(-5)
        '00:00'
    """
    seconds = max(0, int(seconds))
    m = seconds // 60
    s = seconds % 60
    return f"{m:02d}:{s:02d}"


def parse_mmss(text: str) -> int:
    """
    Parse a game clock string such as ``"7:45"`` into seconds.

    Raises:
        ValueError: If the text is not in M:SS / MM:SS form
    """
    match = _MMSS_RE.match(str(text))
    if not match:
        raise ValueError(f"Invalid clock value: {text!r}")
    return int(match.group(1)) * 60 + int(match.group(2))


def now_iso() -> str:
    """Current UTC time as an ISO-8601 string with milliseconds."""
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")
