"""Shared utilities for Retail Core."""

from __future__ import annotations


def format_duration(seconds: float) -> str:
    """Format an elapsed time for CLI log lines.

    Args:
        seconds: Elapsed seconds (can be fractional; negatives clamp to 0).

    Returns:
        "45.2s" under a minute, "1m 30.5s" under an hour, "2h 05m 03s" beyond.

    Examples:
        >>> format_duration(45.2)
        '45.2s'
        >>> format_duration(90.5)
        '1m 30.5s'
        >>> format_duration(7503)
        '2h 05m 03s'
    """
    seconds = max(seconds, 0.0)
    if seconds < 60:
        return f"{seconds:.1f}s"
    mins, secs = divmod(seconds, 60.0)
    if mins < 60:
        return f"{int(mins)}m {secs:04.1f}s"
    hours, mins = divmod(int(mins), 60)
    return f"{hours}h {mins:02d}m {int(secs):02d}s"
