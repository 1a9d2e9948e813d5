"""
Utility functions for ISS Trail Tracker.
Includes logging and time formatting helpers.
"""

import datetime


def log(source: str, message: str):
    """
    Log a message with timestamp and source.

    Args:
        source: The source/module of the log message
        message: The log message
    """
    timestamp = datetime.datetime.now().strftime("%H:%M:%S")
    print(f"[{timestamp}] [{source}] {message}")


def format_time(iso_datetime: str) -> str:
    """
    Format an RFC 3339 datetime as local wall-clock time.

    Returns the input unchanged if it cannot be parsed.
    """
    try:
        dt = datetime.datetime.fromisoformat(iso_datetime.replace("Z", "+00:00"))
    except (AttributeError, ValueError):
        return str(iso_datetime)
    if dt.tzinfo is not None:
        dt = dt.astimezone()
    return dt.strftime("%H:%M:%S")


def rfc3339_from_timestamp(ts: int) -> str:
    """Convert a Unix timestamp to an RFC 3339 UTC string."""
    try:
        dt = datetime.datetime.fromtimestamp(ts, tz=datetime.timezone.utc)
    except (OverflowError, OSError, TypeError, ValueError):
        dt = datetime.datetime.now(datetime.timezone.utc)
    return dt.isoformat()
