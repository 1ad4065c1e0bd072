"""
Time-related utilities for the application.

All timestamps are generated in UTC. Post timestamps are serialized using
ISO-8601 format with timezone information; storage keys use Unix
milliseconds so that keys sort by upload time.
"""

from datetime import datetime, timezone


def utc_now_iso() -> str:
    """Return current UTC time in ISO-8601 format.

    Example:
        2024-01-15T10:42:31.123456+00:00
    """
    return datetime.now(timezone.utc).isoformat()


def utc_now_millis() -> int:
    """Return the current Unix time in milliseconds."""
    return int(datetime.now(timezone.utc).timestamp() * 1000)
