"""Utility functions for time handling.

All timestamps are UTC and timezone-aware. Diagnoses persist them as
ISO-8601 strings with a "+00:00" offset via iso_now(), which keeps
lexical and chronological order identical in SQLite.
"""

from __future__ import annotations

from datetime import datetime, timezone


def utc_now() -> datetime:
    """Return current UTC time as an aware datetime."""
    return datetime.now(timezone.utc)


def iso_now(*, timespec: str | None = None) -> str:
    """Return current UTC time as an ISO8601 string (timezone-aware)."""
    now = utc_now()
    if timespec:
        return now.isoformat(timespec=timespec)
    return now.isoformat()


def epoch_ms() -> int:
    """Milliseconds since the Unix epoch, for upload filenames."""
    return int(utc_now().timestamp() * 1000)
