"""powchain.core.time

Block timestamps are integer milliseconds since the Unix epoch, UTC.

This module is the *only* clock surface in the codebase.
"""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

_EPOCH = datetime.fromtimestamp(0, tz=UTC)


def utc_now() -> datetime:
    """Return an aware UTC datetime."""

    return datetime.now(tz=UTC)


def now_ms() -> int:
    """Current time as epoch milliseconds."""

    return int(utc_now().timestamp() * 1000)


def ms_to_dt(value: int) -> datetime:
    """Convert epoch milliseconds into an aware UTC datetime.

    Raises:
        ValueError: if the value is negative.
    """

    if value < 0:
        raise ValueError(f"timestamp must be non-negative, got {value}")
    return _EPOCH + timedelta(milliseconds=value)


def format_ms(value: int) -> str:
    return ms_to_dt(value).isoformat(timespec="milliseconds")
