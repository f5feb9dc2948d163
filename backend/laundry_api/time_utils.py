"""
Timestamps.

The database layer stores UTC as naive datetimes. Everything entering the
system (client ISO strings) is normalized to that form, and everything
leaving it is rendered as ISO-8601 with a trailing 'Z'.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional


def utcnow() -> datetime:
    """Current UTC time, naive."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def as_naive_utc(dt: datetime) -> datetime:
    """Aware -> converted to UTC and stripped; naive is assumed UTC already."""
    if dt.tzinfo is None:
        return dt
    return dt.astimezone(timezone.utc).replace(tzinfo=None)


def parse_client_datetime(value: Optional[str]) -> Optional[datetime]:
    """
    Parse a pickup/delivery date sent by a client.

    Blank -> None. A trailing 'Z' or an explicit offset is honoured; an
    offset-less value is taken as UTC. Raises ValueError on garbage.
    """
    if value is None or not value.strip():
        return None
    text = value.strip()
    if text[-1] in "zZ":
        text = text[:-1] + "+00:00"
    return as_naive_utc(datetime.fromisoformat(text))


def to_utc_z(dt: Optional[datetime]) -> Optional[str]:
    """Render as 'YYYY-MM-DDTHH:MM:SSZ' (seconds precision) or None."""
    if dt is None:
        return None
    return as_naive_utc(dt).replace(microsecond=0).isoformat() + "Z"
