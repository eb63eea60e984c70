# Overview: UTC clock and ISO-8601 conversions shared by models, services and routes.
#
# Stored datetimes are naive and always mean UTC.

from __future__ import annotations

from datetime import date, datetime, timezone
from typing import Optional


def utcnow() -> datetime:
    """Current time as a naive UTC datetime."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def parse_iso_datetime(value: Optional[str]) -> Optional[datetime]:
    """
    Read an ISO-8601 timestamp from client input.

    Blank input gives None. Offsets (including a trailing Z) are converted to
    UTC; a timestamp without offset is taken as UTC already. Raises
    ValueError on malformed input.
    """
    if value is None:
        return None
    text = value.strip()
    if not text:
        return None
    if text[-1] in "zZ":
        text = text[:-1] + "+00:00"

    parsed = datetime.fromisoformat(text)
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc)
    return parsed.replace(tzinfo=None)


def parse_iso_date(value: Optional[str]) -> Optional[date]:
    """Calendar date from "YYYY-MM-DD"; a full timestamp is cut to its UTC day."""
    if value is None:
        return None
    text = value.strip()
    if not text:
        return None
    if len(text) == 10:
        return date.fromisoformat(text)
    parsed = parse_iso_datetime(text)
    return parsed.date() if parsed else None


def to_utc_z(dt: Optional[datetime]) -> Optional[str]:
    """Whole-second ISO-8601 with a Z suffix, e.g. 2026-03-01T08:00:00Z."""
    if dt is None:
        return None
    if dt.tzinfo is not None:
        dt = dt.astimezone(timezone.utc).replace(tzinfo=None)
    return dt.replace(microsecond=0).isoformat() + "Z"


def to_iso_date(d: Optional[date]) -> Optional[str]:
    return d.isoformat() if d else None
