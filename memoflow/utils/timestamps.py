"""Timestamp helpers for values persisted in SQLite."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional

from dateutil import parser as date_parser

from ..logging_config import logger

UTC = timezone.utc


def utc_now() -> datetime:
    """Return the current time in UTC."""

    return datetime.now(UTC)


def to_storage_timestamp(moment: datetime) -> str:
    """Normalize timestamps before writing to SQLite."""

    return moment.astimezone(UTC).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def from_storage_timestamp(value: Optional[str]) -> Optional[datetime]:
    if not value:
        return None
    try:
        parsed = date_parser.isoparse(value)
    except (ValueError, OverflowError):
        logger.warning("unparseable stored timestamp", extra={"value": value})
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed


__all__ = ["UTC", "from_storage_timestamp", "to_storage_timestamp", "utc_now"]
