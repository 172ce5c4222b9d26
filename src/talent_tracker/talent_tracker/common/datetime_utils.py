from __future__ import annotations

from datetime import date, datetime
from typing import Optional

from ..core.exceptions import ValidationError


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date."""
    return datetime.strptime(value, "%Y-%m-%d").date()


def parse_iso_datetime(value: Optional[str], field_name: str) -> Optional[datetime]:
    """Parse an ISO-8601 timestamp; empty values map to None.

    Offsets are converted to server-local wall time, the convention of the
    naive DATETIME columns and of `now_local`.
    """
    if value is None:
        return None
    if not isinstance(value, str):
        raise ValidationError(f"{field_name} must be an ISO-8601 string", code="invalid-request")
    v = value.strip()
    if not v:
        return None
    if v.endswith("Z"):
        v = v[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(v)
    except ValueError:
        raise ValidationError(f"{field_name} is not a valid ISO-8601 timestamp", code="invalid-request")
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone().replace(tzinfo=None)
    return parsed


def format_iso(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None


def now_local() -> datetime:
    """Current local time.

    Note: Wrapped so tests can patch/mocked easier.
    """
    return datetime.now()
