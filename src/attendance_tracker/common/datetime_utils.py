from __future__ import annotations

from datetime import date, datetime, time, timedelta, timezone
from typing import Any, Optional

from ..core.exceptions import ValidationError


def utc_now() -> datetime:
    """Current time, timezone-aware UTC.

    Note: Wrapped so tests can patch/mocked easier.
    """
    return datetime.now(timezone.utc)


def calendar_day(moment: datetime) -> date:
    """UTC calendar day of an instant; naive values are taken as UTC."""
    return as_utc(moment).date()


def day_window(day: date) -> tuple[datetime, datetime]:
    """[start-of-day, start-of-next-day) in UTC."""
    start = datetime.combine(day, time.min, tzinfo=timezone.utc)
    return start, start + timedelta(days=1)


def as_utc(moment: datetime) -> datetime:
    if moment.tzinfo is None:
        return moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(timezone.utc)


def to_naive_utc(moment: datetime) -> datetime:
    """Form stored in DATETIME columns (the DB session runs in UTC)."""
    return as_utc(moment).replace(tzinfo=None)


def _iso_text(value: Any, field_name: str) -> str:
    if not isinstance(value, str):
        raise ValidationError(
            f"Invalid {field_name}: {value!r}",
            errors=[{"field": field_name, "message": "expected an ISO-8601 string"}],
        )
    return value.strip()


def parse_iso_date(value: Any, field_name: str = "date") -> date:
    """Parse YYYY-MM-DD (or a full ISO timestamp) into its UTC calendar day."""
    v = _iso_text(value, field_name)
    if len(v) == 10:
        try:
            return datetime.strptime(v, "%Y-%m-%d").date()
        except ValueError:
            raise ValidationError(f"Invalid {field_name}: {value}", errors=[{"field": field_name, "message": "invalid"}])
    return calendar_day(parse_iso_datetime(v, field_name))


def parse_iso_datetime(value: Any, field_name: str = "date") -> datetime:
    """Parse an ISO-8601 date or timestamp into an aware UTC datetime."""
    v = _iso_text(value, field_name)
    if v.endswith("Z"):
        v = v[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(v)
    except ValueError:
        raise ValidationError(f"Invalid {field_name}: {value}", errors=[{"field": field_name, "message": "invalid"}])
    return as_utc(parsed)


def isoformat_utc(moment: Optional[datetime]) -> Optional[str]:
    if moment is None:
        return None
    return as_utc(moment).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def iter_days(start: date, end: date):
    day = start
    while day <= end:
        yield day
        day += timedelta(days=1)
