"""Danish date and time formatting helpers."""

from datetime import date, datetime, timezone
from zoneinfo import ZoneInfo

DEFAULT_TIMEZONE = "Europe/Copenhagen"


def as_utc(value: datetime) -> datetime:
    """Treat naive datetimes (as returned by SQLite) as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def time_ago(value: datetime, now: datetime | None = None, tz: str = DEFAULT_TIMEZONE) -> str:
    """Human readable age, e.g. ``5 min siden``; older than 30 days gives a date."""
    value = as_utc(value)
    now = as_utc(now) if now is not None else datetime.now(timezone.utc)
    seconds = int((now - value).total_seconds())

    if seconds < 60:
        return "lige nu"
    if seconds < 3600:
        return f"{seconds // 60} min siden"
    if seconds < 86400:
        return f"{seconds // 3600} timer siden"
    if seconds < 2592000:
        return f"{seconds // 86400} dage siden"
    return format_date(value, tz)


def format_date(value: datetime, tz: str = DEFAULT_TIMEZONE) -> str:
    local = as_utc(value).astimezone(ZoneInfo(tz))
    return f"{local.day}.{local.month}.{local.year}"


def format_time(value: datetime, tz: str = DEFAULT_TIMEZONE) -> str:
    return as_utc(value).astimezone(ZoneInfo(tz)).strftime("%H.%M.%S")


def format_datetime(value: datetime, tz: str = DEFAULT_TIMEZONE) -> str:
    return f"{format_date(value, tz)} {format_time(value, tz)}"


def local_date(value: datetime, tz: str = DEFAULT_TIMEZONE) -> date:
    return as_utc(value).astimezone(ZoneInfo(tz)).date()
