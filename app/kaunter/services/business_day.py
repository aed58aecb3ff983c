from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, time, timedelta, timezone
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from app.kaunter.core.config import settings
from app.kaunter.core.error_catalog import AppError, ErrorCatalog

_UTC_ALIASES = ("UTC", "Z", "Etc/UTC")


@dataclass(frozen=True)
class DateRange:
    """Inclusive bounds, expressed both locally and as naive UTC for querying."""

    start_local: datetime
    end_local: datetime
    start_utc: datetime
    end_utc: datetime
    timezone_name: str

    @property
    def start_date(self) -> date:
        return self.start_local.date()

    @property
    def end_date(self) -> date:
        return self.end_local.date()


def resolve_timezone(timezone_name: str | None = None):
    tz_name = timezone_name or settings.STORE_TIMEZONE
    if tz_name in _UTC_ALIASES:
        return timezone.utc
    try:
        return ZoneInfo(tz_name)
    except (ZoneInfoNotFoundError, ValueError) as exc:
        raise AppError(ErrorCatalog.VALIDATION_ERROR, details={"message": "invalid timezone"}) from exc


def business_today(tz=None) -> date:
    return datetime.now(tz or resolve_timezone()).date()


def _naive_utc(value: datetime) -> datetime:
    return value.astimezone(timezone.utc).replace(tzinfo=None)


def day_range(day: date, tz) -> DateRange:
    start_local = datetime.combine(day, time.min, tzinfo=tz)
    end_local = start_local + timedelta(days=1) - timedelta(microseconds=1)
    return DateRange(
        start_local=start_local,
        end_local=end_local,
        start_utc=_naive_utc(start_local),
        end_utc=_naive_utc(end_local),
        timezone_name=str(tz),
    )


def resolve_date_range(start_value: str | None, end_value: str | None, tz) -> DateRange:
    now_local = datetime.now(tz)
    start_local, _ = _parse_datetime_or_date(
        start_value, tz, default=now_local.replace(hour=0, minute=0, second=0, microsecond=0)
    )
    end_local, end_is_date = _parse_datetime_or_date(end_value, tz, default=now_local)
    if end_is_date:
        end_local = end_local + timedelta(days=1) - timedelta(microseconds=1)
    if end_local < start_local:
        raise AppError(ErrorCatalog.VALIDATION_ERROR, details={"message": "end_date must not be before start_date"})
    return DateRange(
        start_local=start_local,
        end_local=end_local,
        start_utc=_naive_utc(start_local),
        end_utc=_naive_utc(end_local),
        timezone_name=str(tz),
    )


def _parse_datetime_or_date(value: str | None, tz, *, default: datetime) -> tuple[datetime, bool]:
    if not value:
        return default, False
    normalized = value.strip().replace("Z", "+00:00")
    if "T" in normalized or ":" in normalized:
        try:
            parsed = datetime.fromisoformat(normalized)
        except ValueError as exc:
            raise AppError(ErrorCatalog.VALIDATION_ERROR, details={"message": "invalid datetime"}) from exc
        if parsed.tzinfo is None:
            return parsed.replace(tzinfo=tz), False
        return parsed.astimezone(tz), False
    try:
        parsed_date = date.fromisoformat(normalized)
    except ValueError as exc:
        raise AppError(ErrorCatalog.VALIDATION_ERROR, details={"message": "invalid date"}) from exc
    return datetime.combine(parsed_date, time.min, tzinfo=tz), True
