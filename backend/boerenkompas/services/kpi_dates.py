"""UTC date boundaries shared by every KPI count in one request.

All boundaries derive from a single ``now`` snapshot so that the counts agree
on what "today" and "this month" mean.
"""
import calendar
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta, timezone

END_OF_DAY = time(23, 59, 59, 999999)


def to_iso(value: datetime) -> str:
    """Millisecond ISO-8601 in UTC with a ``Z`` suffix, e.g. 2024-01-15T00:00:00.000Z."""
    return value.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def _start_of(day: date) -> datetime:
    return datetime.combine(day, time.min, tzinfo=timezone.utc)


def _end_of(day: date) -> datetime:
    return datetime.combine(day, END_OF_DAY, tzinfo=timezone.utc)


def _month_bounds(year: int, month: int) -> tuple[datetime, datetime]:
    last_day = calendar.monthrange(year, month)[1]
    return _start_of(date(year, month, 1)), _end_of(date(year, month, last_day))


@dataclass(frozen=True)
class DateBoundaries:
    now: datetime
    today_start: datetime
    today_end: datetime
    seven_days_end: datetime
    month_start: datetime
    month_end: datetime
    prev_month_start: datetime
    prev_month_end: datetime
    today_date: date  # for date-only columns such as documents.expires_at

    def as_dict(self) -> dict[str, str]:
        return {
            "now": to_iso(self.now),
            "todayStart": to_iso(self.today_start),
            "todayEnd": to_iso(self.today_end),
            "sevenDaysEnd": to_iso(self.seven_days_end),
            "monthStart": to_iso(self.month_start),
            "monthEnd": to_iso(self.month_end),
            "prevMonthStart": to_iso(self.prev_month_start),
            "prevMonthEnd": to_iso(self.prev_month_end),
            "todayDate": self.today_date.isoformat(),
        }


def get_date_boundaries(now: datetime | None = None) -> DateBoundaries:
    """Compute all KPI window boundaries from one clock reading.

    Naive datetimes are taken to be UTC. End-of-period boundaries are the last
    representable instant of that period (serialised as ``23:59:59.999``).
    """
    if now is None:
        now = datetime.now(timezone.utc)
    elif now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    else:
        now = now.astimezone(timezone.utc)

    today = now.date()
    today_end = _end_of(today)
    month_start, month_end = _month_bounds(today.year, today.month)

    if today.month == 1:
        prev_month_start, prev_month_end = _month_bounds(today.year - 1, 12)
    else:
        prev_month_start, prev_month_end = _month_bounds(today.year, today.month - 1)

    return DateBoundaries(
        now=now,
        today_start=_start_of(today),
        today_end=today_end,
        seven_days_end=today_end + timedelta(days=7),
        month_start=month_start,
        month_end=month_end,
        prev_month_start=prev_month_start,
        prev_month_end=prev_month_end,
        today_date=today,
    )
