from __future__ import annotations

from datetime import date, datetime, time, timedelta, timezone
from typing import Iterable, Iterator
from zoneinfo import ZoneInfo

from studio_bookings.domain.entities.booking import Booking

Interval = tuple[datetime, datetime]


def ensure_aware(value: datetime) -> datetime:
    """Treat naive datetimes as UTC instants."""
    if value.tzinfo is None or value.utcoffset() is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def to_utc(value: datetime) -> datetime:
    return ensure_aware(value).astimezone(timezone.utc)


def local_date(instant: datetime, tz: ZoneInfo) -> date:
    return ensure_aware(instant).astimezone(tz).date()


def _local_wall_clock(day: date, minute_of_day: int, tz: ZoneInfo, fold: int = 0) -> datetime:
    extra_days, minute_of_day = divmod(minute_of_day, 24 * 60)
    local_day = day + timedelta(days=extra_days)
    return datetime.combine(local_day, time(minute_of_day // 60, minute_of_day % 60, fold=fold), tzinfo=tz)


def at_wall_clock(day: date, minute_of_day: int, tz: ZoneInfo, fold: int = 0) -> datetime:
    """UTC instant for a wall-clock minute of `day` in `tz`. Minute 1440 is next midnight.

    Ambiguous and nonexistent wall-clock times resolve per ``fold`` as in PEP 495.
    """
    return _local_wall_clock(day, minute_of_day, tz, fold).astimezone(timezone.utc)


def wall_clock_exists(day: date, minute_of_day: int, tz: ZoneInfo) -> bool:
    """False for wall-clock times skipped by a forward DST shift."""
    local = _local_wall_clock(day, minute_of_day, tz)
    round_trip = local.astimezone(timezone.utc).astimezone(tz)
    return round_trip.replace(tzinfo=None) == local.replace(tzinfo=None)


def earliest_instant(day: date, minute_of_day: int, tz: ZoneInfo) -> datetime:
    """Earliest UTC instant a wall-clock minute can denote (repeated or skipped times)."""
    return min(at_wall_clock(day, minute_of_day, tz, fold=0), at_wall_clock(day, minute_of_day, tz, fold=1))


def day_bounds(day: date, tz: ZoneInfo) -> Interval:
    """[start, end) of a calendar day in `tz`, as UTC instants."""
    return at_wall_clock(day, 0, tz), at_wall_clock(day, 24 * 60, tz)


def iter_days(start: date, end: date) -> Iterator[date]:
    current = start
    while current <= end:
        yield current
        current += timedelta(days=1)


def overlaps(start: datetime, end: datetime, other_start: datetime, other_end: datetime) -> bool:
    # Half-open intervals: touching endpoints do not overlap.
    return start < other_end and end > other_start


def busy_intervals(
    bookings: Iterable[Booking],
    buffer_before_minutes: int = 0,
    buffer_after_minutes: int = 0,
) -> list[Interval]:
    """Occupied intervals of blocking bookings, widened by the buffers."""
    before = timedelta(minutes=buffer_before_minutes)
    after = timedelta(minutes=buffer_after_minutes)
    return [
        (to_utc(b.start_time) - before, to_utc(b.end_time) + after)
        for b in bookings
        if b.blocks_time
    ]


def conflicts_with_any(start: datetime, end: datetime, busy: Iterable[Interval]) -> bool:
    return any(overlaps(start, end, busy_start, busy_end) for busy_start, busy_end in busy)


def host_day_counts(bookings: Iterable[Booking], tz: ZoneInfo) -> dict[tuple[str, date], int]:
    """Count blocking bookings per (host, local date)."""
    counts: dict[tuple[str, date], int] = {}
    for b in bookings:
        if not b.blocks_time or not b.host:
            continue
        key = (b.host, local_date(b.start_time, tz))
        counts[key] = counts.get(key, 0) + 1
    return counts
