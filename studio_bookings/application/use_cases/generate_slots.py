from __future__ import annotations

import logging
from datetime import date, datetime, timedelta, timezone
from typing import Sequence

from studio_bookings.application.utils.time_windows import (
    at_wall_clock,
    busy_intervals,
    conflicts_with_any,
    earliest_instant,
    host_day_counts,
    iter_days,
    local_date,
    to_utc,
    wall_clock_exists,
)
from studio_bookings.domain.entities.availability_rules import AvailabilityRules, AvailabilityWindow
from studio_bookings.domain.entities.booking import Booking
from studio_bookings.domain.entities.slot import Slot

logger = logging.getLogger(__name__)


def slot_length_minutes(rules: AvailabilityRules, requested_hours: float | None = None) -> int:
    """Length of (and step between) generated slots.

    Slot-granularity rules use ``slot_minutes``. Hour-granularity rules clamp the
    requested duration into the min/max booking hours; with no request the
    shortest allowed booking is offered.
    """
    if not rules.uses_hour_granularity:
        return rules.slot_minutes
    if requested_hours is None:
        requested_hours = rules.min_booking_hours or rules.slot_minutes / 60
    return max(1, int(round(rules.effective_duration_hours(requested_hours) * 60)))


def host_at_cap(
    rules: AvailabilityRules,
    window: AvailabilityWindow,
    day: date,
    counts: dict[tuple[str, date], int],
) -> bool:
    if not window.is_host_scoped or rules.max_per_day_per_host is None:
        return False
    return counts.get((window.host, day), 0) >= rules.max_per_day_per_host


def generate_slots(
    rules: AvailabilityRules,
    existing_bookings: Sequence[Booking],
    range_start: date | datetime,
    range_end: date | datetime,
    *,
    now: datetime | None = None,
    requested_hours: float | None = None,
) -> list[Slot]:
    """Compute the free slots of a resource for every day in [range_start, range_end].

    ``existing_bookings`` must already be limited to the resource and to the
    statuses the caller treats as occupying; cancelled bookings are ignored
    regardless. The result is ordered by start time.
    """
    tz = rules.tz
    now = to_utc(now) if now else datetime.now(timezone.utc)
    first_day = _to_local_day(range_start, tz)
    last_day = _to_local_day(range_end, tz)
    if first_day > last_day:
        raise ValueError("range_start must not be after range_end")

    if not rules.windows:
        return []

    latest_start = now + timedelta(days=rules.max_advance_days)
    first_day = max(first_day, local_date(now, tz))
    last_day = min(last_day, local_date(latest_start, tz))

    length = slot_length_minutes(rules, requested_hours)
    busy = busy_intervals(existing_bookings, rules.buffer_before_minutes, rules.buffer_after_minutes)
    counts = host_day_counts(existing_bookings, tz)

    slots: list[Slot] = []
    for day in iter_days(first_day, last_day):
        if day.weekday() >= 5 and not rules.allows_weekends:
            continue
        if rules.is_blacked_out(day):
            continue

        for window in rules.windows_for_weekday(day.weekday()):
            if host_at_cap(rules, window, day, counts):
                continue
            window_end = earliest_instant(day, window.end_minute, tz)
            # A trailing partial slot is never offered.
            for minute in range(window.start_minute, window.end_minute - length + 1, length):
                if not wall_clock_exists(day, minute, tz):
                    continue
                # Slot length is elapsed time, so DST shifts cannot stretch or invert it
                slot_start = at_wall_clock(day, minute, tz)
                slot_end = slot_start + timedelta(minutes=length)
                if slot_end > window_end:
                    continue
                if slot_start < now or slot_start > latest_start:
                    continue
                if conflicts_with_any(slot_start, slot_end, busy):
                    continue
                slots.append(Slot(start=slot_start, end=slot_end, date=day, host=window.host))

    ordered = _apply_pooling(slots, rules.pooling, existing_bookings, now)
    logger.debug("Generated slots", extra={"slot_count": len(ordered)})
    return ordered


def _to_local_day(value: date | datetime, tz) -> date:
    if isinstance(value, datetime):
        return local_date(value, tz)
    return value


def _apply_pooling(
    slots: list[Slot],
    pooling: str | None,
    bookings: Sequence[Booking],
    now: datetime,
) -> list[Slot]:
    if pooling == "round_robin":
        return sorted(slots, key=lambda s: (s.start, s.host or ""))

    if pooling == "least_loaded":
        loads: dict[str, int] = {}
        for b in bookings:
            if b.blocks_time and b.host and to_utc(b.end_time) > now:
                loads[b.host] = loads.get(b.host, 0) + 1
        return sorted(slots, key=lambda s: (s.start, loads.get(s.host or "", 0), s.host or ""))

    return sorted(slots, key=lambda s: s.start)
