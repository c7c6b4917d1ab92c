from __future__ import annotations

from datetime import datetime, timedelta
from typing import Iterable

from studio_bookings.application.utils.time_windows import overlaps, to_utc
from studio_bookings.domain.entities.booking import Booking, BookingStatus


def filter_bookings(
    bookings: Iterable[Booking],
    resource_id: str,
    statuses: Iterable[BookingStatus] | None = None,
    start: datetime | None = None,
    end: datetime | None = None,
    exclude_booking_id: str | None = None,
) -> list[Booking]:
    wanted = {BookingStatus(s) for s in statuses} if statuses is not None else None
    result = []
    for b in bookings:
        if b.resource_id != resource_id or b.id == exclude_booking_id:
            continue
        if wanted is not None and b.status not in wanted:
            continue
        if start is not None and to_utc(b.end_time) <= to_utc(start):
            continue
        if end is not None and to_utc(b.start_time) >= to_utc(end):
            continue
        result.append(b)
    return sorted(result, key=lambda b: to_utc(b.start_time))


def first_overlap(
    candidate: Booking,
    bookings: Iterable[Booking],
    occupying: Iterable[BookingStatus],
    buffer_before_minutes: int = 0,
    buffer_after_minutes: int = 0,
) -> Booking | None:
    """Overlap check used as the storage-level exclusion constraint.

    Existing bookings are widened by the buffers, matching what admission treats as busy.
    """
    occupying = {BookingStatus(s) for s in occupying}
    if candidate.status not in occupying:
        return None
    before = timedelta(minutes=buffer_before_minutes)
    after = timedelta(minutes=buffer_after_minutes)
    for other in filter_bookings(bookings, candidate.resource_id, occupying, exclude_booking_id=candidate.id):
        if overlaps(
            to_utc(candidate.start_time),
            to_utc(candidate.end_time),
            to_utc(other.start_time) - before,
            to_utc(other.end_time) + after,
        ):
            return other
    return None
