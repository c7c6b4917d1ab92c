from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from typing import Sequence

from studio_bookings.application.use_cases.generate_slots import host_at_cap
from studio_bookings.application.utils.time_windows import (
    busy_intervals,
    conflicts_with_any,
    host_day_counts,
    local_date,
    to_utc,
)
from studio_bookings.domain.entities.admission import AdmissionDecision, ConflictReason
from studio_bookings.domain.entities.availability_rules import AvailabilityRules, AvailabilityWindow
from studio_bookings.domain.entities.booking import Booking

logger = logging.getLogger(__name__)

# Tolerance when comparing a requested duration against min/max booking hours.
_DURATION_EPSILON_HOURS = 1 / 3600


def check_admission(
    proposed_start: datetime,
    proposed_end: datetime,
    rules: AvailabilityRules,
    existing_bookings: Sequence[Booking],
    host_identity: str | None = None,
    *,
    now: datetime | None = None,
) -> AdmissionDecision:
    """Admit or reject a proposed booking interval.

    Checks run in a fixed order and the first failure wins: range sanity,
    availability windows, advance/retroactive bounds, overlap (buffers
    applied), then the per-host daily cap. An admitted decision names the
    host the booking should be attributed to, if any.
    """
    now = to_utc(now) if now else datetime.now(timezone.utc)
    start = to_utc(proposed_start)
    end = to_utc(proposed_end)

    if start >= end or not _duration_allowed(rules, end - start):
        return _reject(ConflictReason.invalid_range, host_identity)

    windows = containing_windows(start, end, rules, host_identity)
    if not windows:
        return _reject(ConflictReason.outside_availability, host_identity)

    if start > now + timedelta(days=rules.max_advance_days):
        return _reject(ConflictReason.too_far_in_advance, host_identity)
    if start < now:
        return _reject(ConflictReason.in_the_past, host_identity)

    busy = busy_intervals(existing_bookings, rules.buffer_before_minutes, rules.buffer_after_minutes)
    if conflicts_with_any(start, end, busy):
        return _reject(ConflictReason.slot_unavailable, host_identity)

    day = local_date(start, rules.tz)
    counts = host_day_counts(existing_bookings, rules.tz)
    for window in windows:
        if not host_at_cap(rules, window, day, counts):
            return AdmissionDecision.admit(window.host or host_identity)

    return _reject(ConflictReason.host_daily_cap_exceeded, host_identity)


def containing_windows(
    start: datetime,
    end: datetime,
    rules: AvailabilityRules,
    host_identity: str | None = None,
) -> list[AvailabilityWindow]:
    """Windows that fully contain [start, end) on a single local day."""
    tz = rules.tz
    local_start = start.astimezone(tz)
    local_end = end.astimezone(tz)
    day = local_start.date()

    if day.weekday() >= 5 and not rules.allows_weekends:
        return []
    if rules.is_blacked_out(day):
        return []

    start_seconds = _seconds_of_day(local_start)
    if local_end.date() == day:
        end_seconds = _seconds_of_day(local_end)
    elif local_end.date() == day + timedelta(days=1) and _seconds_of_day(local_end) == 0:
        end_seconds = 24 * 3600
    else:
        return []

    matches = []
    for window in rules.windows_for_weekday(day.weekday()):
        if host_identity and window.is_host_scoped and window.host != host_identity:
            continue
        if window.start_minute * 60 <= start_seconds and end_seconds <= window.end_minute * 60:
            matches.append(window)
    return matches


def _seconds_of_day(local: datetime) -> float:
    return local.hour * 3600 + local.minute * 60 + local.second + local.microsecond / 1_000_000


def _duration_allowed(rules: AvailabilityRules, duration: timedelta) -> bool:
    hours = duration.total_seconds() / 3600
    if rules.min_booking_hours is not None and hours < rules.min_booking_hours - _DURATION_EPSILON_HOURS:
        return False
    if rules.max_booking_hours is not None and hours > rules.max_booking_hours + _DURATION_EPSILON_HOURS:
        return False
    return True


def _reject(reason: ConflictReason, host: str | None) -> AdmissionDecision:
    logger.debug("Admission rejected", extra={"reason": reason.value, "host": host})
    return AdmissionDecision.reject(reason)
