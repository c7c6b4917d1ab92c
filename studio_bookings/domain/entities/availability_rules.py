from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

WEEKDAY_NAMES = {
    "mon": 0,
    "monday": 0,
    "tue": 1,
    "tues": 1,
    "tuesday": 1,
    "wed": 2,
    "wednesday": 2,
    "thu": 3,
    "thur": 3,
    "thurs": 3,
    "thursday": 3,
    "fri": 4,
    "friday": 4,
    "sat": 5,
    "saturday": 5,
    "sun": 6,
    "sunday": 6,
}

WEEKDAY_LABELS = ("Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun")

EVENT_RESOURCE_TYPES = frozenset({"event", "workshop"})
POOLING_STRATEGIES = frozenset({"round_robin", "least_loaded"})


class AvailabilityConfigError(ValueError):
    """Raised when availability rules are malformed (a data bug, not a runtime condition)."""
    pass


def parse_weekday(value: str | int) -> int:
    if isinstance(value, int):
        if 0 <= value <= 6:
            return value
        raise AvailabilityConfigError(f"Weekday index out of range: {value}")
    weekday = WEEKDAY_NAMES.get(str(value).strip().lower())
    if weekday is None:
        raise AvailabilityConfigError(f"Unknown weekday: {value!r}")
    return weekday


def parse_clock(value: str) -> int:
    """Parse 'HH:MM' into minutes since midnight. '24:00' is accepted as end of day."""
    try:
        hours_str, minutes_str = value.strip().split(":")
        hours, minutes = int(hours_str), int(minutes_str)
    except (AttributeError, ValueError):
        raise AvailabilityConfigError(f"Invalid time of day: {value!r}, expected HH:MM") from None

    if not (0 <= minutes <= 59) or not (0 <= hours <= 24) or (hours == 24 and minutes != 0):
        raise AvailabilityConfigError(f"Invalid time of day: {value!r}")
    return hours * 60 + minutes


@dataclass(frozen=True)
class AvailabilityWindow:
    days: tuple[int, ...]
    start: str
    end: str
    by: str = "resource"  # "resource" | "host"
    host: str | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "days", tuple(sorted({parse_weekday(d) for d in self.days})))
        if self.by not in ("resource", "host"):
            raise AvailabilityConfigError(f"Window 'by' must be 'resource' or 'host', got {self.by!r}")
        if self.by == "host" and not self.host:
            raise AvailabilityConfigError("Host-scoped window requires a host")
        if self.start_minute >= self.end_minute:
            raise AvailabilityConfigError(f"Window start {self.start} must be before end {self.end}")

    @property
    def start_minute(self) -> int:
        return parse_clock(self.start)

    @property
    def end_minute(self) -> int:
        return parse_clock(self.end)

    @property
    def is_host_scoped(self) -> bool:
        return self.by == "host"


@dataclass(frozen=True)
class Blackout:
    start: date
    end: date | None = None  # inclusive; None means single day

    def covers(self, day: date) -> bool:
        return self.start <= day <= (self.end or self.start)


@dataclass(frozen=True)
class AvailabilityRules:
    windows: tuple[AvailabilityWindow, ...] = ()
    timezone: str = "America/New_York"
    slot_minutes: int = 30
    buffer_before_minutes: int = 0
    buffer_after_minutes: int = 0
    min_booking_hours: float | None = None
    max_booking_hours: float | None = None
    max_advance_days: int = 90
    max_per_day_per_host: int | None = 10
    blackouts: tuple[Blackout, ...] = ()
    pooling: str | None = None  # None keeps input order for shared starts
    resource_type: str = "space"
    include_weekends: bool | None = None
    tz: ZoneInfo = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "windows", tuple(self.windows))
        object.__setattr__(self, "blackouts", tuple(self.blackouts))
        try:
            object.__setattr__(self, "tz", ZoneInfo(self.timezone))
        except (ZoneInfoNotFoundError, ValueError):
            raise AvailabilityConfigError(f"Unknown timezone: {self.timezone!r}") from None

        if self.slot_minutes <= 0:
            raise AvailabilityConfigError("slot_minutes must be positive")
        if self.buffer_before_minutes < 0 or self.buffer_after_minutes < 0:
            raise AvailabilityConfigError("Buffers cannot be negative")
        if self.max_advance_days < 0:
            raise AvailabilityConfigError("max_advance_days cannot be negative")
        if self.max_per_day_per_host is not None and self.max_per_day_per_host < 1:
            raise AvailabilityConfigError("max_per_day_per_host must be at least 1")
        if self.min_booking_hours is not None and self.min_booking_hours <= 0:
            raise AvailabilityConfigError("min_booking_hours must be positive")
        if self.max_booking_hours is not None and self.max_booking_hours <= 0:
            raise AvailabilityConfigError("max_booking_hours must be positive")
        if (
            self.min_booking_hours is not None
            and self.max_booking_hours is not None
            and self.min_booking_hours > self.max_booking_hours
        ):
            raise AvailabilityConfigError("min_booking_hours cannot exceed max_booking_hours")
        if self.pooling is not None and self.pooling not in POOLING_STRATEGIES:
            raise AvailabilityConfigError(f"Unknown pooling strategy: {self.pooling!r}")

    @property
    def allows_weekends(self) -> bool:
        if self.include_weekends is not None:
            return self.include_weekends
        return self.resource_type in EVENT_RESOURCE_TYPES

    @property
    def uses_hour_granularity(self) -> bool:
        return self.min_booking_hours is not None or self.max_booking_hours is not None

    def effective_duration_hours(self, requested_hours: float) -> float:
        """Clamp a requested duration into [min_booking_hours, max_booking_hours]."""
        hours = requested_hours
        if self.max_booking_hours is not None:
            hours = min(hours, self.max_booking_hours)
        if self.min_booking_hours is not None:
            hours = max(self.min_booking_hours, hours)
        return hours

    def is_blacked_out(self, day: date) -> bool:
        return any(b.covers(day) for b in self.blackouts)

    def windows_for_weekday(self, weekday: int) -> list[AvailabilityWindow]:
        return [w for w in self.windows if weekday in w.days]
