from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass, field, replace
from datetime import date, datetime, timedelta, timezone
from typing import Any, Callable, Iterable

from studio_bookings.application.exceptions import (
    BookingConflictError,
    BookingNotFoundError,
    InvalidBookingStateError,
    ResourceNotFoundError,
)
from studio_bookings.application.ports.booking_store import BookingStorePort
from studio_bookings.application.ports.resource_store import ResourceStorePort
from studio_bookings.application.use_cases.check_admission import check_admission
from studio_bookings.application.use_cases.generate_slots import generate_slots, slot_length_minutes
from studio_bookings.application.utils.time_windows import day_bounds, local_date, to_utc
from studio_bookings.domain.entities.admission import AdmissionDecision, ConflictReason
from studio_bookings.domain.entities.booking import Booking, BookingStatus
from studio_bookings.domain.entities.resource import Resource
from studio_bookings.domain.entities.slot import Slot


@dataclass(frozen=True)
class BookingRequest:
    resource_id: str
    start_time: datetime
    end_time: datetime
    title: str | None = None
    host: str | None = None
    user_id: str | None = None
    user_name: str | None = None
    user_email: str | None = None
    notes: str | None = None
    metadata: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class AvailabilityResult:
    resource_id: str
    timezone: str
    slot_minutes: int
    start_date: date
    end_date: date
    slots: list[Slot]


@dataclass(frozen=True)
class BookingResult:
    decision: AdmissionDecision
    booking: Booking | None = None

    @property
    def admitted(self) -> bool:
        return self.decision.admitted


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class BookingUseCase:
    def __init__(
        self,
        resources: ResourceStorePort,
        bookings: BookingStorePort,
        occupying_statuses: Iterable[str | BookingStatus] = (BookingStatus.pending, BookingStatus.confirmed),
        initial_status: str | BookingStatus = BookingStatus.pending,
        default_query_days: int = 30,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._resources = resources
        self._bookings = bookings
        self._occupying = tuple(BookingStatus(s) for s in occupying_statuses)
        self._initial_status = BookingStatus(initial_status)
        self._default_query_days = default_query_days
        self._clock = clock
        self._logger = logging.getLogger(__name__)

        if BookingStatus.cancelled in self._occupying:
            raise ValueError("Cancelled bookings can never occupy time")

    def get_resource(self, resource_id: str) -> Resource:
        resource = self._resources.get_resource(resource_id)
        if resource is None or not resource.accepts_bookings:
            raise ResourceNotFoundError(resource_id)
        return resource

    def save_resource(self, resource: Resource) -> Resource:
        self._resources.save_resource(resource)
        self._logger.info("Resource saved", extra={"resource_id": resource.id})
        return resource

    def get_booking(self, booking_id: str) -> Booking:
        booking = self._bookings.get_booking(booking_id)
        if booking is None:
            raise BookingNotFoundError(booking_id)
        return booking

    def list_slots(
        self,
        resource_id: str,
        start_date: date | None = None,
        end_date: date | None = None,
        requested_hours: float | None = None,
    ) -> AvailabilityResult:
        resource = self.get_resource(resource_id)
        rules = resource.availability_rules
        now = self._clock()

        start_date = start_date or local_date(now, rules.tz)
        end_date = end_date or start_date + timedelta(days=self._default_query_days)
        if start_date > end_date:
            raise ValueError("start_date must not be after end_date")

        ledger = self._bookings.list_bookings(
            resource_id,
            statuses=self._occupying,
            start=day_bounds(start_date - timedelta(days=1), rules.tz)[0],
            end=day_bounds(end_date + timedelta(days=1), rules.tz)[1],
        )
        slots = generate_slots(rules, ledger, start_date, end_date, now=now, requested_hours=requested_hours)

        self._logger.info(
            "Availability computed",
            extra={"resource_id": resource_id, "slot_count": len(slots)},
        )
        return AvailabilityResult(
            resource_id=resource_id,
            timezone=rules.timezone,
            slot_minutes=slot_length_minutes(rules, requested_hours),
            start_date=start_date,
            end_date=end_date,
            slots=slots,
        )

    def check(
        self,
        resource: Resource,
        start: datetime,
        end: datetime,
        host: str | None = None,
        exclude_booking_id: str | None = None,
    ) -> AdmissionDecision:
        rules = resource.availability_rules
        day = local_date(start, rules.tz)
        # Wide enough to catch buffered neighbours and every booking on the same local day
        ledger = self._bookings.list_bookings(
            resource.id,
            statuses=self._occupying,
            start=day_bounds(day - timedelta(days=1), rules.tz)[0],
            end=day_bounds(day + timedelta(days=1), rules.tz)[1],
            exclude_booking_id=exclude_booking_id,
        )
        return check_admission(start, end, rules, ledger, host, now=self._clock())

    def request_booking(self, request: BookingRequest) -> BookingResult:
        resource = self.get_resource(request.resource_id)
        rules = resource.availability_rules
        decision = self.check(resource, request.start_time, request.end_time, request.host)
        if not decision.admitted:
            self._log_rejection(resource.id, None, decision)
            return BookingResult(decision)

        now = self._clock()
        booking = Booking(
            id=uuid.uuid4().hex,
            resource_id=resource.id,
            start_time=to_utc(request.start_time),
            end_time=to_utc(request.end_time),
            status=self._initial_status,
            host=decision.host,
            user_id=request.user_id,
            user_name=request.user_name,
            user_email=request.user_email,
            title=request.title or resource.title,
            notes=request.notes,
            metadata={**request.metadata, "resource_title": resource.title},
            created_at=now,
            updated_at=now,
        )

        try:
            self._bookings.add_booking(
                booking, self._occupying, rules.buffer_before_minutes, rules.buffer_after_minutes
            )
        except BookingConflictError as e:
            # Lost the race against a concurrent insert
            self._logger.warning(
                "Booking rejected by storage",
                extra={"resource_id": resource.id, "reason": ConflictReason.slot_unavailable.value, "error": str(e)},
            )
            return BookingResult(AdmissionDecision.reject(ConflictReason.slot_unavailable))

        self._logger.info(
            "Booking created",
            extra={"resource_id": resource.id, "booking_id": booking.id, "host": booking.host},
        )
        return BookingResult(decision, booking)

    def reschedule_booking(
        self,
        booking_id: str,
        start_time: datetime,
        end_time: datetime,
        notes: str | None = None,
    ) -> BookingResult:
        booking = self.get_booking(booking_id)
        if booking.status not in (BookingStatus.pending, BookingStatus.confirmed):
            raise InvalidBookingStateError(f"Cannot reschedule a {booking.status.value} booking")

        resource = self.get_resource(booking.resource_id)
        rules = resource.availability_rules
        decision = self.check(resource, start_time, end_time, booking.host, exclude_booking_id=booking.id)
        if not decision.admitted:
            self._log_rejection(resource.id, booking.id, decision)
            return BookingResult(decision)

        now = self._clock()
        updated = replace(
            booking,
            start_time=to_utc(start_time),
            end_time=to_utc(end_time),
            host=decision.host,
            notes=notes or booking.notes,
            updated_at=now,
            metadata={
                **booking.metadata,
                "rescheduled_at": now.isoformat(),
                "rescheduled_from": {
                    "start_time": booking.start_time.isoformat(),
                    "end_time": booking.end_time.isoformat(),
                },
            },
        )

        try:
            self._bookings.update_booking(
                updated, self._occupying, rules.buffer_before_minutes, rules.buffer_after_minutes
            )
        except BookingConflictError as e:
            self._logger.warning(
                "Reschedule rejected by storage",
                extra={"booking_id": booking.id, "reason": ConflictReason.slot_unavailable.value, "error": str(e)},
            )
            return BookingResult(AdmissionDecision.reject(ConflictReason.slot_unavailable))

        self._logger.info("Booking rescheduled", extra={"resource_id": resource.id, "booking_id": booking.id})
        return BookingResult(decision, updated)

    def cancel_booking(self, booking_id: str) -> Booking:
        booking = self.get_booking(booking_id)
        if booking.status == BookingStatus.cancelled:
            return booking
        if booking.status == BookingStatus.completed:
            raise InvalidBookingStateError("Cannot cancel a completed booking")

        updated = replace(booking, status=BookingStatus.cancelled, updated_at=self._clock())
        self._bookings.update_booking(updated, self._occupying)
        self._logger.info("Booking cancelled", extra={"booking_id": booking.id})
        return updated

    def confirm_booking(self, booking_id: str) -> Booking:
        booking = self.get_booking(booking_id)
        if booking.status == BookingStatus.confirmed:
            return booking
        if booking.status != BookingStatus.pending:
            raise InvalidBookingStateError(f"Cannot confirm a {booking.status.value} booking")

        updated = replace(booking, status=BookingStatus.confirmed, updated_at=self._clock())
        # Storage re-checks overlap when pending bookings were not treated as occupying
        self._bookings.update_booking(updated, self._occupying + (BookingStatus.confirmed,))
        self._logger.info("Booking confirmed", extra={"booking_id": booking.id})
        return updated

    def _log_rejection(self, resource_id: str, booking_id: str | None, decision: AdmissionDecision) -> None:
        self._logger.info(
            "Booking request rejected",
            extra={
                "resource_id": resource_id,
                "booking_id": booking_id,
                "reason": decision.reason.value if decision.reason else None,
            },
        )
