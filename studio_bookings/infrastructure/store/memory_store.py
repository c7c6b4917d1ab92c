from __future__ import annotations

import threading
from datetime import datetime
from typing import Iterable

from studio_bookings.application.exceptions import BookingConflictError, BookingNotFoundError
from studio_bookings.application.ports.booking_store import BookingStorePort
from studio_bookings.application.ports.resource_store import ResourceStorePort
from studio_bookings.domain.entities.booking import Booking, BookingStatus
from studio_bookings.domain.entities.resource import Resource
from studio_bookings.infrastructure.store.booking_filters import filter_bookings, first_overlap


class MemoryResourceStore(ResourceStorePort):
    def __init__(self, resources: Iterable[Resource] | None = None) -> None:
        self._resources: dict[str, Resource] = {r.id: r for r in resources or []}

    def get_resource(self, resource_id: str) -> Resource | None:
        return self._resources.get(resource_id)

    def save_resource(self, resource: Resource) -> None:
        self._resources[resource.id] = resource


class MemoryBookingStore(BookingStorePort):
    def __init__(self, bookings: Iterable[Booking] | None = None) -> None:
        self._bookings: dict[str, Booking] = {b.id: b for b in bookings or []}
        # Guards check-then-write so overlapping inserts cannot both succeed
        self._lock = threading.Lock()

    def get_booking(self, booking_id: str) -> Booking | None:
        return self._bookings.get(booking_id)

    def list_bookings(
        self,
        resource_id: str,
        statuses: Iterable[BookingStatus] | None = None,
        start: datetime | None = None,
        end: datetime | None = None,
        exclude_booking_id: str | None = None,
    ) -> list[Booking]:
        return filter_bookings(list(self._bookings.values()), resource_id, statuses, start, end, exclude_booking_id)

    def add_booking(
        self,
        booking: Booking,
        occupying: Iterable[BookingStatus],
        buffer_before_minutes: int = 0,
        buffer_after_minutes: int = 0,
    ) -> Booking:
        with self._lock:
            if booking.id in self._bookings:
                raise ValueError(f"Booking {booking.id} already exists")
            self._raise_on_overlap(booking, occupying, buffer_before_minutes, buffer_after_minutes)
            self._bookings[booking.id] = booking
        return booking

    def update_booking(
        self,
        booking: Booking,
        occupying: Iterable[BookingStatus],
        buffer_before_minutes: int = 0,
        buffer_after_minutes: int = 0,
    ) -> Booking:
        with self._lock:
            if booking.id not in self._bookings:
                raise BookingNotFoundError(booking.id)
            self._raise_on_overlap(booking, occupying, buffer_before_minutes, buffer_after_minutes)
            self._bookings[booking.id] = booking
        return booking

    def _raise_on_overlap(
        self,
        booking: Booking,
        occupying: Iterable[BookingStatus],
        buffer_before_minutes: int,
        buffer_after_minutes: int,
    ) -> None:
        clash = first_overlap(
            booking, self._bookings.values(), occupying, buffer_before_minutes, buffer_after_minutes
        )
        if clash is not None:
            raise BookingConflictError(f"Booking overlaps {clash.id} on resource {booking.resource_id}")
