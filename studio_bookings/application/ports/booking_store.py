from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Iterable

from studio_bookings.domain.entities.booking import Booking, BookingStatus


class BookingStorePort(ABC):
    @abstractmethod
    def get_booking(self, booking_id: str) -> Booking | None:
        raise NotImplementedError

    @abstractmethod
    def list_bookings(
        self,
        resource_id: str,
        statuses: Iterable[BookingStatus] | None = None,
        start: datetime | None = None,
        end: datetime | None = None,
        exclude_booking_id: str | None = None,
    ) -> list[Booking]:
        """
        List bookings of a resource, optionally filtered by status and by
        overlap with [start, end).
        """
        raise NotImplementedError

    @abstractmethod
    def add_booking(
        self,
        booking: Booking,
        occupying: Iterable[BookingStatus],
        buffer_before_minutes: int = 0,
        buffer_after_minutes: int = 0,
    ) -> Booking:
        """
        Persist a new booking. Must raise BookingConflictError if it overlaps
        an existing booking in one of the occupying statuses, each existing
        booking widened by the buffers; the check and the write are atomic.
        """
        raise NotImplementedError

    @abstractmethod
    def update_booking(
        self,
        booking: Booking,
        occupying: Iterable[BookingStatus],
        buffer_before_minutes: int = 0,
        buffer_after_minutes: int = 0,
    ) -> Booking:
        """
        Replace a stored booking. Same overlap guarantee as add_booking,
        ignoring the booking itself.
        """
        raise NotImplementedError
