from datetime import date, datetime
from typing import Any

from pydantic import BaseModel, Field

from studio_bookings.domain.entities.booking import Booking, BookingStatus
from studio_bookings.domain.entities.slot import Slot


class SlotSchema(BaseModel):
    start: datetime
    end: datetime
    date: date
    host: str | None = None

    @classmethod
    def from_entity(cls, slot: Slot) -> "SlotSchema":
        return cls(start=slot.start, end=slot.end, date=slot.date, host=slot.host)


class AvailabilityResponseSchema(BaseModel):
    resource_id: str
    timezone: str
    slot_minutes: int
    start_date: date
    end_date: date
    slots: list[SlotSchema]


class BookingCreateSchema(BaseModel):
    resource_id: str
    start_time: datetime
    end_time: datetime
    title: str | None = None
    host: str | None = None
    user_id: str | None = None
    user_name: str | None = None
    user_email: str | None = None
    notes: str | None = None
    metadata: dict[str, Any] = Field(default_factory=dict)


class BookingRescheduleSchema(BaseModel):
    start_time: datetime
    end_time: datetime
    notes: str | None = None


class BookingSchema(BaseModel):
    id: str
    resource_id: str
    start_time: datetime
    end_time: datetime
    status: BookingStatus
    host: str | None = None
    user_id: str | None = None
    user_name: str | None = None
    user_email: str | None = None
    title: str | None = None
    notes: str | None = None
    metadata: dict[str, Any] = Field(default_factory=dict)
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @classmethod
    def from_entity(cls, booking: Booking) -> "BookingSchema":
        return cls(
            id=booking.id,
            resource_id=booking.resource_id,
            start_time=booking.start_time,
            end_time=booking.end_time,
            status=booking.status,
            host=booking.host,
            user_id=booking.user_id,
            user_name=booking.user_name,
            user_email=booking.user_email,
            title=booking.title,
            notes=booking.notes,
            metadata=booking.metadata,
            created_at=booking.created_at,
            updated_at=booking.updated_at,
        )
