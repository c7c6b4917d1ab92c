from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, status

from studio_bookings.api.errors import rejection
from studio_bookings.api.schemas import BookingCreateSchema, BookingRescheduleSchema, BookingSchema
from studio_bookings.application.exceptions import (
    BookingConflictError,
    BookingNotFoundError,
    InvalidBookingStateError,
    ResourceNotFoundError,
)
from studio_bookings.application.use_cases.booking import BookingRequest, BookingUseCase
from studio_bookings.wiring.dependencies import get_booking_use_case

router = APIRouter()
logger = logging.getLogger(__name__)


@router.post("/bookings", response_model=BookingSchema, status_code=status.HTTP_201_CREATED)
def create_booking(
    req: BookingCreateSchema,
    uc: BookingUseCase = Depends(get_booking_use_case),
):
    try:
        result = uc.request_booking(
            BookingRequest(
                resource_id=req.resource_id,
                start_time=req.start_time,
                end_time=req.end_time,
                title=req.title,
                host=req.host,
                user_id=req.user_id,
                user_name=req.user_name,
                user_email=req.user_email,
                notes=req.notes,
                metadata=req.metadata,
            )
        )
    except ResourceNotFoundError:
        raise HTTPException(status_code=404, detail="Resource not found")

    if not result.admitted:
        raise rejection(result.decision.reason)
    return BookingSchema.from_entity(result.booking)


@router.get("/bookings/{booking_id}", response_model=BookingSchema)
def get_booking(booking_id: str, uc: BookingUseCase = Depends(get_booking_use_case)):
    try:
        return BookingSchema.from_entity(uc.get_booking(booking_id))
    except BookingNotFoundError:
        raise HTTPException(status_code=404, detail="Booking not found")


@router.post("/bookings/{booking_id}/reschedule", response_model=BookingSchema)
def reschedule_booking(
    booking_id: str,
    req: BookingRescheduleSchema,
    uc: BookingUseCase = Depends(get_booking_use_case),
):
    try:
        result = uc.reschedule_booking(booking_id, req.start_time, req.end_time, notes=req.notes)
    except BookingNotFoundError:
        raise HTTPException(status_code=404, detail="Booking not found")
    except ResourceNotFoundError:
        raise HTTPException(status_code=404, detail="Resource not found")
    except InvalidBookingStateError as e:
        raise HTTPException(status_code=400, detail=str(e))

    if not result.admitted:
        raise rejection(result.decision.reason)
    return BookingSchema.from_entity(result.booking)


@router.post("/bookings/{booking_id}/cancel", response_model=BookingSchema)
def cancel_booking(booking_id: str, uc: BookingUseCase = Depends(get_booking_use_case)):
    try:
        return BookingSchema.from_entity(uc.cancel_booking(booking_id))
    except BookingNotFoundError:
        raise HTTPException(status_code=404, detail="Booking not found")
    except InvalidBookingStateError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.post("/bookings/{booking_id}/confirm", response_model=BookingSchema)
def confirm_booking(booking_id: str, uc: BookingUseCase = Depends(get_booking_use_case)):
    try:
        return BookingSchema.from_entity(uc.confirm_booking(booking_id))
    except BookingNotFoundError:
        raise HTTPException(status_code=404, detail="Booking not found")
    except InvalidBookingStateError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except BookingConflictError as e:
        logger.warning("Confirm rejected by storage", extra={"booking_id": booking_id, "error": str(e)})
        raise HTTPException(status_code=409, detail=str(e))
