from __future__ import annotations

from datetime import date

from fastapi import APIRouter, Depends, HTTPException, Query

from studio_bookings.api.schemas import AvailabilityResponseSchema, SlotSchema
from studio_bookings.application.exceptions import ResourceNotFoundError
from studio_bookings.application.use_cases.booking import BookingUseCase
from studio_bookings.wiring.dependencies import get_booking_use_case

router = APIRouter()


@router.get("/availability", response_model=AvailabilityResponseSchema)
def get_availability(
    resource_id: str = Query(...),
    start_date: date | None = Query(None),
    end_date: date | None = Query(None),
    duration_hours: float | None = Query(None, gt=0),
    uc: BookingUseCase = Depends(get_booking_use_case),
):
    try:
        result = uc.list_slots(resource_id, start_date, end_date, requested_hours=duration_hours)
    except ResourceNotFoundError:
        raise HTTPException(status_code=404, detail="Resource not found or not bookable")
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    return AvailabilityResponseSchema(
        resource_id=result.resource_id,
        timezone=result.timezone,
        slot_minutes=result.slot_minutes,
        start_date=result.start_date,
        end_date=result.end_date,
        slots=[SlotSchema.from_entity(s) for s in result.slots],
    )
