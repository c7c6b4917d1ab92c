from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException

from studio_bookings.application.dto.availability_rules import AvailabilityRulesDTO, ResourceDTO
from studio_bookings.application.exceptions import ResourceNotFoundError
from studio_bookings.application.use_cases.booking import BookingUseCase
from studio_bookings.wiring.dependencies import get_booking_use_case

router = APIRouter()


class ResourceUpsertSchema(ResourceDTO):
    id: str | None = None


@router.get("/resources/{resource_id}", response_model=ResourceDTO)
def get_resource(resource_id: str, uc: BookingUseCase = Depends(get_booking_use_case)):
    try:
        return ResourceDTO.from_entity(uc.get_resource(resource_id))
    except ResourceNotFoundError:
        raise HTTPException(status_code=404, detail="Resource not found or not bookable")


@router.put("/resources/{resource_id}", response_model=ResourceDTO)
def put_resource(
    resource_id: str,
    req: ResourceUpsertSchema,
    uc: BookingUseCase = Depends(get_booking_use_case),
):
    # Rules were validated by the schema; malformed windows never reach storage
    dto = ResourceDTO.model_validate({**req.model_dump(), "id": resource_id})
    resource = uc.save_resource(dto.to_entity())
    return ResourceDTO.from_entity(resource)


@router.get("/resources/{resource_id}/availability-rules", response_model=AvailabilityRulesDTO)
def get_availability_rules(resource_id: str, uc: BookingUseCase = Depends(get_booking_use_case)):
    try:
        return AvailabilityRulesDTO.from_entity(uc.get_resource(resource_id).availability_rules)
    except ResourceNotFoundError:
        raise HTTPException(status_code=404, detail="Resource not found or not bookable")
