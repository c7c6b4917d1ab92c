from fastapi import HTTPException, status

from studio_bookings.domain.entities.admission import ConflictReason

REASON_STATUS_CODES = {
    ConflictReason.invalid_range: status.HTTP_400_BAD_REQUEST,
    ConflictReason.outside_availability: status.HTTP_400_BAD_REQUEST,
    ConflictReason.in_the_past: status.HTTP_400_BAD_REQUEST,
    ConflictReason.too_far_in_advance: status.HTTP_400_BAD_REQUEST,
    ConflictReason.slot_unavailable: status.HTTP_409_CONFLICT,
    ConflictReason.host_daily_cap_exceeded: status.HTTP_409_CONFLICT,
}

REASON_MESSAGES = {
    ConflictReason.invalid_range: "The requested start must be before the end and within the allowed booking length.",
    ConflictReason.outside_availability: "The requested time is outside this resource's availability.",
    ConflictReason.in_the_past: "The requested time is in the past.",
    ConflictReason.too_far_in_advance: "The requested time is too far in advance.",
    ConflictReason.slot_unavailable: "Time slot is not available.",
    ConflictReason.host_daily_cap_exceeded: "The host has no more bookings available on that day.",
}


def rejection(reason: ConflictReason) -> HTTPException:
    return HTTPException(
        status_code=REASON_STATUS_CODES[reason],
        detail={"reason": reason.value, "message": REASON_MESSAGES[reason]},
    )
