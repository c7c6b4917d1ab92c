from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class ConflictReason(str, Enum):
    invalid_range = "invalid_range"
    outside_availability = "outside_availability"
    too_far_in_advance = "too_far_in_advance"
    in_the_past = "in_the_past"
    slot_unavailable = "slot_unavailable"
    host_daily_cap_exceeded = "host_daily_cap_exceeded"


@dataclass(frozen=True)
class AdmissionDecision:
    admitted: bool
    reason: ConflictReason | None = None
    host: str | None = None

    @classmethod
    def admit(cls, host: str | None = None) -> "AdmissionDecision":
        return cls(True, None, host)

    @classmethod
    def reject(cls, reason: ConflictReason) -> "AdmissionDecision":
        return cls(False, reason)
