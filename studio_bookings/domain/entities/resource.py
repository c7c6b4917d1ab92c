from __future__ import annotations

from dataclasses import dataclass

from studio_bookings.domain.entities.availability_rules import AvailabilityRules


@dataclass(frozen=True)
class Resource:
    id: str
    title: str
    availability_rules: AvailabilityRules
    resource_type: str = "space"  # "space", "equipment", "person", "workshop", "event"
    organization_id: str | None = None
    is_active: bool = True
    is_bookable: bool = True

    @property
    def accepts_bookings(self) -> bool:
        return self.is_active and self.is_bookable
