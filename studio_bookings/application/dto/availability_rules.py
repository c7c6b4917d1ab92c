from __future__ import annotations

import datetime as dt
from typing import Any, Literal

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, model_validator

from studio_bookings.domain.entities.availability_rules import (
    WEEKDAY_LABELS,
    AvailabilityRules,
    AvailabilityWindow,
    Blackout,
)
from studio_bookings.domain.entities.resource import Resource


class AvailabilityWindowDTO(BaseModel):
    by: Literal["resource", "host"] = "resource"
    host: str | None = None
    days: list[str | int] = Field(min_length=1)
    start: str
    end: str

    def to_entity(self) -> AvailabilityWindow:
        return AvailabilityWindow(days=tuple(self.days), start=self.start, end=self.end, by=self.by, host=self.host)


class BlackoutDTO(BaseModel):
    date: dt.date | None = None
    range: list[dt.date] | None = Field(default=None, min_length=2, max_length=2)

    @model_validator(mode="after")
    def _one_of(self) -> "BlackoutDTO":
        if (self.date is None) == (self.range is None):
            raise ValueError("Blackout needs exactly one of 'date' or 'range'")
        if self.range and self.range[0] > self.range[1]:
            raise ValueError("Blackout range start must not be after its end")
        return self

    def to_entity(self) -> Blackout:
        if self.date is not None:
            return Blackout(start=self.date)
        return Blackout(start=self.range[0], end=self.range[1])


class AvailabilityRulesDTO(BaseModel):
    """
    Availability rules as stored on a resource record.

    Accepts the legacy short keys (``buffer_before``, ``buffer_after``) as well
    as the explicit ``*_minutes`` names. Window semantics (start before end,
    known weekdays, known timezone) are checked here so malformed rules are
    rejected when written, not when a slot query reads them.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    timezone: str = "America/New_York"
    slot_minutes: int = Field(default=30, gt=0)
    buffer_before_minutes: int = Field(
        default=0, ge=0, validation_alias=AliasChoices("buffer_before_minutes", "buffer_before")
    )
    buffer_after_minutes: int = Field(
        default=0, ge=0, validation_alias=AliasChoices("buffer_after_minutes", "buffer_after")
    )
    min_booking_hours: float | None = Field(default=None, gt=0)
    max_booking_hours: float | None = Field(default=None, gt=0)
    max_advance_days: int = Field(default=90, ge=0)
    max_per_day_per_host: int | None = Field(default=10, ge=1)
    windows: list[AvailabilityWindowDTO] = Field(default_factory=list)
    blackouts: list[BlackoutDTO] = Field(default_factory=list)
    pooling: Literal["round_robin", "least_loaded"] | None = None
    include_weekends: bool | None = None

    @model_validator(mode="after")
    def _check_entity(self) -> "AvailabilityRulesDTO":
        self.to_entity()
        return self

    def to_entity(self, resource_type: str = "space") -> AvailabilityRules:
        return AvailabilityRules(
            windows=tuple(w.to_entity() for w in self.windows),
            timezone=self.timezone,
            slot_minutes=self.slot_minutes,
            buffer_before_minutes=self.buffer_before_minutes,
            buffer_after_minutes=self.buffer_after_minutes,
            min_booking_hours=self.min_booking_hours,
            max_booking_hours=self.max_booking_hours,
            max_advance_days=self.max_advance_days,
            max_per_day_per_host=self.max_per_day_per_host,
            blackouts=tuple(b.to_entity() for b in self.blackouts),
            pooling=self.pooling,
            resource_type=resource_type,
            include_weekends=self.include_weekends,
        )

    @classmethod
    def from_entity(cls, rules: AvailabilityRules) -> "AvailabilityRulesDTO":
        return cls(
            timezone=rules.timezone,
            slot_minutes=rules.slot_minutes,
            buffer_before_minutes=rules.buffer_before_minutes,
            buffer_after_minutes=rules.buffer_after_minutes,
            min_booking_hours=rules.min_booking_hours,
            max_booking_hours=rules.max_booking_hours,
            max_advance_days=rules.max_advance_days,
            max_per_day_per_host=rules.max_per_day_per_host,
            windows=[
                AvailabilityWindowDTO(
                    by=w.by,
                    host=w.host,
                    days=[WEEKDAY_LABELS[d] for d in w.days],
                    start=w.start,
                    end=w.end,
                )
                for w in rules.windows
            ],
            blackouts=[
                BlackoutDTO(date=b.start) if b.end is None else BlackoutDTO(range=[b.start, b.end])
                for b in rules.blackouts
            ],
            pooling=rules.pooling,
            include_weekends=rules.include_weekends,
        )


class ResourceDTO(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: str
    title: str
    resource_type: str = Field(default="space", validation_alias=AliasChoices("resource_type", "type"))
    organization_id: str | None = None
    is_active: bool = True
    is_bookable: bool = True
    availability_rules: AvailabilityRulesDTO = Field(default_factory=AvailabilityRulesDTO)

    def to_entity(self) -> Resource:
        return Resource(
            id=self.id,
            title=self.title,
            availability_rules=self.availability_rules.to_entity(self.resource_type),
            resource_type=self.resource_type,
            organization_id=self.organization_id,
            is_active=self.is_active,
            is_bookable=self.is_bookable,
        )

    @classmethod
    def from_entity(cls, resource: Resource) -> "ResourceDTO":
        return cls(
            id=resource.id,
            title=resource.title,
            resource_type=resource.resource_type,
            organization_id=resource.organization_id,
            is_active=resource.is_active,
            is_bookable=resource.is_bookable,
            availability_rules=AvailabilityRulesDTO.from_entity(resource.availability_rules),
        )

    def to_json_dict(self) -> dict[str, Any]:
        return self.model_dump(mode="json")
