"""
Tests for availability rule validation at the entity and storage boundary.
"""

from __future__ import annotations

from datetime import date

import pytest
from pydantic import ValidationError

from studio_bookings.application.dto.availability_rules import AvailabilityRulesDTO, ResourceDTO
from studio_bookings.domain.entities.availability_rules import (
    AvailabilityConfigError,
    AvailabilityRules,
    AvailabilityWindow,
)


def test_window_start_must_precede_end():
    with pytest.raises(AvailabilityConfigError):
        AvailabilityWindow(days=("Mon",), start="17:00", end="09:00")
    with pytest.raises(AvailabilityConfigError):
        AvailabilityWindow(days=("Mon",), start="09:00", end="09:00")


def test_window_weekday_names_are_normalized():
    window = AvailabilityWindow(days=("Tuesday", "mon", "TUE"), start="09:00", end="10:00")

    assert window.days == (0, 1)


def test_unknown_weekday_and_bad_clock_are_rejected():
    with pytest.raises(AvailabilityConfigError):
        AvailabilityWindow(days=("Funday",), start="09:00", end="10:00")
    with pytest.raises(AvailabilityConfigError):
        AvailabilityWindow(days=("Mon",), start="9am", end="10:00")
    with pytest.raises(AvailabilityConfigError):
        AvailabilityWindow(days=("Mon",), start="09:00", end="24:30")


def test_host_window_requires_host():
    with pytest.raises(AvailabilityConfigError):
        AvailabilityWindow(days=("Mon",), start="09:00", end="10:00", by="host")


def test_unknown_timezone_is_rejected():
    with pytest.raises(AvailabilityConfigError):
        AvailabilityRules(timezone="Mars/Olympus_Mons")


def test_min_hours_cannot_exceed_max_hours():
    with pytest.raises(AvailabilityConfigError):
        AvailabilityRules(min_booking_hours=3, max_booking_hours=2)


def test_effective_duration_is_clamped():
    rules = AvailabilityRules(min_booking_hours=1, max_booking_hours=4)

    assert rules.effective_duration_hours(0.5) == 1
    assert rules.effective_duration_hours(2) == 2
    assert rules.effective_duration_hours(9) == 4


def test_dto_accepts_legacy_keys():
    dto = AvailabilityRulesDTO.model_validate(
        {
            "timezone": "America/New_York",
            "slot_minutes": 30,
            "buffer_before": 10,
            "buffer_after": 5,
            "max_per_day_per_host": 3,
            "windows": [{"by": "host", "host": "mo@oolite.org", "days": ["Monday"], "start": "10:00", "end": "12:00"}],
            "blackouts": [{"date": "2026-12-24"}, {"range": ["2026-12-28", "2027-01-02"]}],
            "pooling": "round_robin",
        }
    )

    rules = dto.to_entity()

    assert rules.buffer_before_minutes == 10
    assert rules.buffer_after_minutes == 5
    assert rules.windows[0].host == "mo@oolite.org"
    assert rules.is_blacked_out(date(2026, 12, 24))
    assert rules.is_blacked_out(date(2026, 12, 30))
    assert not rules.is_blacked_out(date(2026, 12, 26))


def test_dto_rejects_malformed_window_at_write_time():
    with pytest.raises(ValidationError):
        AvailabilityRulesDTO.model_validate(
            {"windows": [{"days": ["Mon"], "start": "16:00", "end": "12:00"}]}
        )


def test_dto_rejects_blackout_without_date_or_range():
    with pytest.raises(ValidationError):
        AvailabilityRulesDTO.model_validate({"blackouts": [{}]})


def test_resource_type_drives_weekend_policy():
    workshop = ResourceDTO.model_validate({"id": "w1", "title": "Workshop", "type": "workshop"}).to_entity()
    studio = ResourceDTO.model_validate({"id": "s1", "title": "Studio"}).to_entity()

    assert workshop.availability_rules.allows_weekends is True
    assert studio.availability_rules.allows_weekends is False


def test_resource_dto_survives_storage_format():
    source = ResourceDTO.model_validate(
        {
            "id": "print-studio",
            "title": "Print Studio",
            "availability_rules": {
                "windows": [{"days": ["Tue", "Thu"], "start": "12:00", "end": "16:00"}],
                "blackouts": [{"range": ["2026-12-28", "2027-01-02"]}],
            },
        }
    ).to_entity()

    stored = ResourceDTO.from_entity(source).to_json_dict()
    restored = ResourceDTO.model_validate(stored).to_entity()

    assert stored["availability_rules"]["windows"][0]["days"] == ["Tue", "Thu"]
    assert restored == source
