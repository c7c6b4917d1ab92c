"""
Tests for durable resource and booking persistence.
"""

from __future__ import annotations

import json
import tempfile
from dataclasses import replace
from datetime import date, datetime, timezone
from pathlib import Path

import pytest

from studio_bookings.application.exceptions import BookingConflictError, BookingNotFoundError
from studio_bookings.domain.entities.availability_rules import AvailabilityRules, AvailabilityWindow, Blackout
from studio_bookings.domain.entities.booking import Booking, BookingStatus
from studio_bookings.domain.entities.resource import Resource
from studio_bookings.infrastructure.store.json_store import JsonBookingStore, JsonResourceStore
from studio_bookings.infrastructure.store.memory_store import MemoryBookingStore
from studio_bookings.wiring.dependencies import load_resources_file

OCCUPYING = (BookingStatus.pending, BookingStatus.confirmed)


def utc(hour: int, minute: int = 0) -> datetime:
    return datetime(2026, 6, 2, hour, minute, tzinfo=timezone.utc)


def make_booking(booking_id: str, start: datetime, end: datetime, **kwargs) -> Booking:
    kwargs.setdefault("status", BookingStatus.pending)
    return Booking(id=booking_id, resource_id="print-studio", start_time=start, end_time=end, **kwargs)


def test_json_resource_store_persistence():
    """Test that rules written by one store instance are read back by another."""
    with tempfile.TemporaryDirectory() as tmpdir:
        resource = Resource(
            id="print-studio",
            title="Print Studio",
            availability_rules=AvailabilityRules(
                windows=(AvailabilityWindow(days=("Tue", "Thu"), start="12:00", end="16:00"),),
                buffer_after_minutes=15,
                blackouts=(Blackout(start=date(2026, 12, 24)),),
            ),
        )

        JsonResourceStore(data_dir=tmpdir).save_resource(resource)
        restored = JsonResourceStore(data_dir=tmpdir).get_resource("print-studio")

        assert restored == resource
        assert JsonResourceStore(data_dir=tmpdir).get_resource("missing") is None


def test_corrupt_resource_file_is_treated_as_missing():
    """Test that a malformed record on disk never reaches the engine."""
    with tempfile.TemporaryDirectory() as tmpdir:
        store = JsonResourceStore(data_dir=tmpdir)
        bad_rules = {
            "id": "broken",
            "title": "Broken",
            "availability_rules": {"windows": [{"days": ["Mon"], "start": "18:00", "end": "09:00"}]},
        }
        (Path(tmpdir) / "resources" / "broken.json").write_text(json.dumps(bad_rules), encoding="utf-8")
        (Path(tmpdir) / "resources" / "garbled.json").write_text("{not json", encoding="utf-8")

        assert store.get_resource("broken") is None
        assert store.get_resource("garbled") is None


def test_json_booking_store_persistence():
    """Test that bookings survive a store restart with their timestamps intact."""
    with tempfile.TemporaryDirectory() as tmpdir:
        booking = make_booking(
            "b1",
            utc(16),
            utc(16, 30),
            host="mo",
            user_email="artist@example.org",
            metadata={"resource_title": "Print Studio"},
            created_at=utc(9),
        )
        JsonBookingStore(data_dir=tmpdir).add_booking(booking, OCCUPYING)

        store = JsonBookingStore(data_dir=tmpdir)

        assert store.get_booking("b1") == booking
        assert store.list_bookings("print-studio") == [booking]
        assert store.list_bookings("other-resource") == []


def test_json_booking_store_refuses_overlap():
    """Test that the storage re-check closes the check-then-insert race."""
    with tempfile.TemporaryDirectory() as tmpdir:
        store = JsonBookingStore(data_dir=tmpdir)
        store.add_booking(make_booking("b1", utc(16), utc(17)), OCCUPYING)

        with pytest.raises(BookingConflictError):
            store.add_booking(make_booking("b2", utc(16, 30), utc(17, 30)), OCCUPYING)

        # Touching endpoints are not an overlap
        store.add_booking(make_booking("b3", utc(17), utc(18)), OCCUPYING)
        assert [b.id for b in store.list_bookings("print-studio")] == ["b1", "b3"]


def test_cancelled_booking_frees_time_in_storage():
    with tempfile.TemporaryDirectory() as tmpdir:
        store = JsonBookingStore(data_dir=tmpdir)
        first = store.add_booking(make_booking("b1", utc(16), utc(17)), OCCUPYING)

        store.update_booking(replace(first, status=BookingStatus.cancelled), OCCUPYING)
        store.add_booking(make_booking("b2", utc(16), utc(17)), OCCUPYING)

        occupying = store.list_bookings("print-studio", statuses=OCCUPYING)
        assert [b.id for b in occupying] == ["b2"]


def test_list_bookings_filters_by_window_and_exclusion():
    with tempfile.TemporaryDirectory() as tmpdir:
        store = JsonBookingStore(data_dir=tmpdir)
        store.add_booking(make_booking("early", utc(9), utc(10)), OCCUPYING)
        store.add_booking(make_booking("late", utc(18), utc(19)), OCCUPYING)

        assert [b.id for b in store.list_bookings("print-studio", start=utc(10), end=utc(18))] == []
        assert [b.id for b in store.list_bookings("print-studio", start=utc(9, 30))] == ["early", "late"]
        assert [b.id for b in store.list_bookings("print-studio", exclude_booking_id="early")] == ["late"]


def test_update_unknown_booking_raises():
    with tempfile.TemporaryDirectory() as tmpdir:
        store = JsonBookingStore(data_dir=tmpdir)

        with pytest.raises(BookingNotFoundError):
            store.update_booking(make_booking("ghost", utc(9), utc(10)), OCCUPYING)


def test_resources_file_applies_default_timezone():
    with tempfile.TemporaryDirectory() as tmpdir:
        path = Path(tmpdir) / "resources.json"
        path.write_text(
            json.dumps(
                {
                    "resources": [
                        {"id": "a", "title": "A", "availability_rules": {"timezone": "Asia/Tokyo"}},
                        {"id": "b", "title": "B"},
                    ]
                }
            ),
            encoding="utf-8",
        )

        resources = load_resources_file(str(path), default_timezone="Europe/Lisbon")

        assert [r.availability_rules.timezone for r in resources] == ["Asia/Tokyo", "Europe/Lisbon"]


def test_memory_booking_store_refuses_overlap():
    store = MemoryBookingStore()
    store.add_booking(make_booking("b1", utc(16), utc(17)), OCCUPYING)

    with pytest.raises(BookingConflictError):
        store.add_booking(make_booking("b2", utc(16, 30), utc(17, 30)), OCCUPYING)

    store.add_booking(make_booking("b3", utc(17), utc(18)), OCCUPYING)
    assert [b.id for b in store.list_bookings("print-studio")] == ["b1", "b3"]


def test_storage_overlap_check_widens_existing_bookings_by_buffers():
    with tempfile.TemporaryDirectory() as tmpdir:
        for store in (MemoryBookingStore(), JsonBookingStore(data_dir=tmpdir)):
            store.add_booking(make_booking("b1", utc(16), utc(17)), OCCUPYING)

            with pytest.raises(BookingConflictError):
                store.add_booking(make_booking("b2", utc(17), utc(17, 30)), OCCUPYING, 0, 15)
            with pytest.raises(BookingConflictError):
                store.add_booking(make_booking("b3", utc(15, 30), utc(16)), OCCUPYING, 10, 0)

            store.add_booking(make_booking("b4", utc(17, 15), utc(18)), OCCUPYING, 0, 15)
            assert [b.id for b in store.list_bookings("print-studio")] == ["b1", "b4"]
