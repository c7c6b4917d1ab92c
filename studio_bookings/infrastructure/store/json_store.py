from __future__ import annotations

import json
import logging
import threading
from datetime import datetime
from pathlib import Path
from typing import Any, Iterable

from pydantic import ValidationError

from studio_bookings.application.dto.availability_rules import ResourceDTO
from studio_bookings.application.exceptions import BookingConflictError, BookingNotFoundError
from studio_bookings.application.ports.booking_store import BookingStorePort
from studio_bookings.application.ports.resource_store import ResourceStorePort
from studio_bookings.domain.entities.booking import Booking, BookingStatus
from studio_bookings.domain.entities.resource import Resource
from studio_bookings.infrastructure.store.booking_filters import filter_bookings, first_overlap

logger = logging.getLogger(__name__)


def _write_json_atomic(file_path: Path, data: Any) -> None:
    """Write JSON to a temp file, then atomically rename it over the target."""
    temp_path = file_path.with_suffix(".json.tmp")
    try:
        with open(temp_path, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2, ensure_ascii=False)
        temp_path.replace(file_path)
    except Exception:
        if temp_path.exists():
            temp_path.unlink(missing_ok=True)
        raise


class JsonResourceStore(ResourceStorePort):
    def __init__(self, data_dir: str = "./data") -> None:
        self._dir = Path(data_dir) / "resources"
        self._dir.mkdir(parents=True, exist_ok=True)
        self._lock = threading.Lock()

    def _get_file_path(self, resource_id: str) -> Path:
        return self._dir / f"{resource_id}.json"

    def get_resource(self, resource_id: str) -> Resource | None:
        file_path = self._get_file_path(resource_id)
        if not file_path.exists():
            return None
        try:
            with open(file_path, "r", encoding="utf-8") as f:
                data = json.load(f)
            return ResourceDTO.model_validate(data).to_entity()
        except (json.JSONDecodeError, OSError, ValidationError) as e:
            # Corrupt or malformed records are treated as missing
            logger.error("Failed to load resource", extra={"resource_id": resource_id, "error": str(e)})
            return None

    def save_resource(self, resource: Resource) -> None:
        with self._lock:
            _write_json_atomic(self._get_file_path(resource.id), ResourceDTO.from_entity(resource).to_json_dict())


class JsonBookingStore(BookingStorePort):
    """One JSON ledger file per resource, guarded by a per-resource lock."""

    def __init__(self, data_dir: str = "./data") -> None:
        self._dir = Path(data_dir) / "bookings"
        self._dir.mkdir(parents=True, exist_ok=True)
        self._locks: dict[str, threading.Lock] = {}
        self._lock_lock = threading.Lock()  # Lock for managing locks dict

    def _get_lock(self, resource_id: str) -> threading.Lock:
        with self._lock_lock:
            if resource_id not in self._locks:
                self._locks[resource_id] = threading.Lock()
            return self._locks[resource_id]

    def _get_file_path(self, resource_id: str) -> Path:
        return self._dir / f"{resource_id}.json"

    def _load_ledger(self, resource_id: str) -> list[Booking]:
        file_path = self._get_file_path(resource_id)
        if not file_path.exists():
            return []
        with open(file_path, "r", encoding="utf-8") as f:
            data = json.load(f)
        return [self._deserialize_booking(item) for item in data.get("bookings", [])]

    def _save_ledger(self, resource_id: str, bookings: list[Booking]) -> None:
        data = {
            "resource_id": resource_id,
            "bookings": [self._serialize_booking(b) for b in bookings],
            "version": 1,
        }
        _write_json_atomic(self._get_file_path(resource_id), data)

    def get_booking(self, booking_id: str) -> Booking | None:
        for file_path in sorted(self._dir.glob("*.json")):
            for booking in self._load_ledger(file_path.stem):
                if booking.id == booking_id:
                    return booking
        return None

    def list_bookings(
        self,
        resource_id: str,
        statuses: Iterable[BookingStatus] | None = None,
        start: datetime | None = None,
        end: datetime | None = None,
        exclude_booking_id: str | None = None,
    ) -> list[Booking]:
        with self._get_lock(resource_id):
            bookings = self._load_ledger(resource_id)
        return filter_bookings(bookings, resource_id, statuses, start, end, exclude_booking_id)

    def add_booking(
        self,
        booking: Booking,
        occupying: Iterable[BookingStatus],
        buffer_before_minutes: int = 0,
        buffer_after_minutes: int = 0,
    ) -> Booking:
        with self._get_lock(booking.resource_id):
            bookings = self._load_ledger(booking.resource_id)
            if any(b.id == booking.id for b in bookings):
                raise ValueError(f"Booking {booking.id} already exists")
            self._raise_on_overlap(booking, bookings, occupying, buffer_before_minutes, buffer_after_minutes)
            bookings.append(booking)
            self._save_ledger(booking.resource_id, bookings)
        return booking

    def update_booking(
        self,
        booking: Booking,
        occupying: Iterable[BookingStatus],
        buffer_before_minutes: int = 0,
        buffer_after_minutes: int = 0,
    ) -> Booking:
        with self._get_lock(booking.resource_id):
            bookings = self._load_ledger(booking.resource_id)
            index = next((i for i, b in enumerate(bookings) if b.id == booking.id), None)
            if index is None:
                raise BookingNotFoundError(booking.id)
            self._raise_on_overlap(booking, bookings, occupying, buffer_before_minutes, buffer_after_minutes)
            bookings[index] = booking
            self._save_ledger(booking.resource_id, bookings)
        return booking

    def _raise_on_overlap(
        self,
        booking: Booking,
        bookings: list[Booking],
        occupying: Iterable[BookingStatus],
        buffer_before_minutes: int,
        buffer_after_minutes: int,
    ) -> None:
        clash = first_overlap(booking, bookings, occupying, buffer_before_minutes, buffer_after_minutes)
        if clash is not None:
            raise BookingConflictError(f"Booking overlaps {clash.id} on resource {booking.resource_id}")

    def _serialize_booking(self, booking: Booking) -> dict[str, Any]:
        """Serialize Booking to dict with ISO string conversion."""
        return {
            "id": booking.id,
            "resource_id": booking.resource_id,
            "start_time": booking.start_time.isoformat(),
            "end_time": booking.end_time.isoformat(),
            "status": booking.status.value,
            "host": booking.host,
            "user_id": booking.user_id,
            "user_name": booking.user_name,
            "user_email": booking.user_email,
            "title": booking.title,
            "notes": booking.notes,
            "metadata": booking.metadata,
            "created_at": booking.created_at.isoformat() if booking.created_at else None,
            "updated_at": booking.updated_at.isoformat() if booking.updated_at else None,
        }

    def _deserialize_booking(self, data: dict[str, Any]) -> Booking:
        created_at = data.get("created_at")
        updated_at = data.get("updated_at")
        return Booking(
            id=data["id"],
            resource_id=data["resource_id"],
            start_time=datetime.fromisoformat(data["start_time"]),
            end_time=datetime.fromisoformat(data["end_time"]),
            status=BookingStatus(data.get("status", BookingStatus.confirmed.value)),
            host=data.get("host"),
            user_id=data.get("user_id"),
            user_name=data.get("user_name"),
            user_email=data.get("user_email"),
            title=data.get("title"),
            notes=data.get("notes"),
            metadata=data.get("metadata") or {},
            created_at=datetime.fromisoformat(created_at) if created_at else None,
            updated_at=datetime.fromisoformat(updated_at) if updated_at else None,
        )
