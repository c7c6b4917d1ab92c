from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any


class BookingStatus(str, Enum):
    pending = "pending"
    confirmed = "confirmed"
    cancelled = "cancelled"
    completed = "completed"


@dataclass(frozen=True)
class Booking:
    id: str
    resource_id: str
    start_time: datetime
    end_time: datetime
    status: BookingStatus = BookingStatus.confirmed
    host: str | None = None  # host identity used for the per-day cap
    user_id: str | None = None
    user_name: str | None = None
    user_email: str | None = None
    title: str | None = None
    notes: str | None = None
    metadata: dict[str, Any] = field(default_factory=dict)
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @property
    def blocks_time(self) -> bool:
        return self.status != BookingStatus.cancelled
