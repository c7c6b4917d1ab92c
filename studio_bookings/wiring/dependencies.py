from __future__ import annotations

from functools import lru_cache
import json
import logging
from pathlib import Path

from studio_bookings.core.config import settings
from studio_bookings.application.dto.availability_rules import ResourceDTO
from studio_bookings.application.ports.booking_store import BookingStorePort
from studio_bookings.application.ports.resource_store import ResourceStorePort
from studio_bookings.application.use_cases.booking import BookingUseCase
from studio_bookings.domain.entities.resource import Resource
from studio_bookings.infrastructure.store.json_store import JsonBookingStore, JsonResourceStore
from studio_bookings.infrastructure.store.memory_store import MemoryBookingStore, MemoryResourceStore

logger = logging.getLogger(__name__)


@lru_cache
def get_resource_store() -> ResourceStorePort:
    if settings.STORE_PROVIDER.lower() == "json":
        store: ResourceStorePort = JsonResourceStore(data_dir=settings.DATA_DIR)
    else:
        store = MemoryResourceStore()

    if settings.SEED_RESOURCES_FILE:
        seed_resources(store, load_resources_file(settings.SEED_RESOURCES_FILE))
    logger.info("Resource store ready", extra={"store": settings.STORE_PROVIDER})
    return store


def seed_resources(
    store: ResourceStorePort,
    resources: list[Resource],
    overwrite: bool = False,
) -> list[Resource]:
    """Save seed resources, keeping records already in the store unless ``overwrite``."""
    saved = []
    for resource in resources:
        if not overwrite and store.get_resource(resource.id) is not None:
            continue
        store.save_resource(resource)
        saved.append(resource)
    return saved


@lru_cache
def get_booking_store() -> BookingStorePort:
    if settings.STORE_PROVIDER.lower() == "json":
        return JsonBookingStore(data_dir=settings.DATA_DIR)
    return MemoryBookingStore()


def get_booking_use_case() -> BookingUseCase:
    return BookingUseCase(
        resources=get_resource_store(),
        bookings=get_booking_store(),
        occupying_statuses=settings.occupying_statuses,
        initial_status=settings.INITIAL_BOOKING_STATUS,
        default_query_days=settings.DEFAULT_QUERY_DAYS,
    )


def load_resources_file(path: str, default_timezone: str | None = None) -> list[Resource]:
    """Load resources from a JSON file holding a list of resource records.

    Records whose rules omit a timezone get ``default_timezone``
    (``settings.DEFAULT_TIMEZONE`` unless given).
    """
    with open(Path(path), "r", encoding="utf-8") as f:
        payload = json.load(f)
    records = payload.get("resources", []) if isinstance(payload, dict) else payload

    tz_name = default_timezone or settings.DEFAULT_TIMEZONE
    resources = []
    for record in records:
        rules = dict(record.get("availability_rules") or {})
        rules.setdefault("timezone", tz_name)
        resources.append(ResourceDTO.model_validate({**record, "availability_rules": rules}).to_entity())
    return resources
