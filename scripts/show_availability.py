#!/usr/bin/env python3
"""
Print the free slots of a resource straight from the configured stores (no HTTP).

Usage:
  python3 scripts/show_availability.py <resource_id> [start_date] [end_date]
"""

from __future__ import annotations

import sys
from datetime import date
from pathlib import Path
from zoneinfo import ZoneInfo

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from studio_bookings.application.exceptions import ResourceNotFoundError
from studio_bookings.wiring.dependencies import get_booking_use_case


def main(argv: list[str]) -> int:
    if len(argv) < 2:
        print(__doc__)
        return 1

    resource_id = argv[1]
    start = date.fromisoformat(argv[2]) if len(argv) > 2 else None
    end = date.fromisoformat(argv[3]) if len(argv) > 3 else None

    try:
        result = get_booking_use_case().list_slots(resource_id, start, end)
    except ResourceNotFoundError:
        print(f"❌ Resource {resource_id} not found or not bookable")
        return 1

    print(f"{result.resource_id} ({result.timezone}), {result.start_date} .. {result.end_date}")
    for slot in result.slots:
        local_start = slot.start.astimezone(ZoneInfo(result.timezone))
        host = f"  [{slot.host}]" if slot.host else ""
        print(f"  {slot.date} {local_start:%H:%M}  {slot.end - slot.start}{host}")
    print(f"{len(result.slots)} slots")
    return 0


if __name__ == "__main__":
    sys.exit(main(sys.argv))
