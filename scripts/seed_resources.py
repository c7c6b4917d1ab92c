#!/usr/bin/env python3
"""
Seed the JSON resource store from a resources file.

Usage:
  python3 scripts/seed_resources.py [resources.json] [data_dir]

Every record is validated before anything is written, so one malformed
window aborts the whole seed. Existing records are overwritten here;
the service itself only seeds ids its store is missing.
"""

from __future__ import annotations

import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from pydantic import ValidationError

from studio_bookings.core.config import settings
from studio_bookings.infrastructure.store.json_store import JsonResourceStore
from studio_bookings.wiring.dependencies import load_resources_file, seed_resources


def main(argv: list[str]) -> int:
    source = argv[1] if len(argv) > 1 else str(ROOT / "scripts" / "resources.example.json")
    data_dir = argv[2] if len(argv) > 2 else settings.DATA_DIR

    try:
        resources = load_resources_file(source)
    except ValidationError as e:
        print(f"❌ Invalid resources file {source}:\n{e}")
        return 1

    store = JsonResourceStore(data_dir=data_dir)
    for resource in seed_resources(store, resources, overwrite=True):
        print(f"✅ Seeded {resource.id} ({len(resource.availability_rules.windows)} windows)")
    return 0


if __name__ == "__main__":
    sys.exit(main(sys.argv))
