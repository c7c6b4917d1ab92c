import logging

from fastapi import FastAPI

from studio_bookings.api.availability import router as availability_router
from studio_bookings.api.bookings import router as bookings_router
from studio_bookings.api.resources import router as resources_router
from studio_bookings.core.config import settings


class ContextFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        extras = []
        for key in ("resource_id", "booking_id", "host", "reason", "slot_count", "store", "error"):
            value = getattr(record, key, None)
            if value not in (None, ""):
                extras.append(f"{key}={value}")
        base = super().format(record)
        if extras:
            return f"{base} | " + " ".join(extras)
        return base


handler = logging.StreamHandler()
handler.setFormatter(ContextFormatter("%(levelname)s:%(name)s:%(message)s"))

root = logging.getLogger()
root.setLevel(getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO))
root.handlers.clear()
root.addHandler(handler)

app = FastAPI(title="Studio Bookings Availability", version="1.0.0")

app.include_router(availability_router, tags=["availability"])
app.include_router(bookings_router, tags=["bookings"])
app.include_router(resources_router, tags=["resources"])


@app.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}
