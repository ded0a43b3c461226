"""Entry point for the law-firm phone reception service."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from api.dependencies import get_services
from api.routes import router as health_router
from api.twilio_routes import router as twilio_router
from config.settings import get_settings


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Build the shared email/dialing/payment clients and the engine once.
    get_services()
    yield


settings = get_settings()

logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)
logging.getLogger("httpx").setLevel(logging.WARNING)

app = FastAPI(
    title="Law Firm Phone Reception",
    description="Bridges incoming phone calls to a realtime AI receptionist.",
    lifespan=lifespan,
)
app.include_router(health_router)
app.include_router(twilio_router)


def main() -> None:
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=settings.port, log_level=settings.log_level.lower())


if __name__ == "__main__":
    main()
