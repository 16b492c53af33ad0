"""
Channel Crawler API
===================

FastAPI control surface for the crawler.

Endpoints Overview:
- /search            - Queue search terms (GET or POST)
- /status            - Pending search count
- /youtubers         - Stored channels as channels.xlsx
- /api/v1/channels   - Stored channels as JSON
- /healthz           - Liveness + Redis/MongoDB reachability

Usage:
------
    # Start server (also runs both workers unless RUN_WORKERS=false)
    uvicorn serving.api.main:app --host 0.0.0.0 --port 3000

    # Or with Python
    python -m serving.api.main
"""

import logging
import os
from contextlib import asynccontextmanager
from datetime import datetime, timezone

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from crawler.config import PORT, setup_logging

from .routers import channels, search, status
from .services.pipeline import RUN_WORKERS, create_coordinator

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler."""
    # Startup
    setup_logging()
    coordinator = create_coordinator()
    app.state.coordinator = coordinator
    if RUN_WORKERS:
        # Index creation failure aborts startup
        coordinator.start()
    logger.info("Channel Crawler API starting up...")
    yield
    # Shutdown
    logger.info("Channel Crawler API shutting down...")
    if coordinator.is_running():
        coordinator.stop()
    coordinator.close()


app = FastAPI(
    title="Channel Crawler API",
    description="Queue channel searches and export discovered channels.",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_tags=[
        {"name": "search", "description": "Queue search terms"},
        {"name": "status", "description": "Queue status"},
        {"name": "channels", "description": "Stored channel export"},
    ],
    lifespan=lifespan,
)

ALLOWED_ORIGINS = os.getenv("CORS_ALLOWED_ORIGINS", "").split(",") if os.getenv("CORS_ALLOWED_ORIGINS") else ["*"]

app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOWED_ORIGINS,
    allow_methods=["GET", "POST"],
    allow_headers=["*"],
)


# ============================================================================
# HEALTH CHECKS
# ============================================================================

@app.get("/healthz", tags=["health"])
def health(request: Request):
    """Liveness plus backend reachability."""
    coordinator = getattr(request.app.state, "coordinator", None)
    services = {"redis": False, "mongodb": False}
    if coordinator is not None:
        ping_queue = getattr(coordinator.queue, "ping", None)
        ping_store = getattr(coordinator.store, "ping", None)
        services["redis"] = bool(ping_queue()) if ping_queue else True
        services["mongodb"] = bool(ping_store()) if ping_store else True
    return {
        "ok": True,
        "version": "1.0.0",
        "services": services,
        "workers_running": bool(coordinator and coordinator.is_running()),
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }


# ============================================================================
# ROUTERS
# ============================================================================

app.include_router(search.router, tags=["search"])
app.include_router(status.router, tags=["status"])
app.include_router(channels.router, tags=["channels"])


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("serving.api.main:app", host="0.0.0.0", port=PORT)
