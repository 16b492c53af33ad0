"""
Pipeline Service for API
========================

The API shares one PipelineCoordinator, built in the app lifespan and kept
on `app.state`. Routers receive it through the `get_coordinator` dependency,
so tests can swap in a coordinator wired to in-memory fakes.
"""

import logging
import os
from typing import Optional

from fastapi import HTTPException, Request

from crawler.config import CrawlerConfig
from crawler.coordinator import PipelineCoordinator, build_coordinator

logger = logging.getLogger(__name__)

# Run both consumer loops inside the API process (single-process deployment)
RUN_WORKERS = os.getenv("RUN_WORKERS", "true").lower() in ("1", "true", "yes")


def create_coordinator(config: Optional[CrawlerConfig] = None) -> PipelineCoordinator:
    """Coordinator wired to Redis and MongoDB. Connections open lazily."""
    return build_coordinator(config)


# FastAPI dependency
def get_coordinator(request: Request) -> PipelineCoordinator:
    coordinator = getattr(request.app.state, "coordinator", None)
    if coordinator is None:
        raise HTTPException(status_code=503, detail="Pipeline not initialized")
    return coordinator
