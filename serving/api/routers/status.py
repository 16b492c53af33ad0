"""
Status Router
=============

    GET /status  - "Done" when the search queue is empty, else "Pending <n>"
"""

import logging

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import PlainTextResponse

from crawler.coordinator import PipelineCoordinator
from crawler.errors import QueueError

from ..services.pipeline import get_coordinator

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/status", response_class=PlainTextResponse)
def status(coordinator: PipelineCoordinator = Depends(get_coordinator)):
    try:
        pending = coordinator.pending_search_count()
    except QueueError as e:
        logger.error(f"Error getting search length: {e}")
        raise HTTPException(status_code=503, detail="Error getting search length")

    if pending == 0:
        return PlainTextResponse("Done")
    return PlainTextResponse(f"Pending {pending}")
