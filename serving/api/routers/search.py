"""
Search Router
=============

    GET|POST /search?terms=a,b&category=x  - queue one search per term
"""

import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from fastapi.responses import PlainTextResponse
from fastapi.concurrency import run_in_threadpool

from crawler.config import DEFAULT_CATEGORY
from crawler.coordinator import PipelineCoordinator
from crawler.errors import QueueError
from crawler.models import sanitize_field

from ..services.pipeline import get_coordinator

logger = logging.getLogger(__name__)

router = APIRouter()


def split_terms(terms: str) -> List[str]:
    return [t.strip() for t in (terms or "").split(",") if t.strip()]


def _queue_terms(terms: str, category: str, coordinator: PipelineCoordinator) -> PlainTextResponse:
    term_list = split_terms(terms)
    if not term_list:
        raise HTTPException(status_code=400, detail="mismatch term params")

    category = (category or "").strip() or DEFAULT_CATEGORY
    for term in term_list:
        try:
            coordinator.enqueue_search(sanitize_field(term), category)
        except QueueError as e:
            logger.error(f"Push to queue error: {e}")
            raise HTTPException(status_code=503, detail="Push to queue error")

    return PlainTextResponse("got it")


@router.get("/search", response_class=PlainTextResponse)
def search_get(
    terms: str = Query("", description="Comma-separated search terms"),
    category: str = Query(DEFAULT_CATEGORY),
    coordinator: PipelineCoordinator = Depends(get_coordinator),
):
    """Queue one SearchTask per comma-separated term."""
    return _queue_terms(terms, category, coordinator)


@router.post("/search", response_class=PlainTextResponse)
async def search_post(
    request: Request,
    coordinator: PipelineCoordinator = Depends(get_coordinator),
):
    """Same as GET; form body fields win over query string fields."""
    form = await request.form()
    terms = form.get("terms") or request.query_params.get("terms", "")
    category = form.get("category") or request.query_params.get("category", DEFAULT_CATEGORY)
    return await run_in_threadpool(_queue_terms, terms, category, coordinator)
