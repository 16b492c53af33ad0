"""
Channels Router
===============

Read-only export of stored channel profiles.

Endpoints:
    GET /youtubers?category=x         - channels.xlsx download
    GET /api/v1/channels?category=x   - same export as JSON
"""

import logging
from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import Response
from pydantic import BaseModel

from crawler.coordinator import PipelineCoordinator
from crawler.errors import StoreError
from crawler.export import XLSX_MEDIA_TYPE, write_xlsx
from crawler.models import ChannelProfile

from ..services.pipeline import get_coordinator

logger = logging.getLogger(__name__)

router = APIRouter()


# ============================================================================
# PYDANTIC MODELS
# ============================================================================

class Channel(BaseModel):
    name: str = ""
    url: str
    subscribers: int = 0
    description: str = ""
    image: str = ""
    created: datetime
    term: str = ""
    category: str


class ChannelListResponse(BaseModel):
    items: List[Channel]
    total: int
    category: Optional[str] = None


def _to_channel(p: ChannelProfile) -> Channel:
    return Channel(
        name=p.name,
        url=p.url,
        subscribers=p.subscriber_count,
        description=p.description,
        image=p.image_url,
        created=p.discovered_at,
        term=p.term,
        category=p.category,
    )


def _load(coordinator: PipelineCoordinator, category: Optional[str]) -> List[ChannelProfile]:
    try:
        return coordinator.export_profiles(category or None)
    except StoreError as e:
        logger.error(f"Export failed: {e}")
        raise HTTPException(status_code=503, detail="Some error occured")


# ============================================================================
# ENDPOINTS
# ============================================================================

@router.get("/youtubers")
def download_channels(
    category: Optional[str] = Query(None, description="Only this category"),
    coordinator: PipelineCoordinator = Depends(get_coordinator),
):
    """Download stored channels as an xlsx workbook."""
    profiles = _load(coordinator, category)
    content = write_xlsx(profiles)
    return Response(
        content=content,
        media_type=XLSX_MEDIA_TYPE,
        headers={"Content-Disposition": "attachment;filename=channels.xlsx"},
    )


@router.get("/api/v1/channels", response_model=ChannelListResponse)
def list_channels(
    category: Optional[str] = Query(None, description="Only this category"),
    coordinator: PipelineCoordinator = Depends(get_coordinator),
):
    profiles = _load(coordinator, category)
    items = [_to_channel(p) for p in profiles]
    return ChannelListResponse(items=items, total=len(items), category=category or None)
