"""
Guides API routes.
"""
import logging
from typing import Dict, List, Optional

from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import HTMLResponse, PlainTextResponse
from pydantic import BaseModel
from sqlalchemy.orm import Session
from starlette.concurrency import run_in_threadpool

from db import get_session
from domain.models import GuideRecord, HeadingPattern
from repositories import GuidesRepository, StoreError
from services.guide_renderer import render_guide_page
from services.guides import load_guide, save_guide

router = APIRouter()
# Mounted last by the app: GET /{guide_id} would otherwise shadow other routes.
alias_router = APIRouter()
logger = logging.getLogger(__name__)

NOT_FOUND_MESSAGE = "No guide found for this ID."

_guides_repo = GuidesRepository()


class CoordinateResponse(BaseModel):
    name: str
    lat: float
    lon: float


class GuideResponse(BaseModel):
    id: str
    content: str
    heading_pattern: HeadingPattern
    city_images: Dict[str, str]
    coordinates: List[CoordinateResponse]
    created_at: Optional[str] = None
    updated_at: Optional[str] = None


def guide_to_response(guide: GuideRecord) -> GuideResponse:
    """Convert domain GuideRecord to API response."""
    return GuideResponse(**guide.to_dict())


def get_guides_repository() -> GuidesRepository:
    """FastAPI dependency returning the guide store."""
    return _guides_repo


def _fetch_guide(session: Session, repo: GuidesRepository, guide_id: str) -> GuideRecord:
    try:
        guide = load_guide(session, repo, guide_id)
    except StoreError as exc:
        raise HTTPException(status_code=500, detail=str(exc))
    if guide is None:
        raise HTTPException(status_code=404, detail=NOT_FOUND_MESSAGE)
    return guide


@router.post("/{guide_id}", response_class=PlainTextResponse)
async def post_guide(
    guide_id: str,
    request: Request,
    pattern: Optional[HeadingPattern] = None,
    session: Session = Depends(get_session),
    repo: GuidesRepository = Depends(get_guides_repository),
):
    """Store a guide document (raw body, any content type) under guide_id."""
    body = await request.body()
    content = body.decode("utf-8", errors="replace")
    try:
        result = await run_in_threadpool(save_guide, session, repo, guide_id, content, pattern)
    except StoreError as exc:
        logger.error("Guide %s was not saved: %s", guide_id, exc)
        raise HTTPException(status_code=500, detail=str(exc))
    logger.info("Guide %s saved (%d bytes)", guide_id, len(body))
    return (
        f"Guide saved for ID {guide_id}: {result.city_count} cities, "
        f"{result.image_count} images, {result.coordinate_count} locations."
    )


@router.get("/{guide_id}", response_class=HTMLResponse)
def get_guide(
    guide_id: str,
    session: Session = Depends(get_session),
    repo: GuidesRepository = Depends(get_guides_repository),
):
    """Render the stored guide with its pictures and map."""
    guide = _fetch_guide(session, repo, guide_id)
    return HTMLResponse(render_guide_page(guide))


@router.get("/{guide_id}/data", response_model=GuideResponse)
def get_guide_data(
    guide_id: str,
    session: Session = Depends(get_session),
    repo: GuidesRepository = Depends(get_guides_repository),
):
    """Return the stored record as JSON."""
    return guide_to_response(_fetch_guide(session, repo, guide_id))


@alias_router.get("/{guide_id}", response_class=HTMLResponse)
def get_guide_alias(
    guide_id: str,
    session: Session = Depends(get_session),
    repo: GuidesRepository = Depends(get_guides_repository),
):
    """Short form of GET /guide/{guide_id}."""
    return get_guide(guide_id, session=session, repo=repo)
