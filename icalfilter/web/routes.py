"""HTTP endpoints: filtered feed as JSON or iCalendar, plus a liveness probe."""

import asyncio
from typing import Optional

from fastapi import APIRouter, Query, Request, Response
from pydantic import BaseModel

from .. import __version__
from ..filter_expression import FilterExpression
from ..pipeline import FeedPipeline, OutputFormat


router = APIRouter()


class HealthResponse(BaseModel):
    """Liveness probe response."""
    status: str
    service: str
    version: str


async def _render_feed(
    request: Request,
    url: str,
    raw_filter: Optional[str],
    output: OutputFormat
) -> Response:
    # Parsed here, on the event loop, so a bad filter is rejected before
    # any fetch is scheduled.
    expression = FilterExpression.parse(raw_filter)
    pipeline: FeedPipeline = request.app.state.pipeline
    body = await asyncio.to_thread(pipeline.run, url, expression, output)
    return Response(content=body, media_type=output.media_type)


@router.get("/v1/json")
async def get_json(
    request: Request,
    url: str = Query(..., description="Calendar feed location"),
    filter_: Optional[str] = Query(None, alias="filter", description="Filter expression, e.g. contains:Lecture"),
) -> Response:
    """Filtered events as a JSON array."""
    return await _render_feed(request, url, filter_, OutputFormat.JSON)


@router.get("/v1/ical")
async def get_ical(
    request: Request,
    url: str = Query(..., description="Calendar feed location"),
    filter_: Optional[str] = Query(None, alias="filter", description="Filter expression, e.g. contains:Lecture"),
) -> Response:
    """Filtered events as an iCalendar document."""
    return await _render_feed(request, url, filter_, OutputFormat.ICAL)


@router.get("/health", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    return HealthResponse(status="healthy", service="ical-filter", version=__version__)
