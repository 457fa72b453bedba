"""API routes of the demo search backend."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, Query

from fly_poll.api.dependencies import get_search_backend
from fly_poll.domain.errors import SearchNotFoundError
from fly_poll.domain.models import AvailableFlightsRequest, CreatedSession, PageResponse
from fly_poll.infrastructure.search_backend import FlightSearchBackend

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get(
    "/initialize",
    response_model=CreatedSession,
    tags=["search"],
)
async def initialize(
    query: str = Query(
        min_length=1,
        description="Free-text search query, e.g. 'NYC to LAX'",
    ),
    backend: FlightSearchBackend = Depends(get_search_backend),
) -> CreatedSession:
    """
    Start a progressive search.

    Returns searchId used to poll /available-flights.
    """
    logger.info("initialize called", extra={"event": "initialize", "query": query})
    try:
        created = await backend.initialize(query)
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e)) from None

    logger.info(
        "initialize finished",
        extra={"event": "created", "search_id": created.session_id},
    )
    return created


@router.post(
    "/available-flights",
    response_model=PageResponse,
    tags=["search"],
)
async def available_flights(
    body: AvailableFlightsRequest,
    backend: FlightSearchBackend = Depends(get_search_backend),
) -> PageResponse:
    """
    Return one page of flights found so far.

    Progress below 1 means the search is still running and the page may grow.
    """
    logger.info(
        "available_flights called",
        extra={"event": "poll", "search_id": body.search_id, "page": body.page},
    )
    try:
        response = await backend.available_flights(
            body.search_id,
            page=body.page,
            limit=body.limit,
            filters=body.to_filters(),
        )
    except SearchNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e)) from None

    logger.info(
        "available_flights finished",
        extra={
            "search_id": body.search_id,
            "page": body.page,
            "progress": response.progress,
            "results_count": len(response.results),
        },
    )
    return response
