"""Demo remote search service that discovers flights progressively."""

from __future__ import annotations

import asyncio
import logging
import math
import random
import time
from collections.abc import Callable
from uuid import uuid4

from ..config import get_settings
from ..domain.errors import SearchNotFoundError
from ..domain.models import CreatedSession, FlightResult, PageResponse, SearchFilters
from .search_store import SearchRecord, SearchStore

logger = logging.getLogger(__name__)

AIRLINES = ("American Airlines", "Delta", "United", "Southwest")


class FlightSearchBackend:
    """
    Server side of a progressive search.

    Each search owns a fixed catalogue of flights that becomes visible
    gradually: progress grows with the time elapsed since the search was
    started and reaches 1 after the configured duration.
    """

    def __init__(
        self,
        store: SearchStore,
        *,
        total_results: int | None = None,
        search_duration: float | None = None,
        initialize_delay: float | None = None,
        page_delay: tuple[float, float] | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """
        Initialize backend.

        Args:
            store: Store keeping running searches
            total_results: Flights each search eventually finds
            search_duration: Seconds until progress reaches 1
            initialize_delay: Simulated latency of search creation
            page_delay: Bounds of simulated latency of a page fetch
            clock: Monotonic time source
        """
        settings = get_settings()

        self._store = store
        self._total_results = (
            total_results if total_results is not None else settings.mock_total_results
        )
        self._search_duration = search_duration or settings.mock_search_duration
        self._initialize_delay = (
            initialize_delay if initialize_delay is not None else settings.mock_initialize_delay
        )
        low, high = page_delay or (settings.mock_page_delay_min, settings.mock_page_delay_max)
        self._page_delay = (min(low, high), max(low, high))
        self._clock = clock

    async def initialize(self, query: str) -> CreatedSession:
        """
        Start a new search.

        Args:
            query: Free-text search query

        Returns:
            Identifier of the created search

        Raises:
            ValueError: If query is empty
        """
        if not query.strip():
            raise ValueError("query must be a non-empty string")

        await asyncio.sleep(self._initialize_delay)

        search_id = uuid4().hex
        record = SearchRecord(
            search_id=search_id,
            query=query,
            started_at=self._clock(),
            flights=self._build_catalog(search_id),
        )
        self._store.add(record)

        logger.info(
            "Search started",
            extra={"search_id": search_id, "query": query, "total": len(record.flights)},
        )
        return CreatedSession(session_id=search_id)

    async def available_flights(
        self,
        search_id: str,
        page: int = 1,
        limit: int = 10,
        filters: SearchFilters | None = None,
    ) -> PageResponse:
        """
        Return one page of the flights discovered so far.

        Args:
            search_id: Search identifier
            page: 1-based page number
            limit: Page size
            filters: Filters applied before paging

        Returns:
            Page of results with the current search progress

        Raises:
            SearchNotFoundError: If the search is unknown or expired
        """
        record = self._store.get(search_id)
        if record is None:
            logger.warning("Search not found", extra={"search_id": search_id})
            raise SearchNotFoundError(f"Search {search_id} not found")

        # Имитируем задержку ответа провайдера
        await asyncio.sleep(random.uniform(*self._page_delay))

        filters = filters or SearchFilters()
        progress = self.progress(record)
        # Видна только уже найденная часть каталога
        discovered = record.flights[: math.ceil(progress * len(record.flights))]

        matching = [flight for flight in record.flights if filters.matches(flight)]
        visible = [flight for flight in discovered if filters.matches(flight)]
        start = (page - 1) * limit

        response = PageResponse(
            results=visible[start : start + limit],
            progress=progress,
            has_more=page * limit < len(matching),
            total=len(matching),
        )
        logger.debug(
            "Page served",
            extra={
                "search_id": search_id,
                "page": page,
                "progress": progress,
                "results_count": len(response.results),
            },
        )
        return response

    def progress(self, record: SearchRecord) -> float:
        elapsed = max(self._clock() - record.started_at, 0.0)
        return min(0.1 + 0.9 * elapsed / self._search_duration, 1.0)

    def _build_catalog(self, search_id: str) -> list[FlightResult]:
        # Каталог детерминирован: повторный опрос страницы отдаёт те же рейсы
        rng = random.Random(search_id)
        return [
            FlightResult(
                id=f"flight_{search_id}_{index}",
                airline=rng.choice(AIRLINES),
                departure=f"{rng.randint(1, 12):02d}:{rng.randint(0, 59):02d}",
                arrival=f"{rng.randint(13, 23):02d}:{rng.randint(0, 59):02d}",
                price=rng.randint(200, 699),
                duration=f"{rng.randint(2, 9)}h {rng.randint(0, 59)}m",
                stops=rng.randint(0, 2),
            )
            for index in range(self._total_results)
        ]
