"""TTL store for search jobs running on the demo backend."""

from __future__ import annotations

from dataclasses import dataclass, field

from cachetools import TTLCache

from ..config import get_settings
from ..domain.models import FlightResult


@dataclass(slots=True)
class SearchRecord:
    """Server-side state of one search job."""

    search_id: str
    query: str
    started_at: float
    flights: list[FlightResult] = field(default_factory=list)


class SearchStore:
    """
    In-memory store of search jobs with TTL-based expiry.

    Works within a single process; a job disappears once its TTL elapses.
    """

    def __init__(
        self,
        ttl: int | None = None,
        size: int | None = None,
    ) -> None:
        """
        Initialize store with configurable TTL and size.

        Args:
            ttl: Lifetime of a job in seconds (default from config)
            size: Max number of jobs kept (default from config)
        """
        settings = get_settings()
        self._searches: TTLCache[str, SearchRecord] = TTLCache(
            maxsize=size or settings.search_store_size,
            ttl=ttl or settings.search_store_ttl,
        )

    def get(self, search_id: str) -> SearchRecord | None:
        """
        Get search job by id.

        Args:
            search_id: Search identifier

        Returns:
            Stored record or None if not found/expired
        """
        return self._searches.get(search_id)

    def add(self, record: SearchRecord) -> None:
        self._searches[record.search_id] = record

    def clear(self) -> None:
        """Remove all stored jobs."""
        self._searches.clear()

    def __len__(self) -> int:
        return len(self._searches)
