"""Dependency wiring for FastAPI endpoints."""

from __future__ import annotations

from functools import lru_cache

from fastapi import Depends

from fly_poll.infrastructure.search_backend import FlightSearchBackend
from fly_poll.infrastructure.search_store import SearchStore


@lru_cache(maxsize=1)
def get_search_store() -> SearchStore:
    """Return search store instance (singleton)."""
    return SearchStore()


def get_search_backend(
    store: SearchStore = Depends(get_search_store),
) -> FlightSearchBackend:
    """Assemble the demo search backend."""
    return FlightSearchBackend(store=store)
