"""Domain models shared by the search session, its transport and the demo backend."""

from __future__ import annotations

from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class SessionStatus(StrEnum):
    """Lifecycle states of a search session."""

    IDLE = "idle"
    INITIALIZING = "initializing"
    POLLING = "polling"
    COMPLETE = "complete"
    FAILED = "failed"


class FlightResult(BaseModel):
    """Single flight found by the remote search. Only `id` is relied upon."""

    model_config = ConfigDict(extra="allow")

    id: str
    airline: str = ""
    departure: str = ""
    arrival: str = ""
    price: int = 0
    duration: str = ""
    stops: int = 0


class SearchFilters(BaseModel):
    """
    User-selected filters of a search.

    Empty strings mean "any" so values coming straight from form inputs
    compare equal to unset ones.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
        extra="ignore",
    )

    max_price: float | None = Field(default=None, ge=0)
    airline: str | None = None
    max_stops: int | None = Field(default=None, ge=0)

    @field_validator("max_price", "airline", "max_stops", mode="before")
    @classmethod
    def _blank_means_any(cls, value: Any) -> Any:
        if isinstance(value, str) and not value.strip():
            return None
        return value

    def to_params(self) -> dict[str, Any]:
        """Flatten to wire keys, omitting unset filters."""
        return self.model_dump(by_alias=True, exclude_none=True)

    def matches(self, flight: FlightResult) -> bool:
        if self.max_price is not None and flight.price > self.max_price:
            return False
        if self.airline is not None and flight.airline != self.airline:
            return False
        if self.max_stops is not None and flight.stops > self.max_stops:
            return False
        return True


class CreatedSession(BaseModel):
    """Answer of the remote "create session" call."""

    model_config = ConfigDict(populate_by_name=True)

    session_id: str = Field(alias="searchId", min_length=1)


class PageRequest(BaseModel):
    """Parameters of one page fetch."""

    model_config = ConfigDict(frozen=True)

    session_id: str
    page: int = Field(ge=1)
    limit: int = Field(ge=1)
    filters: SearchFilters = Field(default_factory=SearchFilters)

    def to_payload(self) -> dict[str, Any]:
        return {
            "searchId": self.session_id,
            "page": self.page,
            "limit": self.limit,
            **self.filters.to_params(),
        }


class PageResponse(BaseModel):
    """One page of results together with the remote search progress."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    results: list[FlightResult] = Field(default_factory=list)
    progress: float = Field(ge=0, le=1)
    has_more: bool
    total: int = Field(default=0, ge=0)


class AvailableFlightsRequest(SearchFilters):
    """Body of `POST /available-flights`: search id, paging and flat filters."""

    search_id: str = Field(alias="searchId", min_length=1)
    page: int = Field(default=1, ge=1)
    limit: int = Field(default=10, ge=1, le=100)

    def to_filters(self) -> SearchFilters:
        return SearchFilters(
            max_price=self.max_price,
            airline=self.airline,
            max_stops=self.max_stops,
        )


class SessionSnapshot(BaseModel):
    """State of a search session as exposed to presentation adapters."""

    session_id: str | None = None
    status: SessionStatus = SessionStatus.IDLE
    filters: SearchFilters = Field(default_factory=SearchFilters)
    page: int = 1
    results: list[FlightResult] = Field(default_factory=list)
    progress: float = 0.0
    has_more: bool = True
    last_error: str | None = None
    epoch: int = 0
    in_flight: bool = False
