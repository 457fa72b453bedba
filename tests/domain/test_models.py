"""Tests for domain models."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from fly_poll.domain.models import (
    AvailableFlightsRequest,
    FlightResult,
    PageRequest,
    PageResponse,
    SearchFilters,
)


def test_blank_filter_values_mean_any() -> None:
    filters = SearchFilters.model_validate({"maxPrice": "", "airline": " ", "maxStops": ""})

    assert filters == SearchFilters()
    assert filters.to_params() == {}


def test_filters_compare_by_value() -> None:
    from_form = SearchFilters.model_validate({"maxPrice": "300", "maxStops": "1"})
    from_code = SearchFilters(max_price=300, max_stops=1)

    assert from_form == from_code
    assert from_form != SearchFilters(max_price=300)


def test_filters_reject_negative_values() -> None:
    with pytest.raises(ValidationError):
        SearchFilters(max_price=-1)


def test_filters_match_flights() -> None:
    flight = FlightResult(id="f1", airline="Delta", price=320, stops=1)

    assert SearchFilters().matches(flight)
    assert SearchFilters(max_price=320, airline="Delta", max_stops=1).matches(flight)
    assert not SearchFilters(max_price=300).matches(flight)
    assert not SearchFilters(airline="United").matches(flight)
    assert not SearchFilters(max_stops=0).matches(flight)


def test_page_request_payload_is_flat() -> None:
    request = PageRequest(
        session_id="search-1",
        page=3,
        limit=10,
        filters=SearchFilters(airline="Delta"),
    )

    assert request.to_payload() == {
        "searchId": "search-1",
        "page": 3,
        "limit": 10,
        "airline": "Delta",
    }


def test_page_response_uses_camel_case_wire_names() -> None:
    response = PageResponse.model_validate(
        {"results": [{"id": "f1", "extra": "kept"}], "progress": 0.5, "hasMore": False, "total": 1}
    )

    assert response.has_more is False
    assert response.results[0].model_extra == {"extra": "kept"}
    assert "hasMore" in response.model_dump(by_alias=True)


def test_page_response_rejects_progress_out_of_range() -> None:
    with pytest.raises(ValidationError):
        PageResponse(results=[], progress=1.5, has_more=False)


def test_available_flights_request_extracts_filters() -> None:
    body = AvailableFlightsRequest.model_validate(
        {"searchId": "search-1", "page": 2, "maxPrice": 300, "airline": ""}
    )

    assert body.search_id == "search-1"
    assert body.limit == 10
    assert body.to_filters() == SearchFilters(max_price=300)
