"""Shared pytest fixtures."""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from dataclasses import dataclass

import pytest

from fly_poll.domain.models import CreatedSession, FlightResult, PageRequest, PageResponse
from fly_poll.domain.ports.search_transport import (
    Aborted,
    CancellationHandle,
    Failure,
    Outcome,
    Success,
)


@dataclass
class PageCall:
    """One fetch_page call captured by the fake transport."""

    request: PageRequest
    handle: CancellationHandle
    reply: asyncio.Future[PageResponse]

    def resolve(self, response: PageResponse) -> None:
        self.reply.set_result(response)

    def fail(self, error: Exception) -> None:
        self.reply.set_exception(error)


class FakeSearchTransport:
    """
    In-memory transport whose page calls stay pending until resolved.

    Replies queued with `queue()` answer the next calls immediately. With
    `honor_cancellation=False` a cancelled call keeps waiting for its reply
    and returns it, like a transport that ignores the signal.
    """

    def __init__(self, session_id: str = "search-1", *, honor_cancellation: bool = True) -> None:
        self.session_id = session_id
        self.honor_cancellation = honor_cancellation
        self.create_error: Exception | None = None
        self.create_gate: asyncio.Event | None = None
        self.create_calls: list[str] = []
        self.calls: list[PageCall] = []
        self.max_live_calls = 0
        self._queued: list[PageResponse | Exception] = []

    def queue(self, *replies: PageResponse | Exception) -> None:
        self._queued.extend(replies)

    def live_calls(self) -> list[PageCall]:
        return [c for c in self.calls if not c.handle.cancelled and not c.reply.done()]

    async def wait_for_calls(self, count: int) -> None:
        for _ in range(200):
            if len(self.calls) >= count:
                return
            await asyncio.sleep(0)
        raise AssertionError(f"expected {count} page calls, got {len(self.calls)}")

    async def create(self, query: str, handle: CancellationHandle) -> Outcome[CreatedSession]:
        self.create_calls.append(query)
        if self.create_gate is not None:
            await self.create_gate.wait()
        else:
            await asyncio.sleep(0)
        if handle.cancelled and self.honor_cancellation:
            return Aborted()
        if self.create_error is not None:
            return Failure(self.create_error)
        return Success(CreatedSession(session_id=self.session_id))

    async def fetch_page(self, request: PageRequest, handle: CancellationHandle) -> Outcome[PageResponse]:
        self.max_live_calls = max(self.max_live_calls, len(self.live_calls()) + 1)
        call = PageCall(request, handle, asyncio.get_running_loop().create_future())
        self.calls.append(call)
        if self._queued:
            reply = self._queued.pop(0)
            if isinstance(reply, Exception):
                call.fail(reply)
            else:
                call.resolve(reply)

        if self.honor_cancellation:
            abort = asyncio.ensure_future(handle.wait())
            try:
                await asyncio.wait({call.reply, abort}, return_when=asyncio.FIRST_COMPLETED)
            finally:
                abort.cancel()
            if handle.cancelled:
                return Aborted()
        else:
            await asyncio.wait({call.reply})

        error = call.reply.exception()
        if error is not None:
            return Failure(error)
        return Success(call.reply.result())


def make_results(start: int, stop: int, prefix: str = "r") -> list[FlightResult]:
    return [FlightResult(id=f"{prefix}{index}") for index in range(start, stop + 1)]


@pytest.fixture
def transport() -> FakeSearchTransport:
    return FakeSearchTransport()


@pytest.fixture
def lazy_transport() -> FakeSearchTransport:
    """Transport that ignores cancellation and delivers late replies."""
    return FakeSearchTransport(honor_cancellation=False)


@pytest.fixture
def results_builder() -> Callable[..., list[FlightResult]]:
    """Return a factory of results with ids `<prefix><n>` for n in [start, stop]."""
    return make_results


@pytest.fixture
def page_builder() -> Callable[..., PageResponse]:
    """Return a factory of page responses."""

    def _builder(
        results: list[FlightResult],
        progress: float = 0.25,
        has_more: bool = True,
        total: int = 50,
    ) -> PageResponse:
        return PageResponse(results=results, progress=progress, has_more=has_more, total=total)

    return _builder
