"""Contracts for the transport that talks to the remote search service."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Generic, Protocol, TypeVar

from ..models import CreatedSession, PageRequest, PageResponse

T = TypeVar("T")


class CancellationHandle:
    """
    Cooperative cancellation signal owned by exactly one transport call.

    Cancelling is idempotent; a transport observing the signal must resolve
    its call with `Aborted` instead of a payload or a failure.
    """

    def __init__(self) -> None:
        self._event = asyncio.Event()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def cancel(self) -> None:
        self._event.set()

    async def wait(self) -> None:
        """Block until the handle is cancelled."""
        await self._event.wait()


@dataclass(frozen=True, slots=True)
class Success(Generic[T]):
    """Call completed and produced a payload."""

    payload: T


@dataclass(frozen=True, slots=True)
class Aborted:
    """Call was superseded through its cancellation handle."""


@dataclass(frozen=True, slots=True)
class Failure:
    """Call failed for a reason other than cancellation."""

    error: Exception


Outcome = Success[T] | Aborted | Failure


class SearchTransport(Protocol):
    """Port describing interactions with the remote search service."""

    async def create(
        self, query: str, handle: CancellationHandle
    ) -> Outcome[CreatedSession]:
        """Create a remote search for `query` and return its id."""

    async def fetch_page(
        self, request: PageRequest, handle: CancellationHandle
    ) -> Outcome[PageResponse]:
        """Fetch one page of results of a running search."""
