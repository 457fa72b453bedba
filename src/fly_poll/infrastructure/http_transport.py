"""HTTP implementation of the search transport on top of httpx."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import TypeVar

import httpx

from ..config import get_settings
from ..domain.models import CreatedSession, PageRequest, PageResponse
from ..domain.ports.search_transport import (
    Aborted,
    CancellationHandle,
    Failure,
    Outcome,
    Success,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")


class HttpSearchTransport:
    """
    Transport talking to the remote search service over HTTP.

    Every call runs as a task raced against its cancellation handle: when
    the handle fires first, the request is cancelled and the call resolves
    with `Aborted`.

    Note: no request timeout is applied unless configured; a call that
    never answers is only ended by supersession.
    """

    def __init__(
        self,
        base_url: str | None = None,
        client: httpx.AsyncClient | None = None,
        timeout: float | None = None,
    ) -> None:
        """
        Initialize transport.

        Args:
            base_url: Base URL of the search service (default from config)
            client: Pre-configured client, e.g. with a mock transport
            timeout: Request timeout in seconds (default from config)
        """
        settings = get_settings()
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(
            base_url=base_url or settings.search_api_url,
            timeout=timeout if timeout is not None else settings.request_timeout,
        )

    async def create(
        self, query: str, handle: CancellationHandle
    ) -> Outcome[CreatedSession]:
        """Create a remote search via `GET /initialize`."""

        async def _request() -> CreatedSession:
            response = await self._client.get("/initialize", params={"query": query})
            response.raise_for_status()
            return CreatedSession.model_validate(response.json())

        return await self._run(_request, handle, "initialize")

    async def fetch_page(
        self, request: PageRequest, handle: CancellationHandle
    ) -> Outcome[PageResponse]:
        """Fetch a page via `POST /available-flights`."""

        async def _request() -> PageResponse:
            response = await self._client.post(
                "/available-flights", json=request.to_payload()
            )
            response.raise_for_status()
            return PageResponse.model_validate(response.json())

        return await self._run(_request, handle, "available-flights", request.session_id)

    async def aclose(self) -> None:
        """Close the underlying client if this transport created it."""
        if self._owns_client:
            await self._client.aclose()

    async def _run(
        self,
        request: Callable[[], Awaitable[T]],
        handle: CancellationHandle,
        endpoint: str,
        search_id: str | None = None,
    ) -> Outcome[T]:
        if handle.cancelled:
            return Aborted()

        # Запрос и сигнал отмены гоняются друг с другом, побеждает первый
        request_task = asyncio.ensure_future(request())
        abort_task = asyncio.ensure_future(handle.wait())
        try:
            await asyncio.wait(
                {request_task, abort_task},
                return_when=asyncio.FIRST_COMPLETED,
            )
        finally:
            abort_task.cancel()
            if not request_task.done():
                request_task.cancel()
            # Даём отменённому запросу освободить соединение
            await asyncio.gather(request_task, abort_task, return_exceptions=True)

        # Cancellation wins even over a response that raced it
        if handle.cancelled or request_task.cancelled():
            logger.debug(
                "Request aborted",
                extra={"endpoint": endpoint, "search_id": search_id},
            )
            return Aborted()

        error = request_task.exception()
        if error is None:
            return Success(request_task.result())

        if isinstance(error, (httpx.HTTPError, ValueError)):
            logger.warning(
                "Request failed",
                extra={"endpoint": endpoint, "search_id": search_id, "error": str(error)},
            )
            return Failure(error)
        raise error
