"""Client-side search session: lifecycle, polling protocol and cancellation."""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable, Iterable, Mapping
from typing import Any, TypeVar

from ...config import get_settings
from ..errors import InitializationError, PollError, SearchSessionError
from ..models import (
    FlightResult,
    PageRequest,
    PageResponse,
    SearchFilters,
    SessionSnapshot,
    SessionStatus,
)
from ..ports.search_transport import (
    Aborted,
    CancellationHandle,
    Failure,
    Outcome,
    SearchTransport,
)
from .poll_scheduler import PollScheduler

logger = logging.getLogger(__name__)

A = TypeVar("A")

SnapshotListener = Callable[[SessionSnapshot], None]


class SearchSession:
    """
    State machine of one progressive search.

    The session owns the server-assigned id, the active filters, the page
    cursor and the results accumulated for the current epoch. Every
    operation aborts its predecessor before issuing a transport call, and
    only the call holding the active cancellation handle may change state,
    so at most one call is outstanding and superseded responses are never
    applied.
    """

    def __init__(
        self,
        transport: SearchTransport,
        scheduler: PollScheduler | None = None,
        *,
        poll_interval: float | None = None,
        page_size: int | None = None,
    ) -> None:
        """
        Initialize an idle session.

        Args:
            transport: Transport used to reach the remote search service
            scheduler: Scheduler driving automatic polls
            poll_interval: Delay between automatic polls (default from config)
            page_size: Results requested per page (default from config)
        """
        settings = get_settings()

        self._transport = transport
        self._scheduler = scheduler or PollScheduler()
        self._poll_interval = (
            poll_interval if poll_interval is not None else settings.poll_interval
        )
        self._page_size = page_size if page_size is not None else settings.page_size
        self._listeners: list[SnapshotListener] = []

        self._session_id: str | None = None
        self._filters = SearchFilters()
        self._page = 1
        self._results: list[FlightResult] = []
        self._progress = 0.0
        self._has_more = True
        self._status = SessionStatus.IDLE
        self._last_error: SearchSessionError | None = None
        self._epoch = 0
        self._active_handle: CancellationHandle | None = None

    async def __aenter__(self) -> SearchSession:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        self.cancel()

    @property
    def session_id(self) -> str | None:
        return self._session_id

    @property
    def filters(self) -> SearchFilters:
        return self._filters

    @property
    def page(self) -> int:
        return self._page

    @property
    def results(self) -> list[FlightResult]:
        return list(self._results)

    @property
    def progress(self) -> float:
        return self._progress

    @property
    def has_more(self) -> bool:
        return self._has_more

    @property
    def status(self) -> SessionStatus:
        return self._status

    @property
    def last_error(self) -> SearchSessionError | None:
        return self._last_error

    @property
    def epoch(self) -> int:
        return self._epoch

    @property
    def in_flight(self) -> bool:
        return self._active_handle is not None

    @property
    def scheduler(self) -> PollScheduler:
        return self._scheduler

    async def initialize(self, query: str) -> None:
        """
        Start a new remote search and fetch its first page.

        Args:
            query: Free-text search query, e.g. "NYC to LAX"

        Raises:
            ValueError: If query is empty
        """
        if not isinstance(query, str) or not query.strip():
            raise ValueError("query must be a non-empty string")

        self._cancel_pending()
        self._start_epoch(SearchFilters())
        self._session_id = None
        self._status = SessionStatus.INITIALIZING
        logger.info(
            "search initializing",
            extra={"event": "initialize", "query": query, "epoch": self._epoch},
        )
        self._notify()

        handle = self._begin_operation()
        outcome = await self._call(self._transport.create, query, handle)
        if not self._settle(handle, outcome):
            return

        if isinstance(outcome, Failure):
            self._fail(InitializationError(outcome.error))
            return

        self._session_id = outcome.payload.session_id
        self._status = SessionStatus.POLLING
        logger.info(
            "search created",
            extra={"event": "created", "search_id": self._session_id, "epoch": self._epoch},
        )
        self._notify()
        await self._poll()

    async def update_filters(self, new_filters: SearchFilters | Mapping[str, Any]) -> None:
        """
        Restart result collection under new filters.

        Does nothing before a session exists or when the filters are equal
        by value to the active ones.

        Args:
            new_filters: Filters model or mapping with maxPrice/airline/maxStops
        """
        if self._session_id is None:
            logger.debug("update_filters ignored: no session", extra={"event": "noop"})
            return

        if isinstance(new_filters, SearchFilters):
            filters = new_filters
        else:
            filters = SearchFilters.model_validate(new_filters)

        if filters == self._filters:
            logger.debug(
                "update_filters ignored: filters unchanged",
                extra={"event": "noop", "search_id": self._session_id},
            )
            return

        self._cancel_pending()
        self._start_epoch(filters)
        self._status = SessionStatus.POLLING
        logger.info(
            "filters changed",
            extra={
                "event": "filters",
                "search_id": self._session_id,
                "epoch": self._epoch,
                "filters": filters.to_params(),
            },
        )
        self._notify()
        await self._poll()

    async def load_more(self) -> None:
        """Fetch the next page and append it to the results."""
        if not self._has_more or self._status is not SessionStatus.POLLING or self.in_flight:
            logger.debug(
                "load_more ignored",
                extra={
                    "event": "noop",
                    "search_id": self._session_id,
                    "status": self._status,
                    "has_more": self._has_more,
                    "in_flight": self.in_flight,
                },
            )
            return

        self._scheduler.disarm()
        self._page += 1
        self._notify()
        await self._poll()

    def cancel(self) -> None:
        """
        Stop the session: abort the outstanding call and the scheduled poll.

        Accumulated results are kept.
        """
        self._cancel_pending()
        self._status = SessionStatus.IDLE
        logger.info(
            "search cancelled",
            extra={"event": "cancel", "search_id": self._session_id},
        )
        self._notify()

    def snapshot(self) -> SessionSnapshot:
        """Return the state exposed to presentation adapters."""
        return SessionSnapshot(
            session_id=self._session_id,
            status=self._status,
            filters=self._filters,
            page=self._page,
            results=list(self._results),
            progress=self._progress,
            has_more=self._has_more,
            last_error=str(self._last_error) if self._last_error is not None else None,
            epoch=self._epoch,
            in_flight=self.in_flight,
        )

    def subscribe(self, listener: SnapshotListener) -> Callable[[], None]:
        """
        Register a listener called with a snapshot after every state change.

        Returns:
            Callable removing the listener
        """
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    async def _poll(self) -> None:
        # Timer callbacks may outlive a cancel or a failure
        if self._status is not SessionStatus.POLLING or self._session_id is None:
            return

        handle = self._begin_operation()
        request = PageRequest(
            session_id=self._session_id,
            page=self._page,
            limit=self._page_size,
            filters=self._filters,
        )
        logger.debug(
            "poll started",
            extra={"event": "poll", "search_id": self._session_id, "page": request.page},
        )

        outcome = await self._call(self._transport.fetch_page, request, handle)
        if not self._settle(handle, outcome):
            return

        if isinstance(outcome, Failure):
            self._fail(PollError(outcome.error))
            return

        self._apply_page(request.page, outcome.payload)

    def _apply_page(self, page: int, response: PageResponse) -> None:
        if page == 1:
            self._results = self._merge_results([], response.results)
        else:
            self._results = self._merge_results(self._results, response.results)

        self._progress = max(self._progress, response.progress)
        self._has_more = response.has_more

        if self._progress >= 1:
            self._status = SessionStatus.COMPLETE
            self._scheduler.disarm()
        else:
            self._scheduler.arm(self._poll_interval, self._poll)

        logger.info(
            "page applied",
            extra={
                "event": "page",
                "search_id": self._session_id,
                "page": page,
                "received": len(response.results),
                "results_count": len(self._results),
                "progress": self._progress,
                "status": self._status,
            },
        )
        self._notify()

    def _fail(self, error: SearchSessionError) -> None:
        self._status = SessionStatus.FAILED
        self._last_error = error
        self._scheduler.disarm()
        logger.warning(
            "search failed",
            extra={"event": "failed", "search_id": self._session_id, "error": str(error)},
        )
        self._notify()

    def _begin_operation(self) -> CancellationHandle:
        self._abort_active()
        handle = CancellationHandle()
        self._active_handle = handle
        self._notify()
        return handle

    def _settle(self, handle: CancellationHandle, outcome: Outcome[Any]) -> bool:
        """Release `handle` and tell whether its outcome may change state."""
        owned = handle is self._active_handle and not handle.cancelled
        if owned:
            self._active_handle = None

        if not owned or isinstance(outcome, Aborted):
            logger.debug(
                "superseded response discarded",
                extra={"event": "discard", "search_id": self._session_id},
            )
            if owned:
                self._notify()
            return False
        return True

    def _abort_active(self) -> None:
        handle = self._active_handle
        if handle is not None:
            handle.cancel()
            self._active_handle = None

    def _cancel_pending(self) -> None:
        self._abort_active()
        self._scheduler.disarm()

    def _start_epoch(self, filters: SearchFilters) -> None:
        self._epoch += 1
        self._filters = filters
        self._page = 1
        self._results = []
        self._progress = 0.0
        self._has_more = True
        self._last_error = None

    async def _call(
        self,
        method: Callable[[A, CancellationHandle], Awaitable[Outcome[Any]]],
        argument: A,
        handle: CancellationHandle,
    ) -> Outcome[Any]:
        try:
            return await method(argument, handle)
        except Exception as e:
            logger.exception(
                "transport raised instead of returning a failure",
                extra={"search_id": self._session_id},
            )
            return Failure(e)

    def _notify(self) -> None:
        if not self._listeners:
            return
        snapshot = self.snapshot()
        for listener in list(self._listeners):
            try:
                listener(snapshot)
            except Exception:
                logger.exception(
                    "session listener failed",
                    extra={"search_id": self._session_id},
                )

    @staticmethod
    def _merge_results(
        existing: Iterable[FlightResult],
        new: Iterable[FlightResult],
    ) -> list[FlightResult]:
        merged = list(existing)
        seen = {result.id for result in merged}
        for result in new:
            if result.id in seen:
                continue
            seen.add(result.id)
            merged.append(result)
        return merged
