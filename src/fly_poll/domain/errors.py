"""Errors raised or recorded by the search domain."""

from __future__ import annotations


class SearchSessionError(Exception):
    """Base class for failures recorded on a search session."""

    summary = "Search failed"

    def __init__(self, error: BaseException | str) -> None:
        """
        Initialize session error.

        Args:
            error: Underlying cause or its message
        """
        self.error = error
        super().__init__(f"{self.summary}: {error}")


class InitializationError(SearchSessionError):
    """Raised when the remote service refuses to create a search session."""

    summary = "Search initialization failed"


class PollError(SearchSessionError):
    """Raised when fetching a page of results fails."""

    summary = "Fetching results failed"


class SearchNotFoundError(Exception):
    """Raised when a search id is unknown to the backend."""

    pass
