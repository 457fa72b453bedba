"""HTTP API of the demo search backend."""

from fly_poll.api.routes import router

__all__ = ["router"]
