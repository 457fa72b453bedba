"""Script entrypoint serving the demo search backend."""

import uvicorn

from fly_poll.config import get_settings


def main() -> None:
    """Run dev server."""
    settings = get_settings()
    uvicorn.run(
        "fly_poll.app:app",
        host=settings.host,
        port=settings.port,
        reload=settings.reload,
        factory=False,
    )


if __name__ == "__main__":
    main()
