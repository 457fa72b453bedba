"""Progressive flight search: client session, transport and demo backend."""

__version__ = "0.1.0"
