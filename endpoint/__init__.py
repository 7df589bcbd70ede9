"""Interactive shell that also runs as a socket client or an upper-casing echo server."""

__version__ = "0.1.0"