"""Command line entry point: start as server (-s) or client (-c)."""

from __future__ import annotations

import os
import sys
from typing import Optional, Sequence

from endpoint.client import run_client
from endpoint.server import run_server


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Run the server or the client as selected by the first argument."""
    if argv is None:
        argv = sys.argv[1:]
    argv = list(argv)

    if not argv:
        prog = os.path.basename(sys.argv[0]) if sys.argv and sys.argv[0] else "endpoint"
        print(f"Usage: {prog} -s|-c [options]")
        return 1

    mode, rest = argv[0], argv[1:]
    if mode == "-s":
        run_server(rest)
    elif mode == "-c":
        run_client(rest)
    else:
        print("Wrong arguments.")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())