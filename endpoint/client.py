"""Client side: connect to the server, relay messages and run the shell."""

from __future__ import annotations

import contextlib
import os
import select
import socket
import sys
from typing import IO, Optional, Sequence

from endpoint.config import MAX_MSG_LEN, ConnectionConfig, parse_connection_args
from endpoint.shell import Shell


def connect(config: ConnectionConfig) -> socket.socket:
    """Open a stream socket connected to the configured server.

    Raises OSError if the connection cannot be made.
    """
    if config.use_tcp:
        print(f"Running as TCP client, connecting to {config.ip}:{config.port}...", flush=True)
        sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    else:
        print(f"Running as UNIX client, connecting to {config.unix_path}...", flush=True)
        sock = socket.socket(socket.AF_UNIX, socket.SOCK_STREAM)
    try:
        sock.connect(config.address)
    except BaseException:
        sock.close()
        raise
    return sock


def handle_server_response(sock: socket.socket, out: Optional[IO[str]] = None) -> bool:
    """Read one chunk from the server and write it out.

    Returns False, after closing the socket, when the server has gone.
    """
    if out is None:
        out = sys.stdout
    try:
        data = sock.recv(MAX_MSG_LEN - 1)
    except OSError:
        data = b""
    if data:
        out.write("\n")
        out.write(data.decode(errors="replace"))
        out.flush()
        return True
    out.write("Server closed connection.\n")
    out.flush()
    sock.close()
    return False


def receive_loop(sock: socket.socket, time_limit: float, out: Optional[IO[str]] = None) -> None:
    """Print what the server sends until it closes or stays silent too long."""
    if out is None:
        out = sys.stdout
    while True:
        try:
            ready, _, _ = select.select([sock], [], [], time_limit)
        except (OSError, ValueError) as exc:
            print(f"select: {exc}", file=sys.stderr)
            break
        if not ready:
            out.write("\nNo activity for 30 seconds. Closing connection.\n")
            sock.close()
            out.write("Connection closed (child).\n")
            out.flush()
            break
        if not handle_server_response(sock, out):
            break
    sock.close()


def send_message(sock: socket.socket, msg: Optional[str]) -> None:
    """Send a text message to the server; None sends nothing."""
    if msg is not None:
        sock.sendall(msg.encode())


def run_client(args: Sequence[str]) -> None:
    """Connect as configured by args, then run the shell with a background reader."""
    print("Client")
    print("Arguments:")
    for index, arg in enumerate(args):
        print(f"  args[{index}] = {arg}")

    config = parse_connection_args(args)
    try:
        sock = connect(config)
    except OSError as exc:
        print(f"connect: {exc}", file=sys.stderr)
        raise SystemExit(2) from exc

    sys.stdout.flush()
    sys.stderr.flush()
    try:
        pid = os.fork()
    except OSError as exc:
        print(f"fork failed: {exc}", file=sys.stderr)
        sock.close()
        raise SystemExit(1) from exc

    if pid == 0:
        status = 0
        try:
            receive_loop(sock, config.time_limit)
        except BaseException:  # the reader process must never return to the caller
            status = 1
        finally:
            with contextlib.suppress(Exception):
                sys.stdout.flush()
            os._exit(status)

    try:
        Shell(sock, is_client=True).run()
    finally:
        sock.close()