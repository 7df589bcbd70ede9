"""Server side: accept a client, echo its text in upper case, run the shell."""

from __future__ import annotations

import contextlib
import os
import select
import socket
import sys
from typing import Optional, Sequence

from endpoint.config import MAX_BUFF_LEN, ConnectionConfig, parse_connection_args
from endpoint.shell import Shell, display_shell_prompt

BANNER = b"Hello from server\nSend a string and I'll send you back the upper case...\n"
BACKLOG = 5


def to_upper(data: bytes) -> bytes:
    """Convert ASCII letters to upper case, leaving every other byte alone."""
    return data.upper()


class Server:
    """A listening endpoint that serves one client at a time."""

    def __init__(self, config: ConnectionConfig) -> None:
        self.config = config
        self.listening_socket: Optional[socket.socket] = None

    def __enter__(self) -> "Server":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def bind(self) -> None:
        """Create the listening socket for the configured TCP or UNIX address.

        Raises ValueError for a malformed IP address and OSError when the
        address cannot be bound or listened on.
        """
        cfg = self.config
        if cfg.use_tcp:
            host = ""
            if cfg.ip:
                try:
                    socket.inet_pton(socket.AF_INET, cfg.ip)
                except OSError as exc:
                    raise ValueError(f"Invalid IP address: {cfg.ip}") from exc
                host = cfg.ip
            sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
            address: object = (host, cfg.port & 0xFFFF)
        else:
            sock = socket.socket(socket.AF_UNIX, socket.SOCK_STREAM)
            with contextlib.suppress(OSError):
                os.unlink(cfg.unix_path)
            address = cfg.unix_path
        try:
            sock.bind(address)
            sock.listen(BACKLOG)
        except BaseException:
            sock.close()
            raise
        self.listening_socket = sock
        if cfg.use_tcp:
            print(f"Server is listening on IP {cfg.ip or 'ANY'}, port {cfg.port}...", flush=True)
        else:
            print(f"Server is listening on UNIX socket {cfg.unix_path}...", flush=True)

    def _accept(self) -> Optional[socket.socket]:
        """Wait up to the time limit for a client; shut down if none comes."""
        if self.listening_socket is None:
            raise RuntimeError("server is not bound")
        ready, _, _ = select.select([self.listening_socket], [], [], self.config.time_limit)
        if not ready:
            print("No incoming connection. Shutting down.", flush=True)
            self.close()
            return None
        conn, _ = self.listening_socket.accept()
        return conn

    def _serve_console(self, conn: Optional[socket.socket]) -> None:
        while conn is not None:
            if not self.communicate(conn):
                return
            conn = self._accept()

    def serve(self, console: bool = False) -> None:
        """Accept a client and talk to it.

        With console set, clients are served in this process one after
        another until none arrives in time. Otherwise a child process serves
        them while this process runs the shell on the connection.
        """
        conn = self._accept()
        if conn is None:
            return
        if console:
            self._serve_console(conn)
            return

        sys.stdout.flush()
        sys.stderr.flush()
        pid = os.fork()
        if pid == 0:
            status = 0
            try:
                self._serve_console(conn)
            except BaseException:  # the serving process must never return to the caller
                status = 1
            finally:
                with contextlib.suppress(Exception):
                    conn.close()
                    sys.stdout.flush()
                os._exit(status)

        try:
            Shell(conn, is_client=False).run()
        finally:
            conn.close()
            self.close()

    def communicate(self, conn: socket.socket) -> bool:
        """Greet the client and echo its messages in upper case.

        Returns True when the client closed the connection, False on an error.
        The connection is closed either way.
        """
        try:
            conn.sendall(BANNER)
        except OSError as exc:
            print(f"\nError sending banner to client: {exc}", file=sys.stderr)
            conn.close()
            return False

        closed_by_client = False
        while True:
            try:
                data = conn.recv(MAX_BUFF_LEN - 1)
            except OSError as exc:
                print(f"read: {exc}", file=sys.stderr)
                break
            if not data:
                closed_by_client = True
                break
            text = data.decode(errors="replace")
            print(f"\nReceived message: {text}", end="")
            print(f"\nReceived ({len(data)} bytes): {text}")
            upper = to_upper(data)
            print(f"Sending back: {upper.decode(errors='replace')}")
            try:
                conn.sendall(upper)
            except OSError as exc:
                print(f"\nError sending back data to client: {exc}", file=sys.stderr)
                break
            display_shell_prompt()
            sys.stdout.flush()

        conn.close()
        if closed_by_client:
            print("\nClient closed the connection.", flush=True)
            display_shell_prompt()
        return closed_by_client

    def close(self) -> None:
        """Close the listening socket and remove a UNIX socket file."""
        if self.listening_socket is not None:
            self.listening_socket.close()
            self.listening_socket = None
        if not self.config.use_tcp and self.config.unix_path:
            with contextlib.suppress(OSError):
                os.unlink(self.config.unix_path)


def run_server(args: Sequence[str]) -> None:
    """Listen as configured by args and serve clients alongside the shell."""
    print("Server")
    print("Arguments:")
    for index, arg in enumerate(args):
        print(f"  args[{index}] = {arg}")

    server = Server(parse_connection_args(args))
    try:
        server.bind()
    except ValueError as exc:
        print(str(exc), file=sys.stderr)
        raise SystemExit(1) from exc
    except OSError as exc:
        print(f"bind: {exc}", file=sys.stderr)
        raise SystemExit(1) from exc

    try:
        server.serve(console=False)
    except (OSError, ValueError) as exc:
        print(f"select: {exc}", file=sys.stderr)
        server.close()
        raise SystemExit(1) from exc