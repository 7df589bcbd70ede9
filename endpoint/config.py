"""Connection settings shared by the client and the server."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Sequence

MAX_IP_LEN = 16
MAX_UNIX_PATH = 108
MAX_MSG_LEN = 64
MAX_BUFF_LEN = 64

DEFAULT_IP = "127.0.0.1"
DEFAULT_TIME_LIMIT = 60

_LEADING_INT = re.compile(r"\s*([+-]?\d+)")


def _to_int(text: str) -> int:
    """Read the leading integer of a string, or 0 if there is none."""
    match = _LEADING_INT.match(text)
    return int(match.group(1)) if match else 0


@dataclass
class ConnectionConfig:
    """Where to connect or listen, and how long to wait for activity."""

    use_tcp: bool = False
    port: int = 0
    ip: str = ""
    unix_path: str = ""
    time_limit: int = DEFAULT_TIME_LIMIT

    @property
    def address(self) -> tuple[str, int] | str:
        """The socket address: (ip, port) for TCP, the path for UNIX sockets."""
        if self.use_tcp:
            return (self.ip, self.port & 0xFFFF)
        return self.unix_path


def parse_connection_args(args: Sequence[str]) -> ConnectionConfig:
    """Build a configuration from -p, -ip, -u and -t options.

    Options without a following value and unknown words are ignored;
    a later transport option replaces an earlier one.
    """
    config = ConnectionConfig()
    words = iter(args)
    pending = list(args)
    for index, word in enumerate(words):
        has_value = index + 1 < len(pending)
        if not has_value:
            continue
        if word == "-p":
            value = next(words)
            config.use_tcp = True
            config.port = _to_int(value)
            config.ip = DEFAULT_IP
            config.unix_path = ""
        elif word == "-ip":
            value = next(words)
            config.use_tcp = True
            config.ip = value[: MAX_IP_LEN - 1]
            config.port = -1
            config.unix_path = ""
        elif word == "-u":
            value = next(words)
            config.use_tcp = False
            config.port = -1
            config.ip = ""
            config.unix_path = value[: MAX_UNIX_PATH - 1]
        elif word == "-t":
            value = next(words)
            config.time_limit = _to_int(value)
    return config