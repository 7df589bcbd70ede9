import os
import socket

import pytest

from endpoint.config import MAX_BUFF_LEN, ConnectionConfig
from endpoint.server import BANNER, Server, to_upper


def _read_all(sock: socket.socket) -> bytes:
    chunks = []
    while True:
        chunk = sock.recv(4096)
        if not chunk:
            break
        chunks.append(chunk)
    return b"".join(chunks)


def _unix_config(tmp_path, time_limit=60):
    return ConnectionConfig(use_tcp=False, unix_path=str(tmp_path / "s.sock"), time_limit=time_limit)


def test_to_upper_ascii():
    assert to_upper(b"hello") == b"HELLO"


def test_to_upper_leaves_non_ascii_bytes():
    assert to_upper(b"\xe9z1!") == b"\xe9Z1!"


def test_to_upper_is_idempotent():
    data = b"Mixed Case 123\n"
    assert to_upper(to_upper(data)) == to_upper(data)


def test_bind_unix_creates_socket_file_and_close_removes_it(tmp_path, capsys):
    config = _unix_config(tmp_path)
    server = Server(config)
    server.bind()
    assert os.path.exists(config.unix_path)
    assert "Server is listening on UNIX socket" in capsys.readouterr().out
    server.close()
    assert not os.path.exists(config.unix_path)
    assert server.listening_socket is None


def test_bind_unix_replaces_stale_file(tmp_path):
    config = _unix_config(tmp_path)
    with open(config.unix_path, "w") as handle:
        handle.write("stale")
    with Server(config) as server:
        server.bind()
        assert server.listening_socket.family == socket.AF_UNIX
    assert not os.path.exists(config.unix_path)


def test_bind_tcp_listens_on_given_ip(capsys):
    config = ConnectionConfig(use_tcp=True, ip="127.0.0.1", port=0)
    with Server(config) as server:
        server.bind()
        host, _ = server.listening_socket.getsockname()
        assert host == "127.0.0.1"
    assert "Server is listening on IP 127.0.0.1" in capsys.readouterr().out


def test_bind_rejects_invalid_ip():
    config = ConnectionConfig(use_tcp=True, ip="999.1.1.1", port=0)
    with pytest.raises(ValueError):
        Server(config).bind()


def test_serve_without_bind_raises():
    with pytest.raises(RuntimeError):
        Server(ConnectionConfig()).serve(console=True)


def test_communicate_sends_banner_and_upper_case():
    conn, peer = socket.socketpair()
    peer.sendall(b"hello")
    peer.shutdown(socket.SHUT_WR)
    result = Server(ConnectionConfig()).communicate(conn)
    assert result is True
    assert _read_all(peer) == BANNER + to_upper(b"hello")
    peer.close()


def test_communicate_handles_messages_longer_than_buffer(capsys):
    conn, peer = socket.socketpair()
    payload = b"abcdefghij" * 10
    assert len(payload) > MAX_BUFF_LEN
    peer.sendall(payload)
    peer.shutdown(socket.SHUT_WR)
    assert Server(ConnectionConfig()).communicate(conn) is True
    assert _read_all(peer) == BANNER + to_upper(payload)
    out = capsys.readouterr().out
    assert "Client closed the connection." in out
    peer.close()


def test_serve_times_out_without_client(tmp_path, capsys):
    config = _unix_config(tmp_path, time_limit=0)
    server = Server(config)
    server.bind()
    server.serve(console=True)
    assert "No incoming connection. Shutting down." in capsys.readouterr().out
    assert server.listening_socket is None
    assert not os.path.exists(config.unix_path)


def test_serve_console_serves_client_then_shuts_down(tmp_path, capsys):
    config = _unix_config(tmp_path, time_limit=1)
    server = Server(config)
    server.bind()
    client = socket.socket(socket.AF_UNIX, socket.SOCK_STREAM)
    client.connect(config.unix_path)
    client.sendall(b"abc")
    client.shutdown(socket.SHUT_WR)
    server.serve(console=True)
    assert _read_all(client) == BANNER + to_upper(b"abc")
    client.close()
    out = capsys.readouterr().out
    assert "Received message: abc" in out
    assert "No incoming connection. Shutting down." in out
    assert not os.path.exists(config.unix_path)