"""
Unit tests for the client connection wrapper.

Uses socket.socketpair() so no port is bound.
"""

import socket
import threading
import time

import pytest

from statichttpd.core.connection import (
    DRAIN_TIMEOUT,
    Connection,
    ConnectionState,
    RequestTooLargeError,
)


@pytest.fixture
def pair():
    server_sock, client_sock = socket.socketpair()
    yield server_sock, client_sock
    for s in (server_sock, client_sock):
        try:
            s.close()
        except OSError:
            pass


def make_conn(sock, **kwargs) -> Connection:
    return Connection(socket=sock, address=("127.0.0.1", 12345), buffer_size=1024, **kwargs)


class TestReadLine:
    """Tests for line reading."""

    def test_crlf_and_lf(self, pair):
        server_sock, client_sock = pair
        client_sock.sendall(b"GET / HTTP/1.1\r\nHost: x\n\r\n")
        client_sock.shutdown(socket.SHUT_WR)

        conn = make_conn(server_sock)

        assert conn.read_line() == "GET / HTTP/1.1"
        assert conn.read_line() == "Host: x"
        assert conn.read_line() == ""
        assert conn.read_line() is None

    def test_last_line_without_terminator(self, pair):
        server_sock, client_sock = pair
        client_sock.sendall(b"GET / HTTP/1.1")
        client_sock.shutdown(socket.SHUT_WR)

        conn = make_conn(server_sock)

        assert list(conn.read_lines()) == ["GET / HTTP/1.1"]

    def test_empty_stream(self, pair):
        server_sock, client_sock = pair
        client_sock.shutdown(socket.SHUT_WR)

        assert make_conn(server_sock).read_line() is None

    def test_latin1_decoding(self, pair):
        """Test that arbitrary bytes decode without errors."""
        server_sock, client_sock = pair
        client_sock.sendall(b"GET /caf\xe9.html HTTP/1.1\r\n")
        client_sock.shutdown(socket.SHUT_WR)

        assert make_conn(server_sock).read_line() == "GET /café.html HTTP/1.1"

    def test_request_too_large(self, pair):
        server_sock, client_sock = pair
        client_sock.sendall(b"A" * 3000)
        client_sock.shutdown(socket.SHUT_WR)

        conn = make_conn(server_sock, max_request_size=2048)

        with pytest.raises(RequestTooLargeError):
            conn.read_line()

    def test_read_timeout(self, pair):
        server_sock, _client_sock = pair
        conn = make_conn(server_sock, timeout=0.1)

        with pytest.raises(TimeoutError):
            conn.read_line()


class TestSend:
    """Tests for sending data."""

    def test_send(self, pair):
        server_sock, client_sock = pair
        conn = make_conn(server_sock)

        assert conn.send(b"hello")
        assert client_sock.recv(5) == b"hello"

    def test_send_file(self, pair, tmp_path):
        server_sock, client_sock = pair
        path = tmp_path / "data.bin"
        path.write_bytes(b"0123456789")
        conn = make_conn(server_sock)

        assert conn.send_file(str(path), 10)
        conn.close()

        received = b""
        while True:
            chunk = client_sock.recv(1024)
            if not chunk:
                break
            received += chunk
        assert received == b"0123456789"

    def test_send_file_missing(self, pair, tmp_path):
        server_sock, _ = pair
        assert not make_conn(server_sock).send_file(str(tmp_path / "gone"), 10)

    def test_send_after_peer_closed(self, pair):
        server_sock, client_sock = pair
        client_sock.close()
        conn = make_conn(server_sock)

        # The first write may still be buffered; a large one must fail
        assert not conn.send(b"x" * (4 * 1024 * 1024))


class TestClose:
    """Tests for closing."""

    def test_close_is_idempotent(self, pair):
        server_sock, client_sock = pair
        client_sock.close()
        conn = make_conn(server_sock)

        conn.close()
        conn.close()

        assert conn.state == ConnectionState.CLOSED

    def test_context_manager_closes(self, pair):
        server_sock, client_sock = pair
        client_sock.close()

        with make_conn(server_sock) as conn:
            pass

        assert conn.state == ConnectionState.CLOSED

    def test_close_bounded_with_trickling_peer(self, pair):
        """Test that a peer sending bytes forever cannot stall close()."""
        server_sock, client_sock = pair
        stop = threading.Event()

        def trickle():
            while not stop.is_set():
                try:
                    client_sock.sendall(b"x")
                except OSError:
                    return
                stop.wait(0.05)

        sender = threading.Thread(target=trickle, daemon=True)
        sender.start()
        try:
            conn = make_conn(server_sock)
            started = time.monotonic()
            conn.close()
            elapsed = time.monotonic() - started
        finally:
            stop.set()
            sender.join(timeout=2.0)

        assert conn.state == ConnectionState.CLOSED
        assert elapsed < DRAIN_TIMEOUT + 1.0

    def test_close_bounded_with_flooding_peer(self, pair):
        """Test that the drain stops after its byte budget."""
        server_sock, client_sock = pair
        client_sock.setblocking(False)
        try:
            while True:
                client_sock.send(b"x" * 65536)
        except BlockingIOError:
            pass  # Peer buffers are full

        conn = make_conn(server_sock)
        conn.close()

        assert conn.state == ConnectionState.CLOSED
