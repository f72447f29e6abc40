"""
=============================================================================
CONNECTION MANAGEMENT
=============================================================================

Wraps one accepted client socket with the three operations the server
needs: read request lines, send bytes, stream a file.

=============================================================================
TCP IS A BYTE STREAM, NOT A LINE PROTOCOL!
=============================================================================

recv() returns whatever bytes have arrived, with no regard for line
boundaries:

    Client sends:   "GET /about HTTP/1.1\r\nHost: x\r\n\r\n"

    Server might receive:
        recv() → "GET /ab"
        recv() → "out HTTP/1.1\r\nHo"
        recv() → "st: x\r\n\r\n"

So we keep a buffer and only hand out a line once its "\n" has arrived.
Bytes after the line stay buffered for the next read_line() call.

    _buffer: "out HTTP/1.1\r\nHo"
                           ▲
                           └── split here: "out HTTP/1.1" is complete
                                           "Ho" waits for more data

=============================================================================
ONE REQUEST PER CONNECTION
=============================================================================

    NEW ──► READING ──► PROCESSING ──► WRITING ──► CLOSING ──► CLOSED
             │                                        ▲
             └── empty / timed out / too large ───────┘

There is no keep-alive: every connection is closed after one response
(or after nothing at all, if the client never sent a line).

=============================================================================
"""

import socket
import time
import logging
from enum import Enum
from dataclasses import dataclass, field
from typing import Iterator, Optional
import uuid


logger = logging.getLogger(__name__)

# Upper bounds for discarding client bytes while closing
DRAIN_TIMEOUT = 0.5       # seconds, total
DRAIN_LIMIT = 64 * 1024   # bytes, total


class ConnectionState(Enum):
    """Connection lifecycle states (used for logging and close())."""
    NEW = "new"                # Just accepted, nothing read yet
    READING = "reading"        # Reading request lines
    PROCESSING = "processing"  # Request scanned, deciding the outcome
    WRITING = "writing"        # Sending headers / file / error body
    CLOSING = "closing"        # Shutdown sequence in progress
    CLOSED = "closed"          # Socket released


class RequestTooLargeError(ValueError):
    """The client sent more header bytes than max_request_size allows."""


@dataclass
class Connection:
    """
    Represents a client connection.

    Attributes:
        socket: The client socket.
        address: Client's (ip, port) tuple.
        id: Short connection identifier (for logging).
        state: Current connection state.
        created_at: Timestamp when connection was accepted.
        bytes_read: Bytes received so far.
    """

    # Required parameters
    socket: socket.socket
    address: tuple

    # Generated/default parameters
    id: str = field(default_factory=lambda: str(uuid.uuid4())[:8])
    state: ConnectionState = ConnectionState.NEW
    created_at: float = field(default_factory=time.time)
    bytes_read: int = 0

    # Configuration (passed from ServerConfig)
    buffer_size: int = 8192                 # How much to read at once
    timeout: Optional[float] = None         # None = block forever
    max_request_size: int = 1024 * 1024     # Cap on header bytes

    # Internal state (not shown in repr for cleaner logs)
    _buffer: bytes = field(default=b"", repr=False)
    _eof: bool = field(default=False, repr=False)

    def __post_init__(self):
        """Configure socket after initialization."""
        self.socket.setblocking(True)
        self.socket.settimeout(self.timeout)

    @property
    def client_ip(self) -> str:
        return self.address[0]

    @property
    def age(self) -> float:
        """Get connection age in seconds."""
        return time.time() - self.created_at

    # =========================================================================
    # READING
    # =========================================================================

    def read_line(self) -> Optional[str]:
        """
        Read one line from the client.

        The terminator ("\\n" or "\\r\\n") is removed. Bytes are decoded as
        ISO-8859-1, so any byte sequence decodes without error.

        Returns:
            The line, or None once the stream is exhausted.

        Raises:
            TimeoutError: If the read timeout expires.
            RequestTooLargeError: If the client sent too many bytes.
        """
        self.state = ConnectionState.READING

        while True:
            newline = self._buffer.find(b"\n")
            if newline != -1:
                raw = self._buffer[:newline]
                self._buffer = self._buffer[newline + 1:]
                return self._decode(raw)

            if self._eof:
                if self._buffer:
                    # Last line without terminator
                    raw, self._buffer = self._buffer, b""
                    return self._decode(raw)
                return None

            chunk = self._recv()
            if not chunk:
                self._eof = True
                continue

            self.bytes_read += len(chunk)
            if self.bytes_read > self.max_request_size:
                raise RequestTooLargeError(f"Request too large: {self.bytes_read} bytes")

            self._buffer += chunk

    def read_lines(self) -> Iterator[str]:
        """Yield lines until the stream ends (the caller decides when to stop)."""
        while True:
            line = self.read_line()
            if line is None:
                return
            yield line

    def _recv(self) -> bytes:
        """
        Receive data from socket with error handling.

        Returns:
            Received bytes, or empty bytes if connection closed.
        """
        try:
            return self.socket.recv(self.buffer_size)
        except socket.timeout:
            raise TimeoutError("Request read timeout")
        except (ConnectionResetError, BrokenPipeError):
            # Client disconnected abruptly
            return b""

    @staticmethod
    def _decode(raw: bytes) -> str:
        if raw.endswith(b"\r"):
            raw = raw[:-1]
        return raw.decode("iso-8859-1")

    # =========================================================================
    # WRITING
    # =========================================================================

    def send(self, data: bytes) -> bool:
        """
        Send bytes to the client.

        Uses sendall() so partial sends are retried until everything is out.

        Returns:
            True if send succeeded, False if connection lost.
        """
        self.state = ConnectionState.WRITING

        try:
            self.socket.sendall(data)
            return True
        except OSError as e:
            logger.warning(f"[{self.id}] Send failed: {e}")
            return False

    def send_file(self, path: str, count: int) -> bool:
        """
        Stream up to count bytes of the file at path.

        socket.sendfile() uses the zero-copy os.sendfile() where the
        platform supports it and falls back to read/send loops otherwise.

        Returns:
            True if the whole file went out, False otherwise.
        """
        self.state = ConnectionState.WRITING

        try:
            with open(path, "rb") as f:
                sent = self.socket.sendfile(f, 0, count) if count else 0
        except OSError as e:
            logger.warning(f"[{self.id}] Streaming {path} failed: {e}")
            return False

        if sent < count:
            # File shrank between stat() and open()
            logger.warning(f"[{self.id}] Short body for {path}: {sent}/{count} bytes")
            return False
        return True

    # =========================================================================
    # CLOSING
    # =========================================================================

    def close(self):
        """
        Close the connection gracefully.

        1. shutdown(SHUT_WR): send FIN so the client sees end-of-response
        2. Drain anything the client still sends, for at most
           DRAIN_TIMEOUT seconds and DRAIN_LIMIT bytes in total
        3. close(): release the file descriptor
        """
        if self.state == ConnectionState.CLOSED:
            return  # Already closed

        self.state = ConnectionState.CLOSING

        try:
            self.socket.shutdown(socket.SHUT_WR)
        except OSError:
            pass  # Already disconnected

        try:
            self._drain()
        except OSError:
            pass  # Timed out or reset; closing anyway

        try:
            self.socket.close()
        except OSError:
            pass

        self.state = ConnectionState.CLOSED
        logger.debug(f"[{self.id}] Connection closed after {self.age:.3f}s")

    def _drain(self):
        """
        Discard late client bytes before close().

        Both budgets cover the whole loop, not each recv(), so a client that
        keeps trickling data is cut off after DRAIN_TIMEOUT seconds.
        """
        deadline = time.monotonic() + DRAIN_TIMEOUT
        drained = 0

        while drained < DRAIN_LIMIT:
            remaining = deadline - time.monotonic()
            if remaining <= 0:
                break
            self.socket.settimeout(remaining)
            chunk = self.socket.recv(4096)
            if not chunk:
                break
            drained += len(chunk)

    def __enter__(self):
        """
        Context manager entry.

            with conn:
                line = conn.read_line()
                conn.send(data)
            # Connection automatically closed here
        """
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False  # Don't suppress exceptions
