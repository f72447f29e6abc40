"""
pytest configuration and fixtures.
"""

import os
import socket
import threading
from datetime import datetime, timezone
from typing import Generator
import pytest

# Add src to path for imports
import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from statichttpd import StaticServer, ServerConfig


# Fixed instant used for file mtimes and the fake clock:
# Tue Jan 2 15:04:05 UTC 2024
FIXED_NOW = datetime(2024, 1, 2, 15, 4, 5, tzinfo=timezone.utc)
FILE_MTIME = datetime(2023, 6, 15, 12, 0, 0, tzinfo=timezone.utc)

INDEX_HTML = b"<html><body>home</body></html>\n"
ABOUT_HTML = b"<html><body>about us</body></html>\n"
APP_JS = b"console.log('hi');\n"


@pytest.fixture
def fixed_clock():
    """Clock that always returns FIXED_NOW."""
    return lambda: FIXED_NOW


@pytest.fixture
def docroot(tmp_path: Path) -> Path:
    """
    Document root with a small site:

        index.html
        about/index.html
        app.js
        empty.txt
        docs/        (directory, no index)
    """
    root = tmp_path / "www"
    (root / "about").mkdir(parents=True)
    (root / "docs").mkdir()

    files = {
        root / "index.html": INDEX_HTML,
        root / "about" / "index.html": ABOUT_HTML,
        root / "app.js": APP_JS,
        root / "empty.txt": b"",
    }
    for path, content in files.items():
        path.write_bytes(content)
        os.utime(path, (FILE_MTIME.timestamp(), FILE_MTIME.timestamp()))

    return root


@pytest.fixture
def config(docroot: Path) -> ServerConfig:
    """Default test server configuration."""
    return ServerConfig(
        host="127.0.0.1",
        port=0,  # Let OS pick a free port
        document_root=str(docroot),
        read_timeout=5.0,
        log_level="WARNING",
    )


@pytest.fixture
def free_port() -> int:
    """Get a free port for testing."""
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
        s.bind(('127.0.0.1', 0))
        return s.getsockname()[1]


class TestServer:
    """Test server helper that runs in a background thread."""

    __test__ = False  # Not a test class

    def __init__(self, server: StaticServer):
        self.server = server
        self._thread: threading.Thread = None

    @property
    def port(self) -> int:
        return self.server.address[1]

    def start(self):
        """Start server in background thread."""
        self._thread = threading.Thread(target=self.server.run, daemon=True)
        self._thread.start()

        if not self.server.wait_until_ready(5.0):
            raise RuntimeError("Server failed to start")

    def stop(self):
        """Stop the server."""
        self.server.shutdown()

        if self._thread and self._thread.is_alive():
            self._thread.join(timeout=5.0)

    def request(self, raw: bytes) -> bytes:
        """Send raw request bytes, return everything until the server closes."""
        with socket.create_connection(("127.0.0.1", self.port), timeout=5.0) as s:
            s.sendall(raw)
            s.shutdown(socket.SHUT_WR)
            return recv_all(s)


def recv_all(sock: socket.socket) -> bytes:
    chunks = []
    while True:
        chunk = sock.recv(65536)
        if not chunk:
            break
        chunks.append(chunk)
    return b"".join(chunks)


@pytest.fixture
def test_server(config: ServerConfig, fixed_clock) -> Generator[TestServer, None, None]:
    """Running server bound to an ephemeral port, serving docroot."""
    test_srv = TestServer(StaticServer(config, clock=fixed_clock))
    test_srv.start()

    yield test_srv

    test_srv.stop()
