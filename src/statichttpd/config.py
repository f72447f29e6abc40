"""
=============================================================================
SERVER CONFIGURATION
=============================================================================

Centralized configuration for the static file server.

=============================================================================
WHERE VALUES COME FROM
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                    CONFIGURATION SOURCES                            │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   1. Command line (two positional arguments only)                   │
    │      └── python -m statichttpd 8080 /srv/www                        │
    │          sets: port, document_root                                  │
    │                                                                      │
    │   2. Code (embedding, tests)                                        │
    │      └── ServerConfig(port=0, document_root=str(tmp_path))          │
    │                                                                      │
    │   3. Default values (in this dataclass)                             │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

There are deliberately no environment variables or config files.

The config is read-only once the server starts. It is the ONLY state
shared between connections.

=============================================================================
"""

import logging
from dataclasses import dataclass
from typing import Optional


@dataclass
class ServerConfig:
    """
    Configuration for the static file server.

    =========================================================================
    CONFIGURATION GROUPS
    =========================================================================

    NETWORK SETTINGS
    - host, port, backlog, buffer_size, read_timeout

    HTTP SETTINGS
    - document_root, max_request_size, case_insensitive_headers

    IDENTITY & LOGGING
    - server_name, log_level

    =========================================================================
    """

    # ─────────────────────────────────────────────────────────────────────
    # NETWORK SETTINGS
    # ─────────────────────────────────────────────────────────────────────

    host: str = "0.0.0.0"
    """
    The IP address to bind to.
    - "0.0.0.0" - All network interfaces (default)
    - "127.0.0.1" - Localhost only
    """

    port: int = 8080
    """
    The port number to listen on. 0 asks the OS for a free port.
    """

    backlog: int = 50
    """
    Maximum number of queued connections.
    Connections wait here while the single loop services another client.
    """

    buffer_size: int = 8192
    """
    Size of each recv() in bytes.
    """

    read_timeout: Optional[float] = None
    """
    Timeout for reading a client's request, in seconds.
    None = no timeout: a silent client stalls the whole server until it
    sends something or disconnects. Set a value to drop slow clients.
    """

    # ─────────────────────────────────────────────────────────────────────
    # HTTP SETTINGS
    # ─────────────────────────────────────────────────────────────────────

    document_root: str = "."
    """
    Filesystem prefix prepended to every request path.
    Used textually: "/srv" + "/about" → "/srv/about".
    """

    max_request_size: int = 1024 * 1024  # 1 MB
    """
    Maximum number of bytes read for one request's header section.
    Larger requests are dropped without a response.
    """

    case_insensitive_headers: bool = False
    """
    Match If-Modified-Since regardless of case.
    Off by default: only the exact spelling "If-Modified-Since" counts.
    """

    # ─────────────────────────────────────────────────────────────────────
    # IDENTITY & LOGGING
    # ─────────────────────────────────────────────────────────────────────

    server_name: str = "StaticHTTPd/1.0"
    """
    Value of the Server header on 200 and 404 responses.
    """

    log_level: str = "INFO"
    """
    Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
    DEBUG also logs every header block sent.
    """

    def validate(self) -> None:
        """
        Validate configuration values.

        Called by StaticServer at construction, so mistakes surface at
        startup rather than on the first request.

        Raises:
            ValueError: If a value is out of range.
        """
        if not 0 <= self.port < 65536:
            raise ValueError(f"Invalid port: {self.port}. Must be 0-65535.")

        if self.backlog < 1:
            raise ValueError("backlog must be >= 1")

        if self.buffer_size < 1024:
            raise ValueError("buffer_size must be >= 1024")

        if self.read_timeout is not None and self.read_timeout <= 0:
            raise ValueError("read_timeout must be > 0")

        if self.max_request_size < self.buffer_size:
            raise ValueError("max_request_size must be >= buffer_size")

        if not self.server_name or any(c in self.server_name for c in "\r\n"):
            raise ValueError("server_name must be a non-empty single line")

        if not isinstance(logging.getLevelName(self.log_level.upper()), int):
            raise ValueError(f"Unknown log_level: {self.log_level}")
