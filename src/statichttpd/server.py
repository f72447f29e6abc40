"""
=============================================================================
STATIC FILE SERVER
=============================================================================

The orchestrator: ties the socket server to the request pipeline.

=============================================================================
ARCHITECTURE OVERVIEW
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                    STATIC SERVER ARCHITECTURE                       │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │                        ┌─────────────────┐                          │
    │                        │  StaticServer   │                          │
    │                        │  (Orchestrator) │                          │
    │                        └────────┬────────┘                          │
    │                                 │                                    │
    │            ┌────────────────────┼────────────────────┐              │
    │            │                    │                    │              │
    │            ▼                    ▼                    ▼              │
    │    ┌──────────────┐    ┌──────────────┐    ┌──────────────────┐    │
    │    │ SocketServer │    │RequestParser │    │StaticFileHandler │    │
    │    │ (Networking) │    │ (Validation) │    │   (Decisions)    │    │
    │    └──────┬───────┘    └──────────────┘    └──────────────────┘    │
    │           │                                                         │
    │           ▼                                                         │
    │    ┌──────────────┐    ┌──────────────┐                            │
    │    │  Connection  │◄───│ResponseWriter│                            │
    │    │   (TCP I/O)  │    │   (Wire)     │                            │
    │    └──────────────┘    └──────────────┘                            │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
REQUEST LIFECYCLE
=============================================================================

    1. CLIENT CONNECTS
       └── SocketServer accepts, wraps the socket in a Connection

    2. SCAN
       └── Request line + If-Modified-Since, reading up to the blank line
       └── Nothing at all? Close without a response

    3. PARSE
       └── Method, path, conditional date → HTTPRequest or 400/501

    4. DECIDE
       └── Stat the file → 200 / 304 / 404

    5. WRITE
       └── Header block, then file bytes or canned error body

    6. CLOSE
       └── Always. One request per connection.

A failure in any step only ends that one connection. The server keeps
accepting.

=============================================================================
"""

import logging
from datetime import datetime
from typing import Callable, Optional, Tuple

from .config import ServerConfig
from .core import SocketServer, Connection, ConnectionState, RequestTooLargeError
from .handlers import StaticFileHandler
from .http import RequestParser, ResponseWriter, scan_request
from .http.dates import now_local


logger = logging.getLogger(__name__)


class StaticServer:
    """
    HTTP/1.1 static file server.

    =========================================================================
    USAGE
    =========================================================================

        config = ServerConfig(port=8080, document_root="/srv/www")
        server = StaticServer(config)
        server.run()  # Blocks until Ctrl+C / SIGTERM

    From a test or another thread:

        server = StaticServer(ServerConfig(port=0, document_root=root))
        thread = threading.Thread(target=server.run, daemon=True)
        thread.start()
        server.wait_until_ready(5.0)
        host, port = server.address
        ...
        server.shutdown()

    =========================================================================
    """

    def __init__(
        self,
        config: Optional[ServerConfig] = None,
        clock: Callable[[], datetime] = now_local,
    ):
        """
        Initialize the server.

        Args:
            config: Server configuration. Defaults are used if not provided.
            clock: Source of the Date header value.

        Raises:
            ValueError: If the configuration is invalid.
        """
        self.config = config or ServerConfig()
        self.config.validate()  # Fail-fast on invalid config

        self._socket_server = SocketServer(self.config)
        self._parser = RequestParser(self.config.document_root)
        self._handler = StaticFileHandler(self.config, clock=clock)

        self._running = False

    @property
    def address(self) -> Tuple[str, int]:
        """Bound (host, port); the real port once listening with port=0."""
        return self._socket_server.address

    @property
    def is_running(self) -> bool:
        return self._running

    # =========================================================================
    # SERVER LIFECYCLE
    # =========================================================================

    def run(self):
        """
        Start the server (blocking).

        Raises:
            OSError: If the port cannot be bound.
        """
        self._setup_logging()
        self._running = True

        try:
            self._socket_server.start(self.handle_connection, on_started=self._log_started)
        except KeyboardInterrupt:
            logger.info("Received keyboard interrupt")
        finally:
            self._running = False
            logger.info("Server stopped")

    def _log_started(self, address: Tuple[str, int]):
        logger.info(f"{self.config.server_name} started on port {address[1]}")
        logger.info(f"Serving files from {self.config.document_root}")

    def shutdown(self):
        """Stop accepting connections. The accept loop exits within a second."""
        self._socket_server.shutdown()

    def wait_until_ready(self, timeout: Optional[float] = None) -> bool:
        """Block until the listening socket is up (or timeout)."""
        return self._socket_server.wait_until_ready(timeout)

    def _setup_logging(self):
        """Configure logging based on config."""
        level = getattr(logging, self.config.log_level.upper(), logging.INFO)

        logging.basicConfig(
            level=level,
            format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )

        logging.getLogger("statichttpd").setLevel(level)

    # =========================================================================
    # REQUEST HANDLING
    # =========================================================================

    def handle_connection(self, conn: Connection):
        """
        Serve exactly one request on a connection, then close it.

        Called by SocketServer for each accepted client, on the accept
        loop's own thread.

        ┌───────────────────────────────────────────────────────────────┐
        │  read/scan ──► parse ──► decide ──► write ──► close           │
        │      │                                          ▲             │
        │      └── empty / timeout / too large ───────────┘             │
        └───────────────────────────────────────────────────────────────┘
        """
        with conn:  # Context manager ensures connection is closed
            try:
                # ─────────────────────────────────────────────────────────
                # SCAN
                # ─────────────────────────────────────────────────────────
                try:
                    scanned = scan_request(
                        conn.read_lines(),
                        case_sensitive=not self.config.case_insensitive_headers,
                    )
                except TimeoutError:
                    logger.warning(f"[{conn.id}] Read timeout from {conn.client_ip}, dropping")
                    return
                except RequestTooLargeError as e:
                    logger.warning(f"[{conn.id}] {e}, dropping")
                    return

                if scanned is None:
                    logger.debug(f"[{conn.id}] Empty request from {conn.client_ip}")
                    return

                # ─────────────────────────────────────────────────────────
                # PARSE + DECIDE
                # ─────────────────────────────────────────────────────────
                conn.state = ConnectionState.PROCESSING
                outcome = self._handler.handle(self._parser.parse(scanned))

                # ─────────────────────────────────────────────────────────
                # WRITE
                # ─────────────────────────────────────────────────────────
                if not ResponseWriter(conn).write(outcome):
                    logger.warning(f"[{conn.id}] Response to {conn.client_ip} incomplete")

            except Exception as e:
                logger.exception(f"[{conn.id}] Connection error: {e}")


def create_server(config: Optional[ServerConfig] = None) -> StaticServer:
    """
    Factory function for creating server instances.

    Example:
        create_server(ServerConfig(port=3000, document_root="public")).run()
    """
    return StaticServer(config)


# =============================================================================
# MODULE SUMMARY
# =============================================================================
#
# This module orchestrates:
#
# 1. Component Initialization: config, socket server, parser, handler
# 2. Request Flow: Accept → Scan → Parse → Decide → Write → Close
# 3. Lifecycle: Startup logging, shutdown via signal or shutdown()
#
# KEY DESIGN DECISIONS:
# - One connection at a time on the accept thread
# - Parse failures travel as Outcomes, never as exceptions
# - Any exception ends only the connection that raised it
# =============================================================================
