"""
=============================================================================
LOW-LEVEL TCP SOCKET SERVER
=============================================================================

Owns the listening socket and the accept loop. Every accepted client is
handed to a callback, and the loop waits for that callback to return
before it accepts the next client.

=============================================================================
SOCKET LIFECYCLE (Server Side)
=============================================================================

    1. socket()    Create a socket file descriptor

    2. bind()      Associate the socket with an IP:PORT
                   └─ Port 0 lets the OS pick a free port

    3. listen()    Mark socket as a "listening" socket
                   └─ backlog = max queue size before refusing

    4. accept()    Wait for and accept an incoming connection
                   └─ Returns a NEW socket just for that client

    5. close()     Release the socket resources

=============================================================================
ONE CLIENT AT A TIME
=============================================================================

    time ──────────────────────────────────────────────────────────────►

    accept(A) ─► handle(A) ─► close(A) ─► accept(B) ─► handle(B) ─► ...
                    │
                    └── client B waits in the listen backlog meanwhile

No threads, no queue of workers. A client that connects and never sends
anything blocks everyone behind it unless read_timeout is configured.

=============================================================================
SOCKET OPTIONS
=============================================================================

SO_REUSEADDR:
    Allows rebinding the port right after a restart instead of failing
    with "Address already in use" while old sockets sit in TIME_WAIT.

TCP_NODELAY:
    Disables Nagle's algorithm so the header block goes out immediately
    instead of waiting to be coalesced with the body.

=============================================================================
SIGNAL HANDLING FOR GRACEFUL SHUTDOWN
=============================================================================

SIGINT (2):   Sent when user presses Ctrl+C
SIGTERM (15): Sent by docker stop, systemd stop, kill command

Both flip the running flag. The accept() timeout of one second means the
loop notices within a second. Handlers can only be installed from the
main thread, so a server started in a background thread (tests,
embedding) skips them and relies on shutdown() being called.

=============================================================================
"""

import socket
import signal
import logging
import threading
from typing import Optional, Callable, Tuple

from ..config import ServerConfig
from .connection import Connection


logger = logging.getLogger(__name__)


class SocketServer:
    """
    Low-level TCP socket server.

    ┌─────────────────────────────────────────────────────────────────────┐
    │                      SocketServer Internals                          │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │    start(handler)                                                    │
    │        │                                                             │
    │        ├──► _create_socket()   socket() + SO_REUSEADDR, TCP_NODELAY │
    │        ├──► bind()             Bind to IP:PORT                       │
    │        ├──► listen()           Start accepting queue                 │
    │        ├──► _setup_signals()   SIGTERM/SIGINT (main thread only)    │
    │        │                                                             │
    │        └──► _accept_loop()     Blocks here                           │
    │                 │                                                    │
    │                 └──► while running:                                  │
    │                         accept()      Wait for connection            │
    │                         Connection()  Wrap client socket             │
    │                         handler(conn) Runs to completion             │
    │                                                                      │
    │    shutdown()        running = False                                 │
    │    _cleanup()        Restore signal handlers, close socket           │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

    Usage:
        def handle_connection(conn: Connection):
            with conn:
                ...

        server = SocketServer(config)
        server.start(handle_connection)  # Blocks until shutdown
    """

    def __init__(self, config: ServerConfig):
        """
        Initialize the socket server.

        Args:
            config: Server configuration containing host, port, backlog, etc.

        Note: This does NOT create the socket. That happens in start().
        """
        self.config = config

        self._socket: Optional[socket.socket] = None
        self._bound_address: Optional[Tuple[str, int]] = None
        self._running = False

        # Set once the socket is listening; tests wait on it
        self._ready_event = threading.Event()
        self._shutdown_event = threading.Event()

        # Original signal handlers, restored in _cleanup()
        self._original_handlers: dict = {}

    @property
    def is_running(self) -> bool:
        return self._running

    @property
    def address(self) -> Tuple[str, int]:
        """
        The address actually bound.

        Differs from the configured one when port 0 was requested.
        """
        if self._bound_address is not None:
            return self._bound_address
        return (self.config.host, self.config.port)

    def _create_socket(self) -> socket.socket:
        """Create and configure the listening socket."""
        sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)

        sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        sock.setsockopt(socket.IPPROTO_TCP, socket.TCP_NODELAY, 1)

        # accept() wakes up every second to check the running flag:
        #   while running:
        #       try:
        #           accept()  # Blocks for 1 second max
        #       except timeout:
        #           continue
        sock.settimeout(1.0)

        return sock

    def _setup_signals(self):
        """
        Install SIGTERM/SIGINT handlers that trigger shutdown().

        Python only allows this from the main thread.
        """
        if threading.current_thread() is not threading.main_thread():
            logger.debug("Not in main thread, skipping signal handlers")
            return

        def shutdown_handler(signum, frame):
            signal_name = signal.Signals(signum).name
            logger.info(f"Received {signal_name}, initiating shutdown...")
            self.shutdown()

        self._original_handlers[signal.SIGTERM] = signal.signal(signal.SIGTERM, shutdown_handler)
        self._original_handlers[signal.SIGINT] = signal.signal(signal.SIGINT, shutdown_handler)

    def _restore_signals(self):
        """Restore original signal handlers."""
        for sig, handler in self._original_handlers.items():
            signal.signal(sig, handler)
        self._original_handlers.clear()

    def start(
        self,
        connection_handler: Callable[[Connection], None],
        on_started: Optional[Callable[[Tuple[str, int]], None]] = None,
    ):
        """
        Bind, listen and run the accept loop.

        This method BLOCKS until shutdown() is called.

        Args:
            connection_handler: Called with each accepted Connection. It
                                runs to completion before the next accept.
            on_started: Called once with the bound (host, port), after
                        listen() and before the accept loop starts.

        Raises:
            OSError: If the address cannot be bound.
        """
        self._socket = self._create_socket()

        try:
            self._socket.bind((self.config.host, self.config.port))
            self._socket.listen(self.config.backlog)
        except OSError as e:
            logger.error(f"Failed to bind to {self.config.host}:{self.config.port}: {e}")
            self._socket.close()
            self._socket = None
            raise

        self._bound_address = self._socket.getsockname()[:2]
        self._running = True
        self._shutdown_event.clear()

        self._setup_signals()

        logger.info(f"Server listening on {self.address[0]}:{self.address[1]}")
        if on_started is not None:
            on_started(self.address)
        self._ready_event.set()

        try:
            self._accept_loop(connection_handler)
        finally:
            self._cleanup()

    def _accept_loop(self, connection_handler: Callable[[Connection], None]):
        """
        Accept clients one at a time until shutdown.

        An exception escaping the handler is logged and the loop carries
        on with the next client.
        """
        while self._running:
            try:
                client_socket, client_address = self._socket.accept()
            except socket.timeout:
                # Normal: re-check the running flag
                continue
            except OSError as e:
                # Socket error - usually means we're shutting down
                if self._running:
                    logger.error(f"Accept error: {e}")
                break

            logger.debug(f"Accepted connection from {client_address[0]}:{client_address[1]}")

            conn = Connection(
                socket=client_socket,
                address=client_address,
                buffer_size=self.config.buffer_size,
                timeout=self.config.read_timeout,
                max_request_size=self.config.max_request_size,
            )

            try:
                connection_handler(conn)
            except Exception:
                logger.exception(f"[{conn.id}] Unhandled error while serving {conn.client_ip}")
                conn.close()

    def shutdown(self):
        """
        Stop the accept loop.

        Safe to call from a signal handler, another thread, or more than
        once.
        """
        logger.info("Shutting down socket server...")
        self._running = False
        self._shutdown_event.set()

    def _cleanup(self):
        """Clean up resources on shutdown."""
        self._restore_signals()

        if self._socket:
            try:
                self._socket.close()
            except OSError:
                pass  # Already closed
            self._socket = None

        self._running = False
        self._ready_event.clear()
        logger.info("Socket server stopped")

    def wait_until_ready(self, timeout: Optional[float] = None) -> bool:
        """
        Wait until the socket is listening.

        Returns:
            True once ready, False on timeout.
        """
        return self._ready_event.wait(timeout)

    def wait_for_shutdown(self, timeout: Optional[float] = None) -> bool:
        """
        Wait for shutdown() to be called.

        Returns:
            True if shutdown was requested, False if timeout.
        """
        return self._shutdown_event.wait(timeout)
