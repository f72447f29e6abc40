"""
=============================================================================
CORE SERVER COMPONENTS
=============================================================================

The low-level networking plumbing. Nothing in here knows about HTTP
beyond "a request is a sequence of lines".

    ┌─────────────────────────────────────────────────────────────────────┐
    │                         SOCKET SERVER                                │
    │  ─────────────────────────────────────────────────────────────────  │
    │  • Creates the TCP listening socket, binds, listens                 │
    │  • Runs the accept() loop; one client at a time                     │
    │  • Handles graceful shutdown via signals (SIGTERM, SIGINT)         │
    └─────────────────────────────────────────────────────────────────────┘
                                    │
                                    │ Hands each client to the server
                                    ▼
    ┌─────────────────────────────────────────────────────────────────────┐
    │                          CONNECTION                                  │
    │  ─────────────────────────────────────────────────────────────────  │
    │  • Buffered line reading (TCP is a stream, not lines!)             │
    │  • sendall() for header blocks, sendfile() for bodies              │
    │  • Graceful close, usable as a context manager                     │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
"""

from .socket_server import SocketServer
from .connection import Connection, ConnectionState, RequestTooLargeError

__all__ = [
    "SocketServer",          # TCP server - accepts connections
    "Connection",            # Wrapper for client socket - handles I/O
    "ConnectionState",       # Enum for connection lifecycle states
    "RequestTooLargeError",  # Header section exceeded max_request_size
]
