"""
=============================================================================
STATICHTTPD - Minimal Static File HTTP/1.1 Server
=============================================================================

Serves files from a document root over raw Python sockets. One request
per connection, one connection at a time, HEAD and GET only.

=============================================================================
PROJECT OVERVIEW
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                     WHAT A CLIENT CAN GET BACK                      │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   200 OK               file exists (GET also streams it)            │
    │   304 Not Modified     If-Modified-Since is after the file's mtime  │
    │   400 Bad Request      If-Modified-Since unparseable, or no path    │
    │   404 Not Found        nothing readable at the resolved path        │
    │   501 Not Implemented  any method other than HEAD / GET             │
    │                                                                      │
    │   (or nothing at all, if the client closes before sending a line)   │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
PACKAGE STRUCTURE
=============================================================================

    statichttpd/
    ├── __init__.py          # This file - package exports
    ├── __main__.py          # CLI entry point (python -m statichttpd)
    ├── server.py            # StaticServer orchestrator
    ├── config.py            # ServerConfig dataclass
    ├── core/                # Low-level networking
    │   ├── socket_server.py # Listening socket + accept loop
    │   └── connection.py    # Line reading, sending, file streaming
    ├── http/                # Protocol pieces
    │   ├── scanner.py       # Request line + If-Modified-Since capture
    │   ├── request.py       # Validation and path resolution
    │   ├── dates.py         # "Tue Jan 2 15:04:05 GMT 2024" format
    │   ├── response.py      # Outcomes, builder, canned error bodies
    │   ├── status_codes.py  # The five supported statuses
    │   └── writer.py        # Outcome → bytes on the socket
    └── handlers/
        ├── resolver.py      # stat() → ResourceMetadata
        └── static.py        # 200 / 304 / 404 decisions

=============================================================================
QUICK START
=============================================================================

    from statichttpd import StaticServer, ServerConfig

    StaticServer(ServerConfig(port=8080, document_root="./public")).run()

=============================================================================
"""

__version__ = "1.0.0"

from .server import StaticServer, create_server
from .config import ServerConfig

__all__ = ["StaticServer", "ServerConfig", "create_server", "__version__"]
