"""
=============================================================================
HANDLERS MODULE
=============================================================================

Turns a validated request into an Outcome by looking at the filesystem.

    ┌─────────────────────────────────────────────────────────────────────┐
    │                    REQUEST → HANDLER → OUTCOME                      │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │    HTTPRequest          resolver.py            static.py            │
    │   ┌─────────┐         ┌────────────┐         ┌───────────┐          │
    │   │ GET     │ ──────▶ │ os.stat()  │ ──────▶ │ 200 / 304 │          │
    │   │ /srv/.. │         │ metadata   │         │ / 404     │          │
    │   └─────────┘         └────────────┘         └───────────┘          │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
"""

from .resolver import ResourceMetadata, MISSING, resolve_resource
from .static import StaticFileHandler

__all__ = [
    "ResourceMetadata",
    "MISSING",
    "resolve_resource",
    "StaticFileHandler",
]
