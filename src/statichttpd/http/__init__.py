"""
=============================================================================
HTTP PROTOCOL IMPLEMENTATION
=============================================================================

The small slice of HTTP/1.1 a static file server needs.

=============================================================================
MODULE COMPONENTS
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │ SCANNER (scanner.py)                                                │
    │ Lines in → request line + raw If-Modified-Since value out           │
    ├─────────────────────────────────────────────────────────────────────┤
    │ REQUEST PARSER (request.py)                                         │
    │ ScannedRequest → HTTPRequest, or a 400/501 Outcome                  │
    ├─────────────────────────────────────────────────────────────────────┤
    │ DATES (dates.py)                                                    │
    │ "EEE MMM d HH:mm:ss zzz yyyy" formatting and strict parsing         │
    ├─────────────────────────────────────────────────────────────────────┤
    │ RESPONSE (response.py)                                              │
    │ Outcome + ResponseBuilder + one function per response template      │
    ├─────────────────────────────────────────────────────────────────────┤
    │ STATUS CODES (status_codes.py)                                      │
    │ 200, 304, 400, 404, 501 with reason phrases                         │
    ├─────────────────────────────────────────────────────────────────────┤
    │ WRITER (writer.py)                                                  │
    │ Outcome → header block + file bytes or canned error body            │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
HTTP MESSAGE FORMAT (RFC 7230)
=============================================================================

    REQUEST:                          RESPONSE:
    ─────────                         ──────────
    GET /path HTTP/1.1\\r\\n            HTTP/1.1 200 OK\\r\\n
    Header: Value\\r\\n                 Header: Value\\r\\n
    \\r\\n                              \\r\\n
                                      [body]

=============================================================================
"""

from .scanner import ScannedRequest, scan_request, IF_MODIFIED_SINCE
from .request import HTTPRequest, Method, RequestParser, ParseResult, parse_request
from .response import (
    Outcome,
    ResponseBuilder,
    error_body,
    # One function per response template
    ok,               # 200 OK
    not_modified,     # 304 Not Modified
    bad_request,      # 400 Bad Request
    not_found,        # 404 Not Found
    not_implemented,  # 501 Not Implemented
)
from .status_codes import HTTPStatus
from .dates import format_http_date, parse_http_date
from .writer import ResponseWriter

__all__ = [
    # Scanning
    "ScannedRequest",
    "scan_request",
    "IF_MODIFIED_SINCE",

    # Request parsing
    "HTTPRequest",
    "Method",
    "RequestParser",
    "ParseResult",
    "parse_request",

    # Outcomes
    "Outcome",
    "ResponseBuilder",
    "error_body",
    "ok",
    "not_modified",
    "bad_request",
    "not_found",
    "not_implemented",

    # Status codes
    "HTTPStatus",

    # Dates
    "format_http_date",
    "parse_http_date",

    # Writing
    "ResponseWriter",
]
