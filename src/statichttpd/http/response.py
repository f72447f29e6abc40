"""
=============================================================================
RESPONSE OUTCOMES
=============================================================================

Every request ends in exactly one Outcome: a status, an ordered list of
headers, and a note on what (if anything) follows the header block.

=============================================================================
OUTCOME ANATOMY
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                          OUTCOME → WIRE                             │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │  HTTP/1.1 404 Not Found\r\n             ◄── status_line              │
    │  Date: Tue Jan 2 15:04:05 GMT 2024\r\n  ◄── headers, in order        │
    │  Server: StaticHTTPd/1.0\r\n                                         │
    │  Content-Length: 69\r\n                                              │
    │  \r\n                                   ◄── end of header block      │
    │  <!DOCTYPE html>...404 Not Found...\r\n ◄── error_body (errors only) │
    │                                                                      │
    │  For GET 200, body_file names the file whose bytes follow instead.   │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

Header ORDER matters here: the five response templates are fixed, so
headers are kept as an ordered tuple rather than a dict that callers
could reorder.

=============================================================================
CANNED ERROR BODIES
=============================================================================

Error outcomes carry a tiny HTML page. Content-Length for those pages is
computed from the bytes below, which gives the well-known values:

    304 → 72    400 → 71    404 → 69    501 → 75

=============================================================================
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Dict, List, Optional, Tuple

from .dates import format_http_date
from .status_codes import HTTPStatus


ERROR_BODY_TEMPLATE = "<!DOCTYPE html><html><head></head><body>{code} {phrase}</body></html>\r\n"


def error_body(status: HTTPStatus) -> bytes:
    """Canned HTML body for a status (empty for 200)."""
    if not status.is_error:
        return b""
    return ERROR_BODY_TEMPLATE.format(code=int(status), phrase=status.phrase).encode("ascii")


# Built once at import; Content-Length values are taken from here
ERROR_BODIES: Dict[HTTPStatus, bytes] = {
    status: error_body(status) for status in HTTPStatus if status.is_error
}


@dataclass(frozen=True)
class Outcome:
    """
    The final decision for one request.

    Attributes:
        status: One of the five supported statuses.
        headers: Ordered (name, value) pairs, serialized as-is.
        body_file: Path of the file to stream after the headers (GET 200).
        version: HTTP version for the status line.
    """

    status: HTTPStatus
    headers: Tuple[Tuple[str, str], ...] = ()
    body_file: Optional[str] = None
    version: str = "HTTP/1.1"

    @property
    def status_line(self) -> str:
        """
        Get the HTTP status line.

        Format: HTTP-VERSION SP STATUS-CODE SP REASON-PHRASE
        Example: "HTTP/1.1 200 OK"
        """
        return f"{self.version} {int(self.status)} {self.status.phrase}"

    @property
    def has_file_body(self) -> bool:
        return self.body_file is not None

    @property
    def error_body(self) -> bytes:
        return ERROR_BODIES.get(self.status, b"")

    @property
    def content_length(self) -> int:
        """Declared Content-Length (0 if the header is absent)."""
        value = self.get_header("Content-Length")
        return int(value) if value is not None else 0

    def get_header(self, name: str) -> Optional[str]:
        for header_name, value in self.headers:
            if header_name == name:
                return value
        return None

    def head_bytes(self) -> bytes:
        """
        Serialize the status line and headers.

        Each line ends with \\r\\n and the block ends with one extra \\r\\n:

            HTTP/1.1 200 OK\\r\\n
            Date: ...\\r\\n
            Content-Length: 200\\r\\n
            \\r\\n
        """
        lines = [self.status_line]
        lines.extend(f"{name}: {value}" for name, value in self.headers)
        return ("\r\n".join(lines) + "\r\n\r\n").encode("utf-8")


class ResponseBuilder:
    """
    Fluent builder for Outcomes.

    Headers are emitted in the order the methods are called:

        outcome = (ResponseBuilder()
            .status(HTTPStatus.OK)
            .date(now)
            .server("StaticHTTPd/1.0")
            .last_modified(mtime)
            .content_length(200)
            .file("/srv/about/index.html")
            .build())
    """

    def __init__(self):
        self._status = HTTPStatus.OK
        self._headers: List[Tuple[str, str]] = []
        self._body_file: Optional[str] = None

    def status(self, status: HTTPStatus) -> "ResponseBuilder":
        self._status = status
        return self

    def header(self, name: str, value: str) -> "ResponseBuilder":
        """
        Append a header.

        Args:
            name: Header name (emitted exactly as given)
            value: Header value

        Returns:
            Self for method chaining
        """
        self._headers.append((name, value))
        return self

    def date(self, when: datetime) -> "ResponseBuilder":
        return self.header("Date", format_http_date(when))

    def server(self, name: str) -> "ResponseBuilder":
        return self.header("Server", name)

    def last_modified(self, when: datetime) -> "ResponseBuilder":
        return self.header("Last-Modified", format_http_date(when))

    def content_length(self, length: int) -> "ResponseBuilder":
        return self.header("Content-Length", str(length))

    def error_content_length(self) -> "ResponseBuilder":
        """Content-Length of the canned body for the current status."""
        return self.content_length(len(error_body(self._status)))

    def file(self, path: str) -> "ResponseBuilder":
        """Stream the file at path after the header block."""
        self._body_file = path
        return self

    def build(self) -> Outcome:
        return Outcome(
            status=self._status,
            headers=tuple(self._headers),
            body_file=self._body_file,
        )


# =============================================================================
# CONVENIENCE FUNCTIONS
# =============================================================================
#
# One function per response template. The header order in each one IS the
# wire format, so keep them in sync with the templates.
#
# =============================================================================

def ok(
    now: datetime,
    server_name: str,
    last_modified: datetime,
    size: int,
    body_file: Optional[str] = None,
) -> Outcome:
    """
    Create a 200 OK outcome.

    HEAD passes body_file=None; GET passes the path so the writer streams
    the file after the headers.
    """
    builder = (ResponseBuilder()
        .status(HTTPStatus.OK)
        .date(now)
        .server(server_name)
        .last_modified(last_modified)
        .content_length(size))

    if body_file is not None:
        builder.file(body_file)

    return builder.build()


def not_modified(now: datetime) -> Outcome:
    """Create a 304 Not Modified outcome (no Server header)."""
    return (ResponseBuilder()
        .status(HTTPStatus.NOT_MODIFIED)
        .date(now)
        .error_content_length()
        .build())


def bad_request() -> Outcome:
    """Create a 400 Bad Request outcome (Content-Length only)."""
    return (ResponseBuilder()
        .status(HTTPStatus.BAD_REQUEST)
        .error_content_length()
        .build())


def not_found(now: datetime, server_name: str) -> Outcome:
    """Create a 404 Not Found outcome."""
    return (ResponseBuilder()
        .status(HTTPStatus.NOT_FOUND)
        .date(now)
        .server(server_name)
        .error_content_length()
        .build())


def not_implemented() -> Outcome:
    """Create a 501 Not Implemented outcome (Content-Length only)."""
    return (ResponseBuilder()
        .status(HTTPStatus.NOT_IMPLEMENTED)
        .error_content_length()
        .build())
