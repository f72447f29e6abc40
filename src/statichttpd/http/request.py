"""
=============================================================================
HTTP REQUEST PARSER
=============================================================================

Turns a scanned request line (plus the optional If-Modified-Since value)
into a validated HTTPRequest, or into the error Outcome that short-circuits
the rest of the pipeline.

=============================================================================
REQUEST LINE
=============================================================================

    GET /about HTTP/1.1
    ─┬─ ───┬── ────┬───
     │     │       │
    [0]   [1]     [2]      tokens = line.split(" ")
     │     │       │
     │     │       └── ignored (no version checks)
     │     └────────── appended to the document root
     └──────────────── must be exactly "HEAD" or "GET"

=============================================================================
VALIDATION ORDER
=============================================================================

    ┌───────────────────────────────────────────────────────────────────┐
    │  1. Method ─────────► not HEAD/GET?      → 501, stop here        │
    │  2. Path token ─────► missing/empty?     → 400                   │
    │  3. Resolve path ───► root + path (+ /index.html for "dirs")     │
    │  4. Conditional ────► bad date?          → 400                   │
    │                                                                   │
    │  Otherwise → HTTPRequest                                          │
    └───────────────────────────────────────────────────────────────────┘

Failures are RETURNED as Outcomes rather than raised. A bad date is an
expected client mistake, not a fault, and the pipeline can hand either
value straight to the decision engine.

=============================================================================
PATH RESOLUTION IS TEXTUAL
=============================================================================

The document root is a plain string prefix. Nothing is normalized:

    root="/srv"  path="/about"          → /srv/about/index.html
    root="/srv"  path="/app.js"         → /srv/app.js
    root="/srv"  path="/../etc/passwd"  → /srv/../etc/passwd   (!)

The last case means ".." can escape the document root. This is a known
security deficiency kept for behavioral compatibility; run the server
only on trusted networks or behind a proxy that normalizes paths.

=============================================================================
"""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional, Union

from .dates import parse_http_date
from .response import Outcome, bad_request, not_implemented
from .scanner import ScannedRequest


INDEX_FILE = "index.html"


class Method(str, Enum):
    """The only two methods the server implements."""

    HEAD = "HEAD"
    GET = "GET"


@dataclass(frozen=True)
class HTTPRequest:
    """
    A validated request.

    Attributes:
        method: HEAD or GET.
        raw_path: Path token exactly as the client sent it.
        path: Filesystem path after document-root and index resolution.
        if_modified_since: Parsed conditional date, if the client sent one.
    """

    method: Method
    raw_path: str
    path: str
    if_modified_since: Optional[datetime] = None

    @property
    def is_conditional(self) -> bool:
        return self.if_modified_since is not None


ParseResult = Union[HTTPRequest, Outcome]


class RequestParser:
    """
    Parses scanned requests against a document root.

    Usage:
        parser = RequestParser("/srv")
        result = parser.parse(ScannedRequest("GET /about HTTP/1.1"))
        # HTTPRequest(method=Method.GET, raw_path='/about',
        #             path='/srv/about/index.html', if_modified_since=None)
    """

    def __init__(self, document_root: str):
        """
        Args:
            document_root: Prefix prepended to every request path. Used
                           as-is: no trailing-slash handling, no resolving.
        """
        self.document_root = document_root

    def parse(self, scanned: ScannedRequest) -> ParseResult:
        """
        Validate a scanned request.

        Args:
            scanned: Output of the header scanner.

        Returns:
            HTTPRequest on success, otherwise the 400/501 Outcome.
        """
        tokens = scanned.request_line.split(" ")

        # ---------------------------------------------------------------------
        # STEP 1: Method (exact, case-sensitive)
        # ---------------------------------------------------------------------
        try:
            method = Method(tokens[0])
        except ValueError:
            return not_implemented()

        # ---------------------------------------------------------------------
        # STEP 2: Path token
        # ---------------------------------------------------------------------
        if len(tokens) < 2 or not tokens[1]:
            return bad_request()

        raw_path = tokens[1]
        path = self.resolve_path(raw_path)

        # ---------------------------------------------------------------------
        # STEP 3: Conditional date
        # ---------------------------------------------------------------------
        if_modified_since = None
        if scanned.if_modified_since is not None:
            if_modified_since = parse_http_date(scanned.if_modified_since)
            if if_modified_since is None:
                return bad_request()

        return HTTPRequest(
            method=method,
            raw_path=raw_path,
            path=path,
            if_modified_since=if_modified_since,
        )

    def resolve_path(self, raw_path: str) -> str:
        """
        Build the filesystem path for a request path.

        A final segment without "." is treated as a directory and gets
        "/index.html" appended. "/about/" ends in an empty segment, so it
        becomes "/about//index.html", which the filesystem treats the same
        as "/about/index.html".
        """
        path = self.document_root + raw_path
        last_segment = path.split("/")[-1]
        if "." not in last_segment:
            path += "/" + INDEX_FILE
        return path


def parse_request(scanned: ScannedRequest, document_root: str) -> ParseResult:
    """
    Convenience function to parse a scanned request in one call.

    Use RequestParser directly to reuse the same document root.
    """
    return RequestParser(document_root).parse(scanned)
