"""
=============================================================================
HTTP STATUS CODES
=============================================================================

The server only ever answers with five status codes. Each one maps to a
fixed outcome of the decision engine:

    ┌────────┬──────────────────────┬───────────────────────────────────────┐
    │  Code  │  Phrase              │  When                                 │
    ├────────┼──────────────────────┼───────────────────────────────────────┤
    │  200   │  OK                  │  HEAD/GET on an existing file         │
    │  304   │  Not Modified        │  If-Modified-Since after file mtime   │
    │  400   │  Bad Request         │  Unparseable If-Modified-Since        │
    │  404   │  Not Found           │  Nothing at the resolved path         │
    │  501   │  Not Implemented     │  Any method other than HEAD/GET       │
    └────────┴──────────────────────┴───────────────────────────────────────┘

=============================================================================
"""

from enum import IntEnum


class HTTPStatus(IntEnum):
    """
    HTTP status codes and reason phrases.

    This enum extends IntEnum, so status codes can be used as integers:

        >>> HTTPStatus.OK == 200
        True
        >>> HTTPStatus.NOT_FOUND.phrase
        'Not Found'
    """

    OK = 200                    # File found, headers (and body for GET)
    NOT_MODIFIED = 304          # Client copy is newer than the file
    BAD_REQUEST = 400           # Malformed conditional date or request line
    NOT_FOUND = 404             # No regular file at the resolved path
    NOT_IMPLEMENTED = 501       # Method other than HEAD/GET

    @property
    def phrase(self) -> str:
        """
        Get the reason phrase for this status code.

            HTTP/1.1 404 Not Found
                     ─── ─────────
                      │      │
                      │      └── Reason phrase
                      └───────── Status code
        """
        return _STATUS_PHRASES[self]

    @property
    def is_error(self) -> bool:
        """
        Check if this status carries a canned HTML error body.

        304 is not an error in HTTP terms, but the server still sends a
        small HTML body with it, so it is grouped with the 4xx/5xx codes.
        """
        return self is not HTTPStatus.OK


_STATUS_PHRASES = {
    HTTPStatus.OK: "OK",
    HTTPStatus.NOT_MODIFIED: "Not Modified",
    HTTPStatus.BAD_REQUEST: "Bad Request",
    HTTPStatus.NOT_FOUND: "Not Found",
    HTTPStatus.NOT_IMPLEMENTED: "Not Implemented",
}
