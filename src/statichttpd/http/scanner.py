"""
=============================================================================
HEADER SCANNER
=============================================================================

Reads the raw lines of one request and pulls out the only two things the
server cares about:

    GET /about HTTP/1.1                  ◄── request line (kept verbatim)
    Host: localhost:8080                     ignored
    User-Agent: curl/8.0                     ignored
    If-Modified-Since: Tue Jan 2 ...     ◄── value captured
    Accept: */*                              ignored
                                         ◄── blank line ends the scan

The scanner consumes lines up to and including the blank line (or until
the stream ends) so the header section is fully drained before the
response is written.

Header names are matched case-SENSITIVELY by default. HTTP says header
names are case-insensitive, so "if-modified-since" is legal, but matching
it would change which requests get a 304/400. Pass case_sensitive=False
to opt in.
"""

from dataclasses import dataclass
from typing import Iterable, Optional


IF_MODIFIED_SINCE = "If-Modified-Since"


@dataclass(frozen=True)
class ScannedRequest:
    """Raw fields extracted from one request's header section."""

    request_line: str
    if_modified_since: Optional[str] = None


def scan_request(
    lines: Iterable[str],
    case_sensitive: bool = True,
) -> Optional[ScannedRequest]:
    """
    Scan the lines of one request.

    Args:
        lines: Request lines with line terminators already removed.
        case_sensitive: Match the If-Modified-Since name exactly.

    Returns:
        ScannedRequest, or None if the stream ended before any line was
        read (the caller drops the connection without responding).
    """
    iterator = iter(lines)

    request_line = next(iterator, None)
    if request_line is None:
        return None

    if_modified_since = None

    for line in iterator:
        if not line:
            break  # End of headers

        if if_modified_since is not None:
            continue  # Keep draining, first occurrence wins

        name, sep, value = line.partition(":")
        if not sep:
            continue  # Not a header line

        if _name_matches(name.strip(), case_sensitive):
            if_modified_since = value.strip()

    return ScannedRequest(request_line=request_line, if_modified_since=if_modified_since)


def _name_matches(name: str, case_sensitive: bool) -> bool:
    if case_sensitive:
        return name == IF_MODIFIED_SINCE
    return name.lower() == IF_MODIFIED_SINCE.lower()
