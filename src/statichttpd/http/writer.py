"""
=============================================================================
RESPONSE WRITER
=============================================================================

Serializes an Outcome onto a connection.

    ┌──────────────┬───────────────────────────────────────────────────────┐
    │  status      │  bytes on the wire                                    │
    ├──────────────┼───────────────────────────────────────────────────────┤
    │  200 (GET)   │  header block + exactly Content-Length file bytes     │
    │  200 (HEAD)  │  header block                                         │
    │  304/400/    │  header block + canned HTML error body                │
    │  404/501     │                                                       │
    └──────────────┴───────────────────────────────────────────────────────┘

Yes, 304 gets a body too. Clients that follow RFC 7232 ignore it; the
Content-Length header still describes it correctly.

=============================================================================
"""

import logging

from ..core.connection import Connection
from .response import Outcome


logger = logging.getLogger(__name__)


class ResponseWriter:
    """
    Writes Outcomes to one connection.

    Usage:
        ResponseWriter(conn).write(outcome)
    """

    def __init__(self, conn: Connection):
        self.conn = conn

    def write(self, outcome: Outcome) -> bool:
        """
        Send the complete response for an outcome.

        Returns:
            True if every byte was handed to the socket, False if the
            client went away (or the file vanished) part way through.
        """
        head = outcome.head_bytes()

        if not self.conn.send(head):
            return False
        logger.debug("Sent message:\n" + head.decode("utf-8", errors="replace").rstrip("\r\n"))

        if outcome.has_file_body:
            return self.conn.send_file(outcome.body_file, outcome.content_length)

        if outcome.status.is_error:
            return self.conn.send(outcome.error_body)

        return True
