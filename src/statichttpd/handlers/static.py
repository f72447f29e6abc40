"""
=============================================================================
STATIC FILE HANDLER (RESPONSE DECISION ENGINE)
=============================================================================

Decides the Outcome for a request. This is the only place in the server
with real decision logic; everything around it just moves bytes.

=============================================================================
DECISION ORDER
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                                                                      │
    │   parse result                                                       │
    │        │                                                             │
    │        ├── already an Outcome (400/501)? ──────────► return it       │
    │        │                                                             │
    │        ▼                                                             │
    │   resolve_resource(request.path)                                     │
    │        │                                                             │
    │        ├── missing? ───────────────────────────────► 404             │
    │        │                                                             │
    │        ├── If-Modified-Since AFTER last_modified? ─► 304             │
    │        │                                                             │
    │        ├── HEAD ───────────────────────────────────► 200, no body    │
    │        │                                                             │
    │        └── GET ────────────────────────────────────► 200 + file      │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
CONDITIONAL GET
=============================================================================

The 304 rule is STRICTLY AFTER, at one-second precision:

    file last_modified      client If-Modified-Since     result
    ──────────────────      ────────────────────────     ──────
    15:04:05                15:04:06                     304
    15:04:05                15:04:05                     200
    15:04:05.900 (→ :05)    15:04:05                     200

A client echoing back our own Last-Modified therefore still gets the file.
That is the historical behavior of this server and is kept as-is.

=============================================================================
"""

import logging
from datetime import datetime
from typing import Callable, Optional

from ..config import ServerConfig
from ..http.dates import now_local
from ..http.request import HTTPRequest, Method, ParseResult
from ..http.response import Outcome, not_found, not_modified, ok
from ..http.status_codes import HTTPStatus
from .resolver import ResourceMetadata, resolve_resource


logger = logging.getLogger(__name__)


class StaticFileHandler:
    """
    Maps parse results to Outcomes.

    Usage:
        handler = StaticFileHandler(config)
        outcome = handler.handle(parser.parse(scanned))

    The clock and resolver are injectable so tests can pin the Date header
    and fake the filesystem.
    """

    def __init__(
        self,
        config: ServerConfig,
        clock: Callable[[], datetime] = now_local,
        resolver: Callable[[str], ResourceMetadata] = resolve_resource,
    ):
        self.server_name = config.server_name
        self._clock = clock
        self._resolver = resolver

    def handle(self, parsed: ParseResult) -> Outcome:
        """
        Produce the Outcome for a parse result.

        Args:
            parsed: HTTPRequest, or the 400/501 Outcome from the parser.

        Returns:
            The Outcome to write.
        """
        if isinstance(parsed, Outcome):
            self._log(parsed)
            return parsed

        metadata = self._resolver(parsed.path)
        outcome = self.decide(parsed, metadata)

        self._log(outcome, parsed)
        logger.debug(f"Requested resource: {parsed.path}")
        return outcome

    def decide(
        self,
        request: HTTPRequest,
        metadata: ResourceMetadata,
        now: Optional[datetime] = None,
    ) -> Outcome:
        """
        Pure decision step: no I/O besides reading the clock.

        Args:
            request: Validated request.
            metadata: What the resolver found at request.path.
            now: Value for the Date header (defaults to the clock).
        """
        if now is None:
            now = self._clock()

        if not metadata.exists:
            return not_found(now, self.server_name)

        if self._is_not_modified(request, metadata):
            return not_modified(now)

        # GET and HEAD share headers; only GET streams the file
        body_file = request.path if request.method is Method.GET else None

        return ok(
            now,
            self.server_name,
            last_modified=metadata.last_modified,
            size=metadata.size_bytes,
            body_file=body_file,
        )

    @staticmethod
    def _is_not_modified(request: HTTPRequest, metadata: ResourceMetadata) -> bool:
        if request.if_modified_since is None or metadata.last_modified is None:
            return False
        return request.if_modified_since > metadata.last_modified

    @staticmethod
    def _log(outcome: Outcome, request: Optional[HTTPRequest] = None):
        if request is not None and outcome.status is HTTPStatus.OK:
            logger.info(f"Servicing {int(outcome.status)} {request.method.value}")
        else:
            logger.info(f"Servicing {int(outcome.status)}")
