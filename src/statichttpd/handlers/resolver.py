"""
Resource resolution: what, if anything, lives at a resolved request path.

The filesystem does the work. We only translate an os.stat() result into
the three facts the decision engine needs.
"""

import logging
import os
import stat
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..http.dates import from_timestamp, truncate_to_wire_precision


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ResourceMetadata:
    """
    Facts about the entity at a resolved path.

    last_modified is already truncated to wire precision (whole seconds),
    so it can be compared directly with a client's If-Modified-Since.
    """

    exists: bool
    size_bytes: int = 0
    last_modified: Optional[datetime] = None


MISSING = ResourceMetadata(exists=False)


def resolve_resource(path: str) -> ResourceMetadata:
    """
    Query the filesystem for path.

    Absent paths, unreadable paths and anything that is not a regular file
    (directories, devices, sockets) are all reported as missing. The
    caller answers 404 for every one of them.
    """
    try:
        st = os.stat(path)
    except (OSError, ValueError) as e:
        # ValueError: embedded NUL byte in the request path
        logger.debug(f"Cannot stat {path!r}: {e}")
        return MISSING

    if not stat.S_ISREG(st.st_mode):
        logger.debug(f"Not a regular file: {path!r}")
        return MISSING

    if not os.access(path, os.R_OK):
        logger.debug(f"Not readable: {path!r}")
        return MISSING

    return ResourceMetadata(
        exists=True,
        size_bytes=st.st_size,
        last_modified=truncate_to_wire_precision(from_timestamp(st.st_mtime)),
    )
