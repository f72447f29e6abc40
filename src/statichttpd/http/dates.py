"""
=============================================================================
HTTP DATE FORMATTING
=============================================================================

Formats and parses the timestamps used in the Date, Last-Modified and
If-Modified-Since headers.

=============================================================================
THE WIRE FORMAT
=============================================================================

This server does not use the RFC 7231 IMF-fixdate ("Tue, 02 Jan 2024
15:04:05 GMT"). Its dates look like the output of Unix `date`:

    Tue Jan 2 15:04:05 GMT 2024
    ─┬─ ─┬─ ┬ ───┬──── ─┬─ ─┬──
     │   │  │    │      │   │
     │   │  │    │      │   └── Year, four digits
     │   │  │    │      └────── Zone name (GMT, UTC, CET, +0300, ...)
     │   │  │    └───────────── 24-hour clock, two digits each
     │   │  └────────────────── Day of month, NOT zero padded
     │   └───────────────────── Month abbreviation
     └───────────────────────── Weekday abbreviation

Outgoing dates are rendered in the server's LOCAL time zone.

=============================================================================
PRECISION
=============================================================================

The format has one-second resolution. Filesystem timestamps usually have
sub-second precision, so comparing a raw mtime with a client date would
make a file modified at 15:04:05.300 look "newer" than a client date of
15:04:05. We avoid that by rendering the mtime and parsing it back
(truncate_to_wire_precision) before any comparison.

    mtime 15:04:05.300 ──format──► "... 15:04:05 ..." ──parse──► 15:04:05.000

=============================================================================
"""

import re
import time
from datetime import datetime, timedelta, timezone
from typing import Optional


# Weekday names (0=Monday in Python's datetime)
DAYS = ["Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun"]

# Month names (1-indexed, so we subtract 1)
MONTHS = ["Jan", "Feb", "Mar", "Apr", "May", "Jun",
          "Jul", "Aug", "Sep", "Oct", "Nov", "Dec"]

_FULL_DAYS = ["monday", "tuesday", "wednesday", "thursday",
              "friday", "saturday", "sunday"]
_FULL_MONTHS = ["january", "february", "march", "april", "may", "june", "july",
                "august", "september", "october", "november", "december"]

# Lookup tables for parsing (lowercase, short and long forms)
_WEEKDAY_NAMES = {name.lower() for name in DAYS} | set(_FULL_DAYS)
_MONTH_NUMBERS = {name.lower(): i + 1 for i, name in enumerate(MONTHS)}
_MONTH_NUMBERS.update({name: i + 1 for i, name in enumerate(_FULL_MONTHS)})

# EEE MMM d HH:mm:ss zzz yyyy
DATE_PATTERN = re.compile(
    r"^([A-Za-z]+)\s+([A-Za-z]+)\s+(\d{1,2})\s+"
    r"(\d{1,2}):(\d{1,2}):(\d{1,2})\s+(\S+)\s+(\d{4})$"
)

# GMT+05:30, UTC-8, +0300, -08
OFFSET_PATTERN = re.compile(r"^(?:GMT|UTC)?([+-])(\d{1,2})(?::?(\d{2}))?$", re.IGNORECASE)

_UTC_NAMES = {"GMT", "UTC", "UT", "Z"}

# Common zone abbreviations with fixed offsets (hours east of UTC).
# Names the host itself reports take precedence, see _resolve_zone().
ZONE_OFFSETS = {
    # North America
    "EST": -5, "EDT": -4,
    "CST": -6, "CDT": -5,
    "MST": -7, "MDT": -6,
    "PST": -8, "PDT": -7,
    "AKST": -9, "AKDT": -8,
    "HST": -10,
    # Europe
    "WET": 0, "WEST": 1,
    "BST": 1,
    "CET": 1, "CEST": 2,
    "EET": 2, "EEST": 3,
    "MSK": 3,
    # Asia / Pacific
    "IST": 5.5,
    "JST": 9, "KST": 9,
    "AWST": 8,
    "ACST": 9.5,
    "AEST": 10, "AEDT": 11,
    "NZST": 12, "NZDT": 13,
}


def now_local() -> datetime:
    """Current time as an aware datetime in the server's local zone."""
    return datetime.now().astimezone()


def from_timestamp(timestamp: float) -> datetime:
    """Convert a POSIX timestamp (e.g. st_mtime) to local aware datetime."""
    return datetime.fromtimestamp(timestamp).astimezone()


def format_http_date(dt: datetime) -> str:
    """
    Format a datetime in the server's wire format.

    Aware datetimes keep their own zone (the zone name comes from
    dt.tzname()). Naive datetimes are taken to be local time.

    Args:
        dt: Datetime to format.

    Returns:
        Formatted date string, e.g. "Tue Jan 2 15:04:05 GMT 2024".
    """
    if dt.tzinfo is None:
        dt = dt.astimezone()

    return (
        f"{DAYS[dt.weekday()]} {MONTHS[dt.month - 1]} {dt.day} "
        f"{dt.hour:02d}:{dt.minute:02d}:{dt.second:02d} "
        f"{_zone_name(dt)} {dt.year:04d}"
    )


def parse_http_date(text: str) -> Optional[datetime]:
    """
    Parse a date in the server's wire format.

    Returns None instead of raising when the text does not match, so the
    caller can turn a bad date into a 400 outcome without exception
    plumbing.

    Parsing rules:
    - Weekday and month names are case-insensitive; short ("Tue") and
      long ("Tuesday") forms are accepted. The weekday is not checked
      against the date.
    - Out-of-range fields (Feb 30, hour 24) are rejected, not rolled over.
    - The zone must be GMT/UTC, a numeric offset, one of the server's
      local zone names, or a common abbreviation from ZONE_OFFSETS
      (PST, EST, CET, JST, ...).

    Args:
        text: Raw header value.

    Returns:
        Timezone-aware datetime, or None if the text is not a valid date.
    """
    match = DATE_PATTERN.match(text.strip())
    if not match:
        return None

    weekday, month_name, day, hour, minute, second, zone, year = match.groups()

    if weekday.lower() not in _WEEKDAY_NAMES:
        return None

    month = _MONTH_NUMBERS.get(month_name.lower())
    if month is None:
        return None

    tzinfo = _resolve_zone(zone)
    if tzinfo is None:
        return None

    try:
        return datetime(
            int(year), month, int(day),
            int(hour), int(minute), int(second),
            tzinfo=tzinfo,
        )
    except ValueError:
        return None


def truncate_to_wire_precision(dt: datetime) -> datetime:
    """
    Round-trip a datetime through the wire format.

    The result is what a client would get back if it parsed our
    Last-Modified header, i.e. the same instant with sub-second precision
    dropped.
    """
    parsed = parse_http_date(format_http_date(dt))
    if parsed is None:
        # Zone names we render are always ones we can parse; fall back to a
        # plain truncation if the platform reports something exotic.
        return dt.replace(microsecond=0)
    # Same instant as parsed, but keep dt's zone so it renders identically
    return parsed.astimezone(dt.tzinfo)


def _zone_name(dt: datetime) -> str:
    name = dt.tzname()
    if name:
        return name

    # tzinfo without a name: render the offset RFC 822 style (+0530)
    offset = dt.utcoffset() or timedelta(0)
    minutes = int(offset.total_seconds() // 60)
    sign = "+" if minutes >= 0 else "-"
    minutes = abs(minutes)
    return f"{sign}{minutes // 60:02d}{minutes % 60:02d}"


def _resolve_zone(name: str) -> Optional[timezone]:
    """Map a zone name from a date string to a tzinfo."""
    if name.upper() in _UTC_NAMES:
        return timezone.utc

    match = OFFSET_PATTERN.match(name)
    if match:
        sign, hours, minutes = match.groups()
        offset = timedelta(hours=int(hours), minutes=int(minutes or 0))
        if offset >= timedelta(hours=24):
            return None
        return timezone(-offset if sign == "-" else offset)

    # Local zone abbreviations (e.g. "CET"/"CEST") as reported by the OS
    std_name, dst_name = time.tzname
    if name == std_name:
        return timezone(timedelta(seconds=-time.timezone), std_name)
    if time.daylight and name == dst_name:
        return timezone(timedelta(seconds=-time.altzone), dst_name)

    hours = ZONE_OFFSETS.get(name.upper())
    if hours is not None:
        return timezone(timedelta(hours=hours), name.upper())

    return None
