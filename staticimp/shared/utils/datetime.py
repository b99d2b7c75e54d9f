"""
UTC datetime utilities and entry timestamp formatting.

All entry timestamps are timezone-aware UTC. Use utc_now() instead of
datetime.now() or datetime.utcnow().

format_timestamp() accepts strftime directives plus the chrono-style
extensions that existing staticimp configurations use (e.g. "%+" and
"%.3f"), so the same config files keep producing the same file names.
"""

from datetime import UTC, datetime

DEFAULT_TIMESTAMP_FORMAT = "%Y%m%dT%H%M%S%.3fZ"


def utc_now() -> datetime:
    """
    Return the current UTC datetime with timezone info.

    Returns:
        Timezone-aware datetime in UTC
    """
    return datetime.now(UTC)


def ensure_utc(dt: datetime) -> datetime:
    """
    Ensure a datetime is UTC-aware.

    - If naive, assumes UTC and attaches timezone
    - If aware, converts to UTC

    Args:
        dt: A datetime that may be naive or aware

    Returns:
        UTC-aware datetime
    """
    if dt.tzinfo is None:
        return dt.replace(tzinfo=UTC)
    return dt.astimezone(UTC)


def _fraction(dt: datetime, digits: int) -> str:
    """Fractional seconds truncated/padded to `digits` (nanoseconds are always 000)."""
    nanos = f"{dt.microsecond:06d}000"
    return nanos[:digits]


def _auto_fraction(dt: datetime) -> str:
    """Shortest of 0/3/6 fractional digits that represents the value exactly."""
    if dt.microsecond == 0:
        return ""
    if dt.microsecond % 1000 == 0:
        return "." + _fraction(dt, 3)
    return "." + _fraction(dt, 6)


def _utc_offset_colon(dt: datetime) -> str:
    offset = dt.strftime("%z")
    if not offset:
        return ""
    return f"{offset[:3]}:{offset[3:5]}"


def format_timestamp(dt: datetime, fmt: str) -> str:
    """
    Format a datetime with strftime plus chrono-style extensions.

    Extensions:
        %+    ISO 8601 / RFC 3339 (e.g. 2024-05-01T12:30:00.123+00:00)
        %.f   fractional seconds with as many digits as needed (0, 3 or 6)
        %.3f  %.6f  %.9f  fractional seconds with a leading dot
        %3f   %6f   %9f   fractional seconds without the dot
        %s    seconds since the Unix epoch
        %:z   UTC offset with a colon (+00:00)

    Args:
        dt: Datetime to format (naive values are treated as UTC)
        fmt: Format string

    Returns:
        Formatted string
    """
    dt = ensure_utc(dt)
    out: list[str] = []
    i = 0
    n = len(fmt)
    while i < n:
        ch = fmt[i]
        if ch != "%" or i + 1 >= n:
            out.append(ch)
            i += 1
            continue
        nxt = fmt[i + 1]
        if nxt == "%":
            out.append("%")
            i += 2
        elif nxt == "+":
            # same as %Y-%m-%dT%H:%M:%S%.f%:z
            out.append(
                dt.strftime("%Y-%m-%dT%H:%M:%S") + _auto_fraction(dt) + _utc_offset_colon(dt)
            )
            i += 2
        elif nxt == "s":
            out.append(str(int(dt.timestamp())))
            i += 2
        elif nxt == ":" and fmt.startswith("%:z", i):
            out.append(_utc_offset_colon(dt))
            i += 3
        elif nxt == "." and fmt.startswith("%.f", i):
            out.append(_auto_fraction(dt))
            i += 3
        elif nxt == "." and i + 3 < n and fmt[i + 2] in "369" and fmt[i + 3] == "f":
            out.append("." + _fraction(dt, int(fmt[i + 2])))
            i += 4
        elif nxt in "369" and i + 2 < n and fmt[i + 2] == "f":
            out.append(_fraction(dt, int(nxt)))
            i += 3
        else:
            out.append(dt.strftime(fmt[i : i + 2]))
            i += 2
    return "".join(out)
