from __future__ import annotations

"""
Size and Duration Formatting.

Byte counts are rendered either as raw decimal integers or with a binary unit
suffix (KB..EB, one fractional digit). The same strings feed the width
resolver and the renderer, so a live run and a snapshot replay of the same
aggregate print identically.
"""

from diskusage.domain.constants import SIZE_UNITS

_UNIT = 1024


def humanize_bytes(size: int) -> str:
    """
    Render a byte count with a binary unit suffix.

    Values below 1024 print as an integer followed by 'B'. Larger values are
    divided by 1024 until they drop below 1024 and print with one decimal.
    Negative sizes print as '-'.

    Examples:
        0 -> '0B', 1536 -> '1.5KB', 1048576 -> '1.0MB'
    """
    if size < 0:
        return "-"
    if size < _UNIT:
        return f"{size}B"

    value = float(size)
    for suffix in SIZE_UNITS:
        value /= _UNIT
        if value < _UNIT:
            return f"{value:.1f}{suffix}"
    return f"{size}B"


def format_size(size: int, raw_bytes: bool) -> str:
    """Render a size as raw bytes or as a humanized string."""
    if raw_bytes:
        return str(size)
    return humanize_bytes(size)


def format_duration(seconds: float) -> str:
    """
    Render an elapsed time compactly, e.g. '1h2m3.5s', '2m0s', '150ms', '12.5µs'.

    Sub-second values use the largest of ms/µs/ns that keeps the leading digit
    non-zero. Trailing fractional zeros are trimmed.
    """
    if seconds == 0:
        return "0s"

    sign = "-" if seconds < 0 else ""
    seconds = abs(seconds)

    if seconds < 1:
        nanos = seconds * 1e9
        if nanos < 1e3:
            return f"{sign}{_trim(nanos, 0)}ns"
        if nanos < 1e6:
            return f"{sign}{_trim(nanos / 1e3, 3)}µs"
        return f"{sign}{_trim(nanos / 1e6, 6)}ms"

    hours, rem = divmod(seconds, 3600)
    minutes, secs = divmod(rem, 60)

    out = sign
    if hours:
        out += f"{int(hours)}h"
    if hours or minutes:
        out += f"{int(minutes)}m"
    return out + f"{_trim(secs, 9)}s"


def _trim(value: float, digits: int) -> str:
    text = f"{value:.{digits}f}"
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return text or "0"
