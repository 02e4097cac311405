from __future__ import annotations

"""
Unit tests for size and duration formatting.

Verifies:
1. Unit boundaries of the humanized byte format.
2. Raw byte rendering.
3. Compact duration strings.
"""

import pytest

from diskusage.core.analysis.size_format import format_duration, format_size, humanize_bytes


@pytest.mark.parametrize("size, expected", [
    (0, "0B"),
    (512, "512B"),
    (1023, "1023B"),
    (1024, "1.0KB"),
    (1536, "1.5KB"),
    (1048576, "1.0MB"),
    (5 * 1024 ** 3, "5.0GB"),
    (1024 ** 4, "1.0TB"),
    (3 * 1024 ** 6, "3.0EB"),
])
def test_humanize_bytes_boundaries(size: int, expected: str) -> None:
    assert humanize_bytes(size) == expected


def test_humanize_negative_is_dash() -> None:
    assert humanize_bytes(-1) == "-"


def test_format_size_raw_mode() -> None:
    """Raw mode prints the exact integer, never a unit."""
    assert format_size(1536, raw_bytes=True) == "1536"
    assert format_size(1536, raw_bytes=False) == "1.5KB"


@pytest.mark.parametrize("seconds, expected", [
    (0, "0s"),
    (1.5, "1.5s"),
    (120, "2m0s"),
    (3723.5, "1h2m3.5s"),
    (0.15, "150ms"),
    (0.0000125, "12.5µs"),
    (0.0000005, "500ns"),
])
def test_format_duration(seconds: float, expected: str) -> None:
    assert format_duration(seconds) == expected
