"""Helper functions for the uber-trace-id wire form and agent timestamps."""

from __future__ import annotations

import string

_HEX_DIGITS = frozenset(string.hexdigits)


def format_id(value: int) -> str:
    """
    Format a trace/span id as lower-case hex without zero padding.

    Args:
        value: Identifier as a non-negative integer

    Returns:
        Hex string, e.g. ``26`` -> ``"1a"``
    """
    return format(value, "x")


def parse_id(hex_string: str) -> int:
    """
    Parse a hex id field back into an integer.

    Raises:
        ValueError: If the field is empty or not valid hex
    """
    if not hex_string or not _HEX_DIGITS.issuperset(hex_string):
        raise ValueError(f"invalid id field {hex_string!r}")
    return int(hex_string, 16)


def to_microseconds(seconds: float) -> int:
    """Convert a float timestamp or duration in seconds to whole microseconds."""
    return int(round(seconds * 1_000_000))
