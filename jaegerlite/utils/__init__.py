"""Utility functions for jaegerlite."""

from jaegerlite.utils.helpers import format_id, parse_id, to_microseconds

__all__ = [
    "format_id",
    "parse_id",
    "to_microseconds",
]
