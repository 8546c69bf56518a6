"""Id formatting helpers shared by the propagators and the OpenTelemetry bridge."""

from __future__ import annotations

from typing import Any, Optional


def format_trace_id(trace_id: int) -> str:
    """
    Format an integer trace id as a hex string.

    Args:
        trace_id: 128-bit trace id

    Returns:
        32-character lowercase hex string
    """
    return format(trace_id, '032x')


def format_span_id(span_id: int) -> str:
    """
    Format an integer span id as a hex string.

    Args:
        span_id: 64-bit span id

    Returns:
        16-character lowercase hex string
    """
    return format(span_id, '016x')


def parse_trace_id(hex_string: str) -> int:
    """
    Parse a hex trace id into an integer.

    Args:
        hex_string: 32-character hex string

    Returns:
        Trace id as int, 0 when empty
    """
    if not hex_string:
        return 0
    return int(hex_string, 16)


def parse_span_id(hex_string: str) -> int:
    """
    Parse a hex span id into an integer.

    Args:
        hex_string: 16-character hex string

    Returns:
        Span id as int, 0 when empty
    """
    if not hex_string:
        return 0
    return int(hex_string, 16)


def pad_trace_id(trace_id: str) -> str:
    """Left-pad a 64-bit (16 hex) trace id to the 128-bit form."""
    return trace_id.rjust(32, "0")


def pad_span_id(span_id: str) -> str:
    return span_id.rjust(16, "0")


def first_header_value(value: Any) -> Optional[str]:
    """
    Normalise a getter result to a single header string.

    Lists yield their first element; anything that is not a string yields None.
    """
    if isinstance(value, (list, tuple)):
        if not value:
            return None
        value = value[0]
    if isinstance(value, str):
        return value
    return None


def join_header_values(value: Any, separator: str = ",") -> Optional[str]:
    """Join repeated header occurrences into one value, as HTTP list headers allow."""
    if isinstance(value, (list, tuple)):
        parts = [item for item in value if isinstance(item, str)]
        if not parts:
            return None
        return separator.join(parts)
    if isinstance(value, str):
        return value
    return None
