"""Utility functions for tracewire."""

from tracewire.utils.helpers import (
    first_header_value,
    format_span_id,
    format_trace_id,
    join_header_values,
    pad_span_id,
    pad_trace_id,
    parse_span_id,
    parse_trace_id,
)

__all__ = [
    "format_trace_id",
    "format_span_id",
    "parse_trace_id",
    "parse_span_id",
    "pad_trace_id",
    "pad_span_id",
    "first_header_value",
    "join_header_values",
]
