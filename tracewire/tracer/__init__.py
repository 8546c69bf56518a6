"""Span context, trace state and OpenTelemetry interop."""

from tracewire.tracer.otel_bridge import (
    from_otel_span_context,
    span_context_from_otel_context,
    set_otel_span_in_context,
    to_otel_span_context,
)
from tracewire.tracer.span_context import (
    INVALID_SPAN_CONTEXT,
    INVALID_SPAN_ID,
    INVALID_TRACE_ID,
    SpanContext,
    TraceFlags,
    is_span_context_valid,
    is_valid_span_id,
    is_valid_trace_id,
)
from tracewire.tracer.trace_state import TraceState

__all__ = [
    "SpanContext",
    "TraceFlags",
    "TraceState",
    "INVALID_TRACE_ID",
    "INVALID_SPAN_ID",
    "INVALID_SPAN_CONTEXT",
    "is_valid_trace_id",
    "is_valid_span_id",
    "is_span_context_valid",
    "to_otel_span_context",
    "from_otel_span_context",
    "span_context_from_otel_context",
    "set_otel_span_in_context",
]
