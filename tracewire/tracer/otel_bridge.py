"""Conversion between tracewire and OpenTelemetry span contexts."""

from __future__ import annotations

from typing import Optional

from opentelemetry import trace as otel_trace
from opentelemetry.context import Context
from opentelemetry.trace import SpanContext as OTelSpanContext
from opentelemetry.trace import TraceFlags as OTelTraceFlags
from opentelemetry.trace import TraceState as OTelTraceState

from tracewire.tracer.span_context import SpanContext, TraceFlags
from tracewire.tracer.trace_state import TraceState
from tracewire.utils.helpers import format_span_id, format_trace_id, parse_span_id, parse_trace_id


def to_otel_span_context(span_context: SpanContext) -> OTelSpanContext:
    """Convert a tracewire SpanContext to an OpenTelemetry SpanContext."""
    trace_state = OTelTraceState()
    if span_context.trace_state:
        trace_state = OTelTraceState(span_context.trace_state.items())
    return OTelSpanContext(
        trace_id=parse_trace_id(span_context.trace_id),
        span_id=parse_span_id(span_context.span_id),
        is_remote=span_context.is_remote,
        trace_flags=OTelTraceFlags(int(span_context.trace_flags) & 0xFF),
        trace_state=trace_state,
    )


def from_otel_span_context(otel_context: OTelSpanContext) -> SpanContext:
    """Convert an OpenTelemetry SpanContext to a tracewire SpanContext."""
    trace_state = None
    if otel_context.trace_state:
        trace_state = TraceState.from_items(list(otel_context.trace_state.items()))
    return SpanContext(
        trace_id=format_trace_id(otel_context.trace_id),
        span_id=format_span_id(otel_context.span_id),
        trace_flags=TraceFlags.SAMPLED if otel_context.trace_flags.sampled else TraceFlags.NONE,
        trace_state=trace_state,
        is_remote=otel_context.is_remote,
    )


def span_context_from_otel_context(context: Optional[Context] = None) -> Optional[SpanContext]:
    """
    Return the context of the OpenTelemetry span stored in ``context``.

    Returns None when no valid OpenTelemetry span is present.
    """
    otel_context = otel_trace.get_current_span(context).get_span_context()
    if not otel_context.is_valid:
        return None
    return from_otel_span_context(otel_context)


def set_otel_span_in_context(context: Context, span_context: SpanContext) -> Context:
    """Expose ``span_context`` to OpenTelemetry tracers as a non-recording parent span."""
    span = otel_trace.NonRecordingSpan(to_otel_span_context(span_context))
    return otel_trace.set_span_in_context(span, context)
