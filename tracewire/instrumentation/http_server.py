"""HTTP server helpers for extracting propagated context."""

from __future__ import annotations

from typing import Dict, Optional

from opentelemetry.context import Context

from tracewire.context.context import get_current, get_span_context
from tracewire.propagate import extract
from tracewire.propagation.textmap import TextMapPropagator
from tracewire.tracer.otel_bridge import set_otel_span_in_context
from tracewire.tracer.span_context import SpanContext


def extract_context(
    headers: Dict[str, str],
    context: Optional[Context] = None,
    propagator: Optional[TextMapPropagator] = None,
) -> Context:
    """
    Return ``context`` (current by default) enriched with whatever the headers carry.

    A span context read from the headers is also stored as the current
    OpenTelemetry span, so OpenTelemetry tracers started inside the request
    continue the remote trace instead of starting a new one.
    """
    if context is None:
        context = get_current()
    extracted = extract(headers, context=context, propagator=propagator)
    span_context = get_span_context(extracted)
    if span_context is not None and span_context is not get_span_context(context):
        extracted = set_otel_span_in_context(extracted, span_context)
    return extracted


def extract_parent_context(
    headers: Dict[str, str],
    propagator: Optional[TextMapPropagator] = None,
) -> Optional[SpanContext]:
    """Parse the incoming headers and return the remote SpanContext if valid."""
    return get_span_context(extract_context(headers, propagator=propagator))
