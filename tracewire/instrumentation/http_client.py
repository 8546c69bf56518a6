"""HTTP client helpers for context propagation."""

from __future__ import annotations

from typing import Dict, Optional

from opentelemetry.context import Context

from tracewire.context.context import get_current, get_span_context, set_span_context
from tracewire.propagate import inject
from tracewire.propagation.textmap import TextMapPropagator
from tracewire.tracer.otel_bridge import span_context_from_otel_context


def inject_headers(
    headers: Dict[str, str],
    context: Optional[Context] = None,
    propagator: Optional[TextMapPropagator] = None,
) -> Dict[str, str]:
    """
    Inject propagation headers for ``context`` into the provided headers dict.

    A local OpenTelemetry span active in the context takes precedence over
    the tracewire span context, which may still hold the remote parent the
    request arrived with. A remote OpenTelemetry span is only used when no
    tracewire span context is present.

    Returns the same headers mapping for convenience.
    """
    if context is None:
        context = get_current()
    otel_span_context = span_context_from_otel_context(context)
    if otel_span_context is not None:
        if not otel_span_context.is_remote or get_span_context(context) is None:
            context = set_span_context(context, otel_span_context)
    inject(headers, context=context, propagator=propagator)
    return headers
