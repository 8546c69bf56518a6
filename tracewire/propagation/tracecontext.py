"""W3C Trace Context propagation (``traceparent`` / ``tracestate``).

https://www.w3.org/TR/trace-context/
"""

from __future__ import annotations

import logging
import re
from typing import Any, List, Optional

from opentelemetry.context import Context
from opentelemetry.propagators import textmap

from tracewire.context.context import get_span_context, set_span_context
from tracewire.context.suppress import is_tracing_suppressed
from tracewire.propagation.textmap import TextMapPropagator, default_getter, default_setter
from tracewire.tracer.span_context import SpanContext, is_span_context_valid
from tracewire.tracer.trace_state import TraceState
from tracewire.utils.helpers import first_header_value, join_header_values

logger = logging.getLogger(__name__)

TRACE_PARENT_HEADER = "traceparent"
TRACE_STATE_HEADER = "tracestate"
VERSION = "00"

_VERSION_PART = r"(?!ff)[0-9a-f]{2}"
_TRACE_ID_PART = r"(?![0]{32})[0-9a-f]{32}"
_PARENT_ID_PART = r"(?![0]{16})[0-9a-f]{16}"
_FLAGS_PART = r"[0-9a-f]{2}"
_TRACE_PARENT_REGEX = re.compile(
    rf"\s?({_VERSION_PART})-({_TRACE_ID_PART})-({_PARENT_ID_PART})-({_FLAGS_PART})(-.*)?\s?"
)


def parse_traceparent(traceparent: Any) -> Optional[SpanContext]:
    """
    Parse a ``traceparent`` value.

    Args:
        traceparent: Raw header value

    Returns:
        A remote SpanContext without trace state, or None when the value is
        malformed. Version ``00`` must not carry extra fields; later versions
        may.
    """
    if not isinstance(traceparent, str):
        return None
    match = _TRACE_PARENT_REGEX.fullmatch(traceparent)
    if match is None:
        return None
    version, trace_id, span_id, flags, rest = match.groups()
    if version == VERSION and rest:
        return None
    return SpanContext(
        trace_id=trace_id,
        span_id=span_id,
        trace_flags=int(flags, 16),
        is_remote=True,
    )


def format_traceparent(span_context: SpanContext) -> str:
    flags = int(span_context.trace_flags) & 0xFF
    return f"{VERSION}-{span_context.trace_id}-{span_context.span_id}-{flags:02x}"


class W3CTraceContextPropagator(TextMapPropagator):
    """Propagates the span context in the ``traceparent`` and ``tracestate`` headers."""

    def inject(
        self,
        context: Context,
        carrier: Any,
        setter: textmap.Setter = default_setter,
    ) -> None:
        span_context = get_span_context(context)
        if (
            span_context is None
            or is_tracing_suppressed(context)
            or not is_span_context_valid(span_context)
        ):
            return

        setter.set(carrier, TRACE_PARENT_HEADER, format_traceparent(span_context))
        if span_context.trace_state:
            setter.set(carrier, TRACE_STATE_HEADER, span_context.trace_state.serialize())

    def extract(
        self,
        context: Context,
        carrier: Any,
        getter: textmap.Getter = default_getter,
    ) -> Context:
        traceparent = first_header_value(getter.get(carrier, TRACE_PARENT_HEADER))
        if not traceparent:
            return context

        span_context = parse_traceparent(traceparent)
        if span_context is None:
            logger.debug("Ignoring malformed traceparent %r", traceparent)
            return context

        tracestate = join_header_values(getter.get(carrier, TRACE_STATE_HEADER))
        if tracestate:
            span_context = span_context.with_trace_state(TraceState(tracestate))
        return set_span_context(context, span_context)

    def fields(self) -> List[str]:
        return [TRACE_PARENT_HEADER, TRACE_STATE_HEADER]
