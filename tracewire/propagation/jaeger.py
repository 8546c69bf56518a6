"""Jaeger native propagation (``uber-trace-id`` and ``uberctx-*`` baggage headers).

https://www.jaegertracing.io/docs/1.21/client-libraries/#propagation-format
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from opentelemetry.context import Context
from opentelemetry.propagators import textmap

from tracewire.baggage.baggage import Baggage, BaggageEntry, get_baggage, set_baggage
from tracewire.baggage.codec import decode_component, encode_component
from tracewire.context.context import get_span_context, set_span_context
from tracewire.context.suppress import is_tracing_suppressed
from tracewire.propagation.textmap import TextMapPropagator, default_getter, default_setter
from tracewire.tracer.span_context import SpanContext, TraceFlags, is_span_context_valid
from tracewire.utils.helpers import first_header_value, pad_span_id, pad_trace_id

logger = logging.getLogger(__name__)

UBER_TRACE_ID_HEADER = "uber-trace-id"
UBER_BAGGAGE_HEADER_PREFIX = "uberctx"


def format_uber_trace_id(span_context: SpanContext) -> str:
    """Render ``{trace}:{span}:{parent}:{flags}``; the parent id is deprecated and sent as 0."""
    flags = int(span_context.trace_flags) & 0xFF
    return f"{span_context.trace_id}:{span_context.span_id}:0:{flags:02x}"


def parse_uber_trace_id(value: str) -> Optional[SpanContext]:
    """
    Parse an ``uber-trace-id`` value, which may arrive percent-encoded.

    Returns:
        A remote SpanContext, or None when the value does not have four
        fields or its ids are invalid
    """
    parts = decode_component(value).split(":")
    if len(parts) != 4:
        return None
    trace_id, span_id, _parent_span_id, flags = parts
    try:
        sampled = int(flags, 16) & TraceFlags.SAMPLED
    except ValueError:
        return None
    span_context = SpanContext(
        trace_id=pad_trace_id(trace_id),
        span_id=pad_span_id(span_id),
        trace_flags=TraceFlags(sampled),
        is_remote=True,
    )
    if not is_span_context_valid(span_context):
        return None
    return span_context


class JaegerPropagator(TextMapPropagator):
    """
    Propagates the span context in Jaeger's trace header and baggage as
    one prefixed header per entry.

    Args:
        custom_trace_header: Header used instead of ``uber-trace-id``
        custom_baggage_prefix: Prefix used instead of ``uberctx``
    """

    def __init__(
        self,
        custom_trace_header: Optional[str] = None,
        custom_baggage_prefix: Optional[str] = None,
    ):
        self._trace_header = custom_trace_header or UBER_TRACE_ID_HEADER
        self._baggage_prefix = custom_baggage_prefix or UBER_BAGGAGE_HEADER_PREFIX

    @property
    def trace_header(self) -> str:
        return self._trace_header

    @property
    def baggage_prefix(self) -> str:
        return self._baggage_prefix

    def inject(
        self,
        context: Context,
        carrier: Any,
        setter: textmap.Setter = default_setter,
    ) -> None:
        if is_tracing_suppressed(context):
            return

        span_context = get_span_context(context)
        if span_context is not None and is_span_context_valid(span_context):
            setter.set(carrier, self._trace_header, format_uber_trace_id(span_context))

        baggage = get_baggage(context)
        if baggage is None:
            return
        for key, entry in baggage.get_all_entries():
            setter.set(carrier, f"{self._baggage_prefix}-{key}", encode_component(entry.value))

    def extract(
        self,
        context: Context,
        carrier: Any,
        getter: textmap.Getter = default_getter,
    ) -> Context:
        uber_trace_id = first_header_value(getter.get(carrier, self._trace_header))
        if uber_trace_id:
            span_context = parse_uber_trace_id(uber_trace_id)
            if span_context is None:
                logger.debug("Ignoring malformed %s header %r", self._trace_header, uber_trace_id)
            else:
                context = set_span_context(context, span_context)

        entries = self._extract_baggage_entries(carrier, getter)
        if not entries:
            return context

        baggage = get_baggage(context) or Baggage()
        for key, entry in entries.items():
            baggage = baggage.set_entry(key, entry)
        return set_baggage(context, baggage)

    def _extract_baggage_entries(self, carrier: Any, getter: textmap.Getter) -> Dict[str, BaggageEntry]:
        prefix = f"{self._baggage_prefix}-"
        entries: Dict[str, BaggageEntry] = {}
        for key in getter.keys(carrier):
            if not isinstance(key, str) or not key.startswith(prefix):
                continue
            value = first_header_value(getter.get(carrier, key))
            if value is None:
                continue
            entries[key[len(prefix):]] = BaggageEntry(value=decode_component(value))
        return entries

    def fields(self) -> List[str]:
        return [self._trace_header]
