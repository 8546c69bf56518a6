"""W3C Baggage propagation over the ``baggage`` header."""

from __future__ import annotations

from typing import Any, List

from opentelemetry.context import Context
from opentelemetry.propagators import textmap

from tracewire.baggage.baggage import Baggage, get_baggage, set_baggage
from tracewire.baggage.codec import (
    BAGGAGE_HEADER,
    parse_key_pairs_into_record,
    serialize_baggage,
)
from tracewire.context.suppress import is_tracing_suppressed
from tracewire.propagation.textmap import TextMapPropagator, default_getter, default_setter
from tracewire.utils.helpers import join_header_values


class W3CBaggagePropagator(TextMapPropagator):
    """
    Propagates baggage entries in the ``baggage`` header.

    Outbound entries are limited to 180 pairs, 4096 bytes per pair and 8192
    bytes in total; entries that do not fit are dropped silently.
    """

    def inject(
        self,
        context: Context,
        carrier: Any,
        setter: textmap.Setter = default_setter,
    ) -> None:
        baggage = get_baggage(context)
        if baggage is None or is_tracing_suppressed(context):
            return

        header = serialize_baggage(baggage)
        if header:
            setter.set(carrier, BAGGAGE_HEADER, header)

    def extract(
        self,
        context: Context,
        carrier: Any,
        getter: textmap.Getter = default_getter,
    ) -> Context:
        header = join_header_values(getter.get(carrier, BAGGAGE_HEADER))
        if not header:
            return context

        entries = parse_key_pairs_into_record(header)
        if not entries:
            return context
        return set_baggage(context, Baggage(entries))

    def fields(self) -> List[str]:
        return [BAGGAGE_HEADER]
