"""B3 propagation in its single-header and multi-header encodings.

https://github.com/openzipkin/b3-propagation
"""

from __future__ import annotations

import logging
import re
from enum import Enum
from typing import Any, List, Optional

from opentelemetry.context import Context
from opentelemetry.propagators import textmap

from tracewire.context.context import (
    create_key,
    get_span_context,
    get_value,
    set_span_context,
    set_value,
)
from tracewire.context.suppress import is_tracing_suppressed
from tracewire.propagation.textmap import TextMapPropagator, default_getter, default_setter
from tracewire.tracer.span_context import (
    SpanContext,
    TraceFlags,
    is_span_context_valid,
    is_valid_span_id,
    is_valid_trace_id,
)
from tracewire.utils.helpers import first_header_value, pad_trace_id

logger = logging.getLogger(__name__)

B3_CONTEXT_HEADER = "b3"
X_B3_TRACE_ID = "x-b3-traceid"
X_B3_SPAN_ID = "x-b3-spanid"
X_B3_SAMPLED = "x-b3-sampled"
X_B3_PARENT_SPAN_ID = "x-b3-parentspanid"
X_B3_FLAGS = "x-b3-flags"

_SAMPLED_VALUES = (True, "true", "True", "1", 1)
_NOT_SAMPLED_VALUES = (False, "false", "False", "0", 0)

_B3_SINGLE_REGEX = re.compile(
    r"([0-9a-f]{32}|[0-9a-f]{16})-([0-9a-f]{16})(?:-([01d])(?:-([0-9a-f]{16}))?)?"
)

_B3_DEBUG_FLAG_KEY = create_key("tracewire-b3-debug-flag")
# Filled on extraction only; injectors never write a parent id.
_B3_PARENT_SPAN_ID_KEY = create_key("tracewire-b3-parent-span-id")


def get_b3_debug_flag(context: Optional[Context] = None) -> bool:
    return get_value(_B3_DEBUG_FLAG_KEY, context) is True


def set_b3_debug_flag(context: Context, debug: bool = True) -> Context:
    return set_value(_B3_DEBUG_FLAG_KEY, debug, context)


def get_b3_parent_span_id(context: Optional[Context] = None) -> Optional[str]:
    return get_value(_B3_PARENT_SPAN_ID_KEY, context)


def set_b3_parent_span_id(context: Context, parent_span_id: str) -> Context:
    return set_value(_B3_PARENT_SPAN_ID_KEY, parent_span_id, context)


def _injectable_span_context(context: Context) -> Optional[SpanContext]:
    span_context = get_span_context(context)
    if span_context is None or is_tracing_suppressed(context):
        return None
    if not is_span_context_valid(span_context):
        return None
    return span_context


def _normalize_trace_id(trace_id: Optional[str]) -> Optional[str]:
    if isinstance(trace_id, str) and len(trace_id) == 16:
        return pad_trace_id(trace_id)
    return trace_id


def _lookup(carrier: Any, key: str, getter: textmap.Getter) -> Any:
    """
    Fetch a header by exact name, then by case-insensitive name.

    List values yield their first element. The value is otherwise returned
    untouched, since ``x-b3-sampled`` may arrive as a bool or an int.
    """
    value = getter.get(carrier, key)
    if value is None:
        for carrier_key in getter.keys(carrier):
            if isinstance(carrier_key, str) and carrier_key.lower() == key:
                value = getter.get(carrier, carrier_key)
                break
    if isinstance(value, (list, tuple)):
        value = value[0] if value else None
    return value


class B3MultiPropagator(TextMapPropagator):
    """Propagates the span context over the ``x-b3-*`` header family."""

    def inject(
        self,
        context: Context,
        carrier: Any,
        setter: textmap.Setter = default_setter,
    ) -> None:
        span_context = _injectable_span_context(context)
        if span_context is None:
            return

        setter.set(carrier, X_B3_TRACE_ID, span_context.trace_id)
        setter.set(carrier, X_B3_SPAN_ID, span_context.span_id)
        if get_b3_debug_flag(context):
            setter.set(carrier, X_B3_FLAGS, "1")
        else:
            setter.set(carrier, X_B3_SAMPLED, "1" if span_context.is_sampled else "0")

    def extract(
        self,
        context: Context,
        carrier: Any,
        getter: textmap.Getter = default_getter,
    ) -> Context:
        trace_id = _normalize_trace_id(_lookup(carrier, X_B3_TRACE_ID, getter))
        span_id = _lookup(carrier, X_B3_SPAN_ID, getter)
        if not is_valid_trace_id(trace_id) or not is_valid_span_id(span_id):
            return context

        parent_span_id = _lookup(carrier, X_B3_PARENT_SPAN_ID, getter)
        if parent_span_id is not None and not is_valid_span_id(parent_span_id):
            logger.debug("Ignoring B3 headers with invalid parent span id %r", parent_span_id)
            return context

        debug = _lookup(carrier, X_B3_FLAGS, getter) == "1"
        sampled = _lookup(carrier, X_B3_SAMPLED, getter)
        if debug or sampled in _SAMPLED_VALUES:
            trace_flags = TraceFlags.SAMPLED
        elif sampled is None or sampled in _NOT_SAMPLED_VALUES:
            trace_flags = TraceFlags.NONE
        else:
            logger.debug("Ignoring B3 headers with invalid sampled value %r", sampled)
            return context

        if debug:
            context = set_b3_debug_flag(context)
        if parent_span_id is not None:
            context = set_b3_parent_span_id(context, parent_span_id)
        return set_span_context(
            context,
            SpanContext(
                trace_id=trace_id,
                span_id=span_id,
                trace_flags=trace_flags,
                is_remote=True,
            ),
        )

    def fields(self) -> List[str]:
        return [X_B3_TRACE_ID, X_B3_SPAN_ID, X_B3_FLAGS, X_B3_SAMPLED, X_B3_PARENT_SPAN_ID]


class B3SinglePropagator(TextMapPropagator):
    """
    Propagates the span context in one ``b3`` header.

    Reads ``{trace}-{span}[-{flag}[-{parent}]]`` and writes ``{trace}-{span}-{flag}``.
    """

    def inject(
        self,
        context: Context,
        carrier: Any,
        setter: textmap.Setter = default_setter,
    ) -> None:
        span_context = _injectable_span_context(context)
        if span_context is None:
            return

        if get_b3_debug_flag(context):
            sampling_state = "d"
        else:
            sampling_state = "1" if span_context.is_sampled else "0"
        setter.set(
            carrier,
            B3_CONTEXT_HEADER,
            f"{span_context.trace_id}-{span_context.span_id}-{sampling_state}",
        )

    def extract(
        self,
        context: Context,
        carrier: Any,
        getter: textmap.Getter = default_getter,
    ) -> Context:
        header = first_header_value(_lookup(carrier, B3_CONTEXT_HEADER, getter))
        if not header:
            return context

        match = _B3_SINGLE_REGEX.fullmatch(header.strip())
        if match is None:
            logger.debug("Ignoring malformed b3 header %r", header)
            return context

        trace_id, span_id, sampling_state, parent_span_id = match.groups()
        trace_id = _normalize_trace_id(trace_id)
        if not is_valid_trace_id(trace_id) or not is_valid_span_id(span_id):
            return context
        if parent_span_id is not None and not is_valid_span_id(parent_span_id):
            return context

        if sampling_state == "d":
            context = set_b3_debug_flag(context)
        if parent_span_id is not None:
            context = set_b3_parent_span_id(context, parent_span_id)
        trace_flags = TraceFlags.SAMPLED if sampling_state in ("1", "d") else TraceFlags.NONE
        return set_span_context(
            context,
            SpanContext(
                trace_id=trace_id,
                span_id=span_id,
                trace_flags=trace_flags,
                is_remote=True,
            ),
        )

    def fields(self) -> List[str]:
        return [B3_CONTEXT_HEADER]


class B3InjectEncoding(Enum):
    SINGLE_HEADER = "single"
    MULTI_HEADER = "multi"


class B3Propagator(TextMapPropagator):
    """
    B3 propagator that reads either encoding and writes the configured one.

    Extraction uses the single ``b3`` header when a non-empty one is present
    and falls back to the ``x-b3-*`` headers otherwise. Injection always
    writes ``inject_encoding``, so a request received in multi-header form is
    forwarded in single-header form under the default settings.
    """

    def __init__(self, inject_encoding: B3InjectEncoding = B3InjectEncoding.SINGLE_HEADER):
        self._inject_encoding = B3InjectEncoding(inject_encoding)
        self._single = B3SinglePropagator()
        self._multi = B3MultiPropagator()
        if self._inject_encoding is B3InjectEncoding.MULTI_HEADER:
            self._injector: TextMapPropagator = self._multi
        else:
            self._injector = self._single

    @property
    def inject_encoding(self) -> B3InjectEncoding:
        return self._inject_encoding

    def inject(
        self,
        context: Context,
        carrier: Any,
        setter: textmap.Setter = default_setter,
    ) -> None:
        self._injector.inject(context, carrier, setter)

    def extract(
        self,
        context: Context,
        carrier: Any,
        getter: textmap.Getter = default_getter,
    ) -> Context:
        if first_header_value(_lookup(carrier, B3_CONTEXT_HEADER, getter)):
            return self._single.extract(context, carrier, getter)
        return self._multi.extract(context, carrier, getter)

    def fields(self) -> List[str]:
        return self._injector.fields()
