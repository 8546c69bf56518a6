"""AWS X-Ray trace header propagation.

An example header::

    X-Amzn-Trace-Id: Root=1-5759e988-bd862e3fe1be46a994272793;Parent=53995c3f42cd8ad8;Sampled=1

https://docs.aws.amazon.com/xray/latest/devguide/xray-concepts.html#xray-concepts-tracingheader
"""

from __future__ import annotations

import logging
import os
from typing import Any, List, Optional

from opentelemetry.context import Context
from opentelemetry.propagators import textmap

from tracewire.context.context import get_span_context, set_span_context
from tracewire.context.suppress import is_tracing_suppressed
from tracewire.propagation.textmap import TextMapPropagator, default_getter, default_setter
from tracewire.tracer.span_context import (
    SpanContext,
    TraceFlags,
    is_span_context_valid,
    is_valid_span_id,
    is_valid_trace_id,
)
from tracewire.utils.helpers import first_header_value

logger = logging.getLogger(__name__)

AWSXRAY_TRACE_ID_HEADER = "x-amzn-trace-id"
AWSXRAY_TRACE_ID_ENV_VAR = "_X_AMZN_TRACE_ID"

TRACE_HEADER_DELIMITER = ";"
KV_DELIMITER = "="

TRACE_ID_KEY = "Root"
TRACE_ID_VERSION = "1"
TRACE_ID_DELIMITER = "-"
TRACE_ID_FIRST_PART_LENGTH = 8
PARENT_ID_KEY = "Parent"
SAMPLED_FLAG_KEY = "Sampled"
IS_SAMPLED = "1"
NOT_SAMPLED = "0"


def format_xray_trace_header(span_context: SpanContext) -> str:
    """Render ``Root=1-{epoch}-{unique};Parent={span};Sampled={0|1}``."""
    epoch = span_context.trace_id[:TRACE_ID_FIRST_PART_LENGTH]
    unique = span_context.trace_id[TRACE_ID_FIRST_PART_LENGTH:]
    sampled = IS_SAMPLED if span_context.is_sampled else NOT_SAMPLED
    return (
        f"{TRACE_ID_KEY}={TRACE_ID_VERSION}{TRACE_ID_DELIMITER}{epoch}{TRACE_ID_DELIMITER}{unique}"
        f"{TRACE_HEADER_DELIMITER}{PARENT_ID_KEY}={span_context.span_id}"
        f"{TRACE_HEADER_DELIMITER}{SAMPLED_FLAG_KEY}={sampled}"
    )


def _parse_trace_id(value: str) -> Optional[str]:
    version, sep1, rest = value.partition(TRACE_ID_DELIMITER)
    epoch, sep2, unique = rest.partition(TRACE_ID_DELIMITER)
    if version != TRACE_ID_VERSION or not sep1 or not sep2:
        return None
    if len(epoch) != TRACE_ID_FIRST_PART_LENGTH:
        return None
    trace_id = epoch + unique
    return trace_id if is_valid_trace_id(trace_id) else None


def _parse_trace_flags(value: str) -> Optional[TraceFlags]:
    if value == IS_SAMPLED:
        return TraceFlags.SAMPLED
    if value == NOT_SAMPLED:
        return TraceFlags.NONE
    return None


def parse_xray_trace_header(header: str) -> Optional[SpanContext]:
    """
    Parse an X-Ray trace header into a remote SpanContext.

    Fields may come in any order and unknown fields are ignored. The
    ``Root``, ``Parent`` and ``Sampled`` fields must all be present and
    valid, otherwise None is returned.
    """
    trace_id: Optional[str] = None
    span_id: Optional[str] = None
    trace_flags: Optional[TraceFlags] = None
    for part in header.split(TRACE_HEADER_DELIMITER):
        key, _, value = part.strip().partition(KV_DELIMITER)
        if key == TRACE_ID_KEY:
            trace_id = _parse_trace_id(value)
        elif key == PARENT_ID_KEY:
            span_id = value if is_valid_span_id(value) else None
        elif key == SAMPLED_FLAG_KEY:
            trace_flags = _parse_trace_flags(value)

    if trace_id is None or span_id is None or trace_flags is None:
        return None
    span_context = SpanContext(
        trace_id=trace_id,
        span_id=span_id,
        trace_flags=trace_flags,
        is_remote=True,
    )
    return span_context if is_span_context_valid(span_context) else None


class AWSXRayPropagator(TextMapPropagator):
    """Propagates the span context in the ``x-amzn-trace-id`` header."""

    def inject(
        self,
        context: Context,
        carrier: Any,
        setter: textmap.Setter = default_setter,
    ) -> None:
        if is_tracing_suppressed(context):
            return
        span_context = get_span_context(context)
        if span_context is None or not is_span_context_valid(span_context):
            return
        setter.set(carrier, AWSXRAY_TRACE_ID_HEADER, format_xray_trace_header(span_context))

    def extract(
        self,
        context: Context,
        carrier: Any,
        getter: textmap.Getter = default_getter,
    ) -> Context:
        header = self._find_header(carrier, getter)
        if not header:
            return context
        span_context = parse_xray_trace_header(header)
        if span_context is None:
            logger.debug("Ignoring malformed %s header %r", AWSXRAY_TRACE_ID_HEADER, header)
            return context
        return set_span_context(context, span_context)

    @staticmethod
    def _find_header(carrier: Any, getter: textmap.Getter) -> Optional[str]:
        for key in getter.keys(carrier):
            if isinstance(key, str) and key.lower() == AWSXRAY_TRACE_ID_HEADER:
                return first_header_value(getter.get(carrier, key))
        return None

    def fields(self) -> List[str]:
        return [AWSXRAY_TRACE_ID_HEADER]


class AWSXRayLambdaPropagator(TextMapPropagator):
    """
    X-Ray propagator for AWS Lambda.

    Lambda hands the function's trace header over in the ``_X_AMZN_TRACE_ID``
    environment variable. When the incoming context carries no valid span
    context, that variable takes precedence over the carrier's header.
    Injection is plain X-Ray injection.
    """

    def __init__(self) -> None:
        self._xray = AWSXRayPropagator()

    def inject(
        self,
        context: Context,
        carrier: Any,
        setter: textmap.Setter = default_setter,
    ) -> None:
        self._xray.inject(context, carrier, setter)

    def extract(
        self,
        context: Context,
        carrier: Any,
        getter: textmap.Getter = default_getter,
    ) -> Context:
        xray_context = self._xray.extract(context, carrier, getter)

        span_context = get_span_context(context)
        if span_context is not None and is_span_context_valid(span_context):
            return xray_context

        env_header = os.environ.get(AWSXRAY_TRACE_ID_ENV_VAR)
        if not env_header:
            return xray_context
        return self._xray.extract(xray_context, {AWSXRAY_TRACE_ID_HEADER: env_header}, default_getter)

    def fields(self) -> List[str]:
        return self._xray.fields()
