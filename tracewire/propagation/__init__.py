"""Text-map propagators for the supported wire formats."""

from tracewire.propagation.aws_xray import AWSXRayLambdaPropagator, AWSXRayPropagator
from tracewire.propagation.b3 import (
    B3InjectEncoding,
    B3MultiPropagator,
    B3Propagator,
    B3SinglePropagator,
    get_b3_debug_flag,
    get_b3_parent_span_id,
    set_b3_debug_flag,
    set_b3_parent_span_id,
)
from tracewire.propagation.baggage import W3CBaggagePropagator
from tracewire.propagation.composite import CompositePropagator
from tracewire.propagation.jaeger import JaegerPropagator
from tracewire.propagation.textmap import (
    DefaultGetter,
    DefaultSetter,
    TextMapPropagator,
    default_getter,
    default_setter,
)
from tracewire.propagation.tracecontext import (
    W3CTraceContextPropagator,
    format_traceparent,
    parse_traceparent,
)

__all__ = [
    "TextMapPropagator",
    "DefaultGetter",
    "DefaultSetter",
    "default_getter",
    "default_setter",
    "W3CTraceContextPropagator",
    "parse_traceparent",
    "format_traceparent",
    "W3CBaggagePropagator",
    "B3Propagator",
    "B3MultiPropagator",
    "B3SinglePropagator",
    "B3InjectEncoding",
    "get_b3_debug_flag",
    "set_b3_debug_flag",
    "get_b3_parent_span_id",
    "set_b3_parent_span_id",
    "JaegerPropagator",
    "AWSXRayPropagator",
    "AWSXRayLambdaPropagator",
    "CompositePropagator",
]
