"""tracewire: context propagation for distributed tracing.

W3C Trace Context, W3C Baggage, B3, Jaeger and AWS X-Ray propagators over
OpenTelemetry's context container.
"""

import logging

from tracewire.baggage import (
    Baggage,
    BaggageEntry,
    BaggageEntryMetadata,
    baggage_entry_metadata_from_string,
    create_baggage,
    delete_baggage,
    get_active_baggage,
    get_baggage,
    set_baggage,
)
from tracewire.config import TracewireConfig, load_config, validate_config
from tracewire.context import (
    ROOT_CONTEXT,
    attach_context,
    detach_context,
    get_current,
    get_span_context,
    is_tracing_suppressed,
    set_span_context,
    suppress_tracing,
    unsuppress_tracing,
    use_context,
)
from tracewire.errors import ConfigError, TracewireError
from tracewire.propagate import (
    PROPAGATOR_NAMES,
    build_propagator,
    create_propagator,
    extract,
    inject,
)
from tracewire.propagation import (
    AWSXRayPropagator,
    B3InjectEncoding,
    B3Propagator,
    CompositePropagator,
    JaegerPropagator,
    TextMapPropagator,
    W3CBaggagePropagator,
    W3CTraceContextPropagator,
)
from tracewire.tracer import SpanContext, TraceFlags, TraceState

__version__ = "0.1.0"

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    "__version__",
    "Baggage",
    "BaggageEntry",
    "BaggageEntryMetadata",
    "baggage_entry_metadata_from_string",
    "create_baggage",
    "get_baggage",
    "set_baggage",
    "delete_baggage",
    "get_active_baggage",
    "TracewireConfig",
    "load_config",
    "validate_config",
    "ROOT_CONTEXT",
    "get_current",
    "attach_context",
    "detach_context",
    "use_context",
    "get_span_context",
    "set_span_context",
    "suppress_tracing",
    "unsuppress_tracing",
    "is_tracing_suppressed",
    "TracewireError",
    "ConfigError",
    "PROPAGATOR_NAMES",
    "create_propagator",
    "build_propagator",
    "inject",
    "extract",
    "TextMapPropagator",
    "W3CTraceContextPropagator",
    "W3CBaggagePropagator",
    "B3Propagator",
    "B3InjectEncoding",
    "JaegerPropagator",
    "AWSXRayPropagator",
    "CompositePropagator",
    "SpanContext",
    "TraceFlags",
    "TraceState",
]
