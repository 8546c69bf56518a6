"""Context utilities for tracewire."""

from tracewire.context.context import (
    ROOT_CONTEXT,
    attach_context,
    create_key,
    delete_span_context,
    delete_value,
    detach_context,
    get_current,
    get_span_context,
    get_value,
    set_span_context,
    set_value,
    use_context,
)
from tracewire.context.suppress import (
    is_tracing_suppressed,
    suppress_tracing,
    unsuppress_tracing,
)

__all__ = [
    "ROOT_CONTEXT",
    "create_key",
    "get_value",
    "set_value",
    "delete_value",
    "get_current",
    "attach_context",
    "detach_context",
    "use_context",
    "set_span_context",
    "get_span_context",
    "delete_span_context",
    "suppress_tracing",
    "unsuppress_tracing",
    "is_tracing_suppressed",
]
