"""Suppression flag that stops every injector from writing headers.

Exporters set it around their own outbound calls so that the transport they
use is not traced back into itself.
"""

from opentelemetry.context import Context

from tracewire.context.context import create_key, delete_value, get_value, set_value

_SUPPRESS_TRACING_KEY = create_key("tracewire-suppress-tracing")


def suppress_tracing(context: Context) -> Context:
    return set_value(_SUPPRESS_TRACING_KEY, True, context)


def unsuppress_tracing(context: Context) -> Context:
    # Delete rather than store False: the slot is popped, not overridden.
    return delete_value(_SUPPRESS_TRACING_KEY, context)


def is_tracing_suppressed(context: Context) -> bool:
    return get_value(_SUPPRESS_TRACING_KEY, context) is True
