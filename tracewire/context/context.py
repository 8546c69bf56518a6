"""Context helpers built on OpenTelemetry's immutable context container."""

from contextlib import contextmanager
from contextvars import Token
from typing import Any, Iterator, Optional, TYPE_CHECKING

from opentelemetry import context as context_api
from opentelemetry.context import Context

if TYPE_CHECKING:
    from tracewire.tracer.span_context import SpanContext

ROOT_CONTEXT = Context()


def create_key(name: str) -> str:
    """Return a key token no other subsystem can collide with."""
    return context_api.create_key(name)


def get_value(key: str, context: Optional[Context] = None) -> Any:
    return context_api.get_value(key, context)


def set_value(key: str, value: Any, context: Optional[Context] = None) -> Context:
    return context_api.set_value(key, value, context)


def delete_value(key: str, context: Optional[Context] = None) -> Context:
    """
    Return a new context without ``key``.

    The input context is returned unchanged when it does not hold the key.
    """
    if context is None:
        context = get_current()
    if key not in context:
        return context
    return Context({k: v for k, v in context.items() if k != key})


def get_current() -> Context:
    return context_api.get_current()


def attach_context(context: Context) -> Token:
    """
    Make ``context`` the current context.

    Returns:
        Token needed to restore the previous context
    """
    return context_api.attach(context)


def detach_context(token: Token) -> None:
    """
    Restore the context that was current before the matching attach.

    Args:
        token: Token returned by attach_context()
    """
    context_api.detach(token)


@contextmanager
def use_context(context: Context) -> Iterator[Context]:
    """Attach ``context`` for the duration of a ``with`` block."""
    token = attach_context(context)
    try:
        yield context
    finally:
        detach_context(token)


_SPAN_CONTEXT_KEY = create_key("tracewire-span-context")


def set_span_context(context: Context, span_context: "SpanContext") -> Context:
    return set_value(_SPAN_CONTEXT_KEY, span_context, context)


def get_span_context(context: Optional[Context] = None) -> Optional["SpanContext"]:
    """Return the span context stored in ``context`` (current context by default)."""
    return get_value(_SPAN_CONTEXT_KEY, context)


def delete_span_context(context: Context) -> Context:
    return delete_value(_SPAN_CONTEXT_KEY, context)
