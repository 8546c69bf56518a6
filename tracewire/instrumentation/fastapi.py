"""
FastAPI middleware that makes the incoming propagated context current per request.
"""

from __future__ import annotations

from typing import Any, Awaitable, Callable, Optional

from tracewire.context.context import ROOT_CONTEXT, use_context
from tracewire.instrumentation.http_server import extract_context
from tracewire.propagation.textmap import TextMapPropagator


def install_http_middleware(app: Any, propagator: Optional[TextMapPropagator] = None) -> None:
    """
    Attach an HTTP middleware that extracts the incoming trace context and
    baggage and keeps them current while the request is handled.

    Works with any app exposing the Starlette ``app.middleware("http")`` decorator.
    """

    @app.middleware("http")
    async def propagation_middleware(request, call_next: Callable[[Any], Awaitable[Any]]):  # type: ignore
        headers = dict(request.headers)
        context = extract_context(headers, context=ROOT_CONTEXT, propagator=propagator)
        with use_context(context):
            return await call_next(request)

    return None
