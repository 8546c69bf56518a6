"""Tests for the HTTP helpers and the OpenTelemetry bridge."""

import asyncio

import pytest
from opentelemetry import trace as otel_trace
from opentelemetry.trace import NonRecordingSpan
from opentelemetry.trace import SpanContext as OTelSpanContext
from opentelemetry.trace import TraceFlags as OTelTraceFlags
from opentelemetry.trace import TraceState as OTelTraceState

from tracewire.baggage import get_baggage
from tracewire.context import ROOT_CONTEXT, get_current, get_span_context, set_span_context
from tracewire.instrumentation import (
    extract_context,
    extract_parent_context,
    inject_headers,
    install_http_middleware,
)
from tracewire.propagation import B3Propagator
from tracewire.tracer.otel_bridge import (
    from_otel_span_context,
    span_context_from_otel_context,
    to_otel_span_context,
)
from tracewire.tracer.span_context import SpanContext, TraceFlags
from tracewire.tracer.trace_state import TraceState

TRACE_ID = "0af7651916cd43dd8448eb211c80319c"
SPAN_ID = "b7ad6b7169203331"
CHILD_SPAN_ID = "1111111111111111"
TRACEPARENT = f"00-{TRACE_ID}-{SPAN_ID}-01"


class FakeApp:
    """Minimal stand-in for the Starlette ``app.middleware("http")`` decorator."""

    def __init__(self):
        self.middlewares = []

    def middleware(self, kind):
        def decorator(func):
            self.middlewares.append((kind, func))
            return func
        return decorator


class FakeRequest:
    def __init__(self, headers):
        self.headers = headers


class TestOtelBridge:
    def test_round_trip(self):
        original = SpanContext(
            TRACE_ID, SPAN_ID, TraceFlags.SAMPLED, trace_state=TraceState("a=1,b=2"), is_remote=True
        )
        otel_context = to_otel_span_context(original)
        assert otel_context.trace_id == int(TRACE_ID, 16)
        assert otel_context.span_id == int(SPAN_ID, 16)
        assert otel_context.trace_flags.sampled
        assert otel_context.trace_state.get("b") == "2"
        assert from_otel_span_context(otel_context) == original

    def test_unsampled_without_state(self):
        otel_context = OTelSpanContext(
            trace_id=int(TRACE_ID, 16),
            span_id=int(SPAN_ID, 16),
            is_remote=False,
            trace_flags=OTelTraceFlags(0),
            trace_state=OTelTraceState(),
        )
        converted = from_otel_span_context(otel_context)
        assert converted == SpanContext(TRACE_ID, SPAN_ID)

    def test_span_context_from_otel_context(self):
        otel_context = to_otel_span_context(SpanContext(TRACE_ID, SPAN_ID, TraceFlags.SAMPLED))
        context = otel_trace.set_span_in_context(NonRecordingSpan(otel_context), ROOT_CONTEXT)
        assert span_context_from_otel_context(context).trace_id == TRACE_ID
        assert span_context_from_otel_context(ROOT_CONTEXT) is None


class TestHttpClient:
    def test_injects_tracewire_span_context(self):
        context = set_span_context(ROOT_CONTEXT, SpanContext(TRACE_ID, SPAN_ID, TraceFlags.SAMPLED))
        headers = {"accept": "application/json"}
        result = inject_headers(headers, context=context)
        assert result is headers
        assert headers["traceparent"] == TRACEPARENT

    def test_falls_back_to_otel_span(self):
        otel_context = to_otel_span_context(SpanContext(TRACE_ID, SPAN_ID, TraceFlags.SAMPLED))
        context = otel_trace.set_span_in_context(NonRecordingSpan(otel_context), ROOT_CONTEXT)
        headers = inject_headers({}, context=context)
        assert headers["traceparent"] == TRACEPARENT

    def test_custom_propagator(self):
        context = set_span_context(ROOT_CONTEXT, SpanContext(TRACE_ID, SPAN_ID, TraceFlags.SAMPLED))
        headers = inject_headers({}, context=context, propagator=B3Propagator())
        assert headers == {"b3": f"{TRACE_ID}-{SPAN_ID}-1"}

    def test_nothing_to_propagate(self):
        assert inject_headers({}, context=ROOT_CONTEXT) == {}

    def test_local_otel_child_span_wins_over_remote_parent(self):
        context = extract_context({"traceparent": TRACEPARENT}, context=ROOT_CONTEXT)
        child = to_otel_span_context(SpanContext(TRACE_ID, CHILD_SPAN_ID, TraceFlags.SAMPLED))
        context = otel_trace.set_span_in_context(NonRecordingSpan(child), context)
        headers = inject_headers({}, context=context)
        assert headers["traceparent"] == f"00-{TRACE_ID}-{CHILD_SPAN_ID}-01"

    def test_remote_otel_span_does_not_override_tracewire_context(self):
        remote = to_otel_span_context(
            SpanContext(TRACE_ID, CHILD_SPAN_ID, TraceFlags.SAMPLED, is_remote=True)
        )
        context = otel_trace.set_span_in_context(NonRecordingSpan(remote), ROOT_CONTEXT)
        context = set_span_context(context, SpanContext(TRACE_ID, SPAN_ID, TraceFlags.SAMPLED))
        assert inject_headers({}, context=context)["traceparent"] == TRACEPARENT


class TestHttpServer:
    def test_extract_context(self):
        context = extract_context({"traceparent": TRACEPARENT, "baggage": "user=alice"}, context=ROOT_CONTEXT)
        assert get_span_context(context).is_remote
        assert get_baggage(context).get_entry("user").value == "alice"

    def test_extracted_span_is_visible_to_opentelemetry(self):
        context = extract_context({"traceparent": TRACEPARENT}, context=ROOT_CONTEXT)
        otel_context = otel_trace.get_current_span(context).get_span_context()
        assert otel_context.is_valid
        assert otel_context.is_remote
        assert otel_context.trace_id == int(TRACE_ID, 16)
        assert otel_context.span_id == int(SPAN_ID, 16)

    def test_no_span_context_leaves_opentelemetry_untouched(self):
        context = extract_context({"baggage": "user=alice"}, context=ROOT_CONTEXT)
        assert not otel_trace.get_current_span(context).get_span_context().is_valid

    def test_extract_parent_context(self):
        parent = extract_parent_context({"traceparent": TRACEPARENT})
        assert parent == SpanContext(TRACE_ID, SPAN_ID, 1, is_remote=True)

    def test_extract_parent_context_invalid(self):
        assert extract_parent_context({"traceparent": "garbage"}) is None


class TestMiddleware:
    def test_request_runs_in_extracted_context(self):
        app = FakeApp()
        install_http_middleware(app)
        assert len(app.middlewares) == 1
        kind, middleware = app.middlewares[0]
        assert kind == "http"

        async def call_next(request):
            return get_span_context(get_current())

        seen = asyncio.run(middleware(FakeRequest({"traceparent": TRACEPARENT}), call_next))
        assert seen.trace_id == TRACE_ID
        assert get_span_context() is None

    @pytest.mark.parametrize("headers", [{}, {"traceparent": "garbage"}])
    def test_request_without_context(self, headers):
        app = FakeApp()
        install_http_middleware(app)
        _, middleware = app.middlewares[0]

        async def call_next(request):
            return get_span_context(get_current())

        assert asyncio.run(middleware(FakeRequest(headers), call_next)) is None

    def test_opentelemetry_sees_remote_parent(self):
        app = FakeApp()
        install_http_middleware(app)
        _, middleware = app.middlewares[0]

        async def call_next(request):
            return otel_trace.get_current_span().get_span_context()

        seen = asyncio.run(middleware(FakeRequest({"traceparent": TRACEPARENT}), call_next))
        assert seen.is_remote
        assert seen.span_id == int(SPAN_ID, 16)
