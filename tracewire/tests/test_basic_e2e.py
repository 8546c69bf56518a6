"""Basic smoke tests for tracewire.

Quick sanity checks that the public API hangs together: a request is
propagated from a client carrier through a server and on to a downstream call.
"""

import pytest

import tracewire
from tracewire import (
    ROOT_CONTEXT,
    SpanContext,
    TraceFlags,
    build_propagator,
    create_baggage,
    extract,
    get_baggage,
    get_span_context,
    inject,
    load_config,
    set_baggage,
    set_span_context,
)


def test_version_exposed():
    """Smoke test: version is accessible."""
    assert hasattr(tracewire, '__version__')
    assert isinstance(tracewire.__version__, str)
    assert len(tracewire.__version__) > 0


def test_request_hops_across_services():
    """A context injected by a client is extracted by the server and forwarded downstream."""
    client_context = set_span_context(
        ROOT_CONTEXT,
        SpanContext("4bf92f3577b34da6a3ce929d0e0e4736", "00f067aa0ba902b7", TraceFlags.SAMPLED),
    )
    client_context = set_baggage(client_context, create_baggage({"tenant": "acme"}))

    outbound = {}
    inject(outbound, context=client_context)

    server_context = extract(outbound, context=ROOT_CONTEXT)
    remote = get_span_context(server_context)
    assert remote.is_remote
    assert remote.trace_id == "4bf92f3577b34da6a3ce929d0e0e4736"
    assert get_baggage(server_context).get_entry("tenant").value == "acme"

    downstream = {}
    inject(downstream, context=server_context)
    assert downstream == outbound


def test_configured_propagator(tmp_path, monkeypatch):
    """Smoke test: a config file selects the wire formats."""
    for name in ("OTEL_PROPAGATORS", "TRACEWIRE_PROPAGATORS", "TRACEWIRE_B3_INJECT_ENCODING"):
        monkeypatch.delenv(name, raising=False)
    config_file = tmp_path / "tracewire.toml"
    config_file.write_text('[propagation]\npropagators = ["b3", "baggage"]\nb3_inject_encoding = "multi"\n')

    propagator = build_propagator(load_config(config_file=str(config_file)))
    assert propagator.fields() == ["x-b3-traceid", "x-b3-spanid", "x-b3-flags", "x-b3-sampled", "x-b3-parentspanid", "baggage"]


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
