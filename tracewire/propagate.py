"""Builds propagators from configuration and offers inject/extract shortcuts."""

from __future__ import annotations

import logging
from typing import Any, Callable, Dict, List, Optional

from opentelemetry.context import Context
from opentelemetry.propagators import textmap

from tracewire.config import PropagationConfig, TracewireConfig
from tracewire.context.context import get_current
from tracewire.errors import ConfigError
from tracewire.propagation.aws_xray import AWSXRayLambdaPropagator, AWSXRayPropagator
from tracewire.propagation.b3 import B3InjectEncoding, B3MultiPropagator, B3Propagator
from tracewire.propagation.baggage import W3CBaggagePropagator
from tracewire.propagation.composite import CompositePropagator
from tracewire.propagation.jaeger import JaegerPropagator
from tracewire.propagation.textmap import TextMapPropagator, default_getter, default_setter
from tracewire.propagation.tracecontext import W3CTraceContextPropagator

_B3_ENCODINGS = {
    "single": B3InjectEncoding.SINGLE_HEADER,
    "multi": B3InjectEncoding.MULTI_HEADER,
}

_FACTORIES: Dict[str, Callable[[PropagationConfig], TextMapPropagator]] = {
    "tracecontext": lambda config: W3CTraceContextPropagator(),
    "baggage": lambda config: W3CBaggagePropagator(),
    "b3": lambda config: B3Propagator(inject_encoding=_B3_ENCODINGS[config.b3_inject_encoding]),
    "b3multi": lambda config: B3MultiPropagator(),
    "jaeger": lambda config: JaegerPropagator(
        custom_trace_header=config.jaeger_trace_header,
        custom_baggage_prefix=config.jaeger_baggage_prefix,
    ),
    "xray": lambda config: AWSXRayPropagator(),
    "xray-lambda": lambda config: AWSXRayLambdaPropagator(),
}

PROPAGATOR_NAMES: List[str] = list(_FACTORIES) + ["none"]

_default_propagator = CompositePropagator([W3CTraceContextPropagator(), W3CBaggagePropagator()])


def create_propagator(name: str, config: Optional[PropagationConfig] = None) -> TextMapPropagator:
    """
    Create one propagator by its configuration name.

    Raises:
        ConfigError: if the name is unknown or is ``none``
    """
    config = config or PropagationConfig()
    factory = _FACTORIES.get(name.strip().lower())
    if factory is None:
        raise ConfigError("Unknown propagator", {"name": name, "known": PROPAGATOR_NAMES})
    return factory(config)


def build_propagator(
    config: Optional[TracewireConfig] = None,
    logger: Optional[logging.Logger] = None,
) -> CompositePropagator:
    """
    Wire the configured propagators into a composite, in configuration order.

    Duplicate names are used once. ``none`` anywhere in the list yields a
    composite that propagates nothing.

    Args:
        config: Loaded configuration; defaults apply when omitted
        logger: Logger handed to the composite for member failures
    """
    propagation = (config or TracewireConfig()).propagation
    names: List[str] = []
    for name in propagation.propagators:
        if name not in names:
            names.append(name)
    if "none" in names:
        return CompositePropagator([], logger=logger)
    return CompositePropagator(
        [create_propagator(name, propagation) for name in names],
        logger=logger,
    )


def get_default_propagator() -> CompositePropagator:
    return _default_propagator


def inject(
    carrier: Any,
    context: Optional[Context] = None,
    setter: textmap.Setter = default_setter,
    propagator: Optional[TextMapPropagator] = None,
) -> None:
    """Inject ``context`` (the current context by default) into ``carrier``."""
    if context is None:
        context = get_current()
    (propagator or _default_propagator).inject(context, carrier, setter)


def extract(
    carrier: Any,
    context: Optional[Context] = None,
    getter: textmap.Getter = default_getter,
    propagator: Optional[TextMapPropagator] = None,
) -> Context:
    """Extract from ``carrier`` into ``context`` (the current context by default)."""
    if context is None:
        context = get_current()
    return (propagator or _default_propagator).extract(context, carrier, getter)
