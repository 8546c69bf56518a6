"""Propagator that fans out to an ordered list of propagators."""

from __future__ import annotations

import logging
from typing import Any, List, Optional, Sequence

from opentelemetry.context import Context
from opentelemetry.propagators import textmap

from tracewire.propagation.textmap import TextMapPropagator, default_getter, default_setter


class CompositePropagator(TextMapPropagator):
    """
    Runs several propagators as one.

    A failing member never affects the others: its exception is logged at
    DEBUG and the remaining propagators still run.

    Args:
        propagators: Propagators applied in order
        logger: Logger for member failures, defaults to this module's logger
    """

    def __init__(
        self,
        propagators: Optional[Sequence[TextMapPropagator]] = None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self._propagators = list(propagators or [])
        self.logger = logger or logging.getLogger(__name__)

    @property
    def propagators(self) -> List[TextMapPropagator]:
        return list(self._propagators)

    def inject(
        self,
        context: Context,
        carrier: Any,
        setter: textmap.Setter = default_setter,
    ) -> None:
        """Inject with every propagator; on header collisions the later one wins."""
        for propagator in self._propagators:
            try:
                propagator.inject(context, carrier, setter)
            except Exception:
                self.logger.debug(
                    "Failed to inject with %s", type(propagator).__name__, exc_info=True
                )

    def extract(
        self,
        context: Context,
        carrier: Any,
        getter: textmap.Getter = default_getter,
    ) -> Context:
        """Fold the context through every propagator, skipping those that raise."""
        for propagator in self._propagators:
            try:
                context = propagator.extract(context, carrier, getter)
            except Exception:
                self.logger.debug(
                    "Failed to extract with %s", type(propagator).__name__, exc_info=True
                )
        return context

    def fields(self) -> List[str]:
        fields: List[str] = []
        for propagator in self._propagators:
            propagator_fields = getattr(propagator, "fields", None)
            if not callable(propagator_fields):
                continue
            for field in propagator_fields():
                if field not in fields:
                    fields.append(field)
        return fields
