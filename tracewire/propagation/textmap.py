"""Text-map propagator interface and the default dict carrier accessors."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, List, Optional

from opentelemetry.context import Context
from opentelemetry.propagators import textmap

from tracewire.utils.helpers import first_header_value

__all__ = [
    "TextMapPropagator",
    "DefaultGetter",
    "DefaultSetter",
    "default_getter",
    "default_setter",
    "first_header_value",
]


class DefaultGetter(textmap.Getter):
    """Reads header values straight out of a mapping carrier."""

    def get(self, carrier: Any, key: str) -> Optional[Any]:
        """
        Return the raw carrier value for ``key``.

        The value is handed back as stored (a string, a list of strings, or
        None); propagators normalise it themselves.
        """
        if carrier is None:
            return None
        return carrier.get(key)

    def keys(self, carrier: Any) -> List[str]:
        if carrier is None:
            return []
        return list(carrier.keys())


class DefaultSetter(textmap.Setter):
    def set(self, carrier: Any, key: str, value: str) -> None:
        if carrier is None:
            return
        carrier[key] = value


default_getter = DefaultGetter()
default_setter = DefaultSetter()


class TextMapPropagator(ABC):
    """
    Injects values from a context into a carrier and extracts them back.

    Propagators are stateless past construction. Extraction never raises on
    malformed input; it returns the input context unchanged.
    """

    @abstractmethod
    def inject(
        self,
        context: Context,
        carrier: Any,
        setter: textmap.Setter = default_setter,
    ) -> None:
        """
        Write this propagator's headers for ``context`` into ``carrier``.

        Args:
            context: Context holding the values to propagate
            carrier: Outbound carrier, usually a header dict
            setter: Accessor used to write into the carrier
        """

    @abstractmethod
    def extract(
        self,
        context: Context,
        carrier: Any,
        getter: textmap.Getter = default_getter,
    ) -> Context:
        """
        Read this propagator's headers from ``carrier``.

        Args:
            context: Context to derive from
            carrier: Inbound carrier, usually a header dict
            getter: Accessor used to read from the carrier

        Returns:
            A new context holding the extracted values, or ``context`` itself
            when nothing valid was found
        """

    @abstractmethod
    def fields(self) -> List[str]:
        """Header names this propagator writes. A new list on every call."""
