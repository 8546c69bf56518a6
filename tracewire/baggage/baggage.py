"""Immutable baggage container and its context slot."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional, Tuple, Union

from opentelemetry.context import Context

from tracewire.context.context import create_key, delete_value, get_current, get_value, set_value

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BaggageEntryMetadata:
    """Opaque property text that follows an entry's value, kept verbatim."""

    raw: str = ""

    def __str__(self) -> str:
        return self.raw


def baggage_entry_metadata_from_string(raw: Any) -> BaggageEntryMetadata:
    if not isinstance(raw, str):
        logger.warning("Cannot create baggage metadata from unknown type: %s", type(raw).__name__)
        raw = ""
    return BaggageEntryMetadata(raw)


@dataclass(frozen=True)
class BaggageEntry:
    value: str
    metadata: Optional[BaggageEntryMetadata] = None


EntryInput = Union[BaggageEntry, Mapping[str, Any], str]


def _to_entry(entry: EntryInput) -> BaggageEntry:
    if isinstance(entry, BaggageEntry):
        return entry
    if isinstance(entry, str):
        return BaggageEntry(value=entry)
    return BaggageEntry(value=entry["value"], metadata=entry.get("metadata"))


class Baggage:
    """
    Persistent key -> BaggageEntry mapping.

    set/remove/clear never touch the receiver; they hand back a new Baggage.
    """

    __slots__ = ("_entries",)

    def __init__(self, entries: Optional[Mapping[str, EntryInput]] = None) -> None:
        self._entries: Dict[str, BaggageEntry] = {
            key: _to_entry(entry) for key, entry in (entries or {}).items()
        }

    def get_entry(self, key: str) -> Optional[BaggageEntry]:
        return self._entries.get(key)

    def get_all_entries(self) -> List[Tuple[str, BaggageEntry]]:
        return list(self._entries.items())

    def set_entry(self, key: str, entry: EntryInput) -> "Baggage":
        entries = dict(self._entries)
        entries[key] = _to_entry(entry)
        return Baggage(entries)

    def remove_entry(self, key: str) -> "Baggage":
        entries = dict(self._entries)
        entries.pop(key, None)
        return Baggage(entries)

    def remove_entries(self, *keys: str) -> "Baggage":
        drop = set(keys)
        return Baggage({k: v for k, v in self._entries.items() if k not in drop})

    def clear(self) -> "Baggage":
        return Baggage()

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Baggage):
            return NotImplemented
        return self._entries == other._entries

    def __repr__(self) -> str:
        return f"Baggage({self._entries!r})"


def create_baggage(entries: Optional[Mapping[str, EntryInput]] = None) -> Baggage:
    return Baggage(entries)


_BAGGAGE_KEY = create_key("tracewire-baggage")


def get_baggage(context: Optional[Context] = None) -> Optional[Baggage]:
    return get_value(_BAGGAGE_KEY, context)


def set_baggage(context: Context, baggage: Baggage) -> Context:
    return set_value(_BAGGAGE_KEY, baggage, context)


def delete_baggage(context: Context) -> Context:
    return delete_value(_BAGGAGE_KEY, context)


def get_active_baggage() -> Optional[Baggage]:
    return get_baggage(get_current())
