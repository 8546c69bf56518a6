"""W3C baggage header encoding and decoding.

https://www.w3.org/TR/baggage/
"""

from __future__ import annotations

from typing import Dict, Iterable, List, NamedTuple, Optional
from urllib.parse import quote, unquote

from tracewire.baggage.baggage import (
    Baggage,
    BaggageEntry,
    BaggageEntryMetadata,
    baggage_entry_metadata_from_string,
)

BAGGAGE_HEADER = "baggage"
BAGGAGE_ITEMS_SEPARATOR = ","
BAGGAGE_PROPERTIES_SEPARATOR = ";"
BAGGAGE_KEY_PAIR_SEPARATOR = "="
BAGGAGE_MAX_NAME_VALUE_PAIRS = 180
BAGGAGE_MAX_PER_NAME_VALUE_PAIRS = 4096
BAGGAGE_MAX_TOTAL_LENGTH = 8192

# Characters encodeURIComponent leaves alone besides alphanumerics and "-_.~".
_URI_COMPONENT_SAFE = "!*'()"


class ParsedBaggageEntry(NamedTuple):
    key: str
    value: str
    metadata: Optional[BaggageEntryMetadata] = None


def encode_component(text: str) -> str:
    return quote(text, safe=_URI_COMPONENT_SAFE)


def decode_component(text: str) -> str:
    return unquote(text)


def byte_length(text: str) -> int:
    return len(text.encode("utf-8"))


def serialize_key_pairs(key_pairs: Iterable[str]) -> str:
    """
    Join encoded pairs with ``,`` without exceeding the total header limit.

    The check is a running total: a pair that would overflow is skipped and
    later, shorter pairs may still be appended.
    """
    header = ""
    for pair in key_pairs:
        candidate = f"{header}{BAGGAGE_ITEMS_SEPARATOR if header else ''}{pair}"
        if byte_length(candidate) > BAGGAGE_MAX_TOTAL_LENGTH:
            continue
        header = candidate
    return header


def get_key_pairs(baggage: Baggage) -> List[str]:
    pairs = []
    for key, entry in baggage.get_all_entries():
        pair = f"{encode_component(key)}{BAGGAGE_KEY_PAIR_SEPARATOR}{encode_component(entry.value)}"
        if entry.metadata is not None:
            pair += BAGGAGE_PROPERTIES_SEPARATOR + str(entry.metadata)
        pairs.append(pair)
    return pairs


def serialize_baggage(baggage: Baggage) -> str:
    """Encode a baggage for the wire, applying the per-entry, count and total limits."""
    key_pairs = [
        pair for pair in get_key_pairs(baggage)
        if byte_length(pair) <= BAGGAGE_MAX_PER_NAME_VALUE_PAIRS
    ]
    return serialize_key_pairs(key_pairs[:BAGGAGE_MAX_NAME_VALUE_PAIRS])


def parse_pair_key_value(entry: str) -> Optional[ParsedBaggageEntry]:
    """
    Parse one list member, ``key=value[;prop[=val]]...``.

    Returns None when the first token carries no ``key=value`` pair.
    """
    value_props = entry.split(BAGGAGE_PROPERTIES_SEPARATOR)
    key_pair_part = value_props[0]
    separator_index = key_pair_part.find(BAGGAGE_KEY_PAIR_SEPARATOR)
    if separator_index <= 0:
        return None
    key = decode_component(key_pair_part[:separator_index].strip())
    value = decode_component(key_pair_part[separator_index + 1:].strip())
    if not key:
        return None
    metadata = None
    if len(value_props) > 1:
        metadata = baggage_entry_metadata_from_string(
            BAGGAGE_PROPERTIES_SEPARATOR.join(value_props[1:])
        )
    return ParsedBaggageEntry(key, value, metadata)


def parse_key_pairs_into_record(header: Optional[str]) -> Dict[str, BaggageEntry]:
    record: Dict[str, BaggageEntry] = {}
    if not header:
        return record
    for entry in header.split(BAGGAGE_ITEMS_SEPARATOR):
        parsed = parse_pair_key_value(entry)
        if parsed is None:
            continue
        record[parsed.key] = BaggageEntry(value=parsed.value, metadata=parsed.metadata)
    return record
