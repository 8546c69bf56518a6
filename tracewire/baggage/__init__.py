"""Baggage model, context slot and W3C codec."""

from tracewire.baggage.baggage import (
    Baggage,
    BaggageEntry,
    BaggageEntryMetadata,
    baggage_entry_metadata_from_string,
    create_baggage,
    delete_baggage,
    get_active_baggage,
    get_baggage,
    set_baggage,
)
from tracewire.baggage.codec import (
    BAGGAGE_HEADER,
    BAGGAGE_MAX_NAME_VALUE_PAIRS,
    BAGGAGE_MAX_PER_NAME_VALUE_PAIRS,
    BAGGAGE_MAX_TOTAL_LENGTH,
    get_key_pairs,
    parse_key_pairs_into_record,
    parse_pair_key_value,
    serialize_baggage,
    serialize_key_pairs,
)

__all__ = [
    "Baggage",
    "BaggageEntry",
    "BaggageEntryMetadata",
    "baggage_entry_metadata_from_string",
    "create_baggage",
    "get_baggage",
    "set_baggage",
    "delete_baggage",
    "get_active_baggage",
    "BAGGAGE_HEADER",
    "BAGGAGE_MAX_NAME_VALUE_PAIRS",
    "BAGGAGE_MAX_PER_NAME_VALUE_PAIRS",
    "BAGGAGE_MAX_TOTAL_LENGTH",
    "get_key_pairs",
    "serialize_key_pairs",
    "serialize_baggage",
    "parse_pair_key_value",
    "parse_key_pairs_into_record",
]
