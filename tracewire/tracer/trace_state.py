"""W3C tracestate list: parsing, serialization and persistent updates.

The list is kept front-to-back in recency order: the most recently set (or
the left-most parsed) member comes first, matching the order it is written
back onto the wire.

https://www.w3.org/TR/trace-context/#tracestate-header
"""

from __future__ import annotations

import logging
import re
from typing import Iterator, List, Optional, Sequence, Tuple

logger = logging.getLogger(__name__)

MAX_TRACE_STATE_ITEMS = 32
MAX_TRACE_STATE_LEN = 512
LIST_MEMBERS_SEPARATOR = ","
LIST_MEMBER_KEY_VALUE_SPLITTER = "="

_KEY_CHAR_RANGE = r"[_0-9a-z\-*/]"
_VALID_KEY = rf"[a-z]{_KEY_CHAR_RANGE}{{0,255}}"
_VALID_VENDOR_KEY = rf"[a-z0-9]{_KEY_CHAR_RANGE}{{0,240}}@[a-z]{_KEY_CHAR_RANGE}{{0,13}}"
_VALID_KEY_REGEX = re.compile(rf"(?:{_VALID_KEY}|{_VALID_VENDOR_KEY})")
_VALID_VALUE_BASE_REGEX = re.compile(r"[ -~]{0,255}[!-~]")
_INVALID_VALUE_COMMA_EQUAL_REGEX = re.compile(r"[,=]")

# OWS per RFC 7230: spaces and horizontal tabs only.
_OWS = " \t"


def validate_key(key: str) -> bool:
    return isinstance(key, str) and bool(_VALID_KEY_REGEX.fullmatch(key))


def validate_value(value: str) -> bool:
    return (
        isinstance(value, str)
        and bool(_VALID_VALUE_BASE_REGEX.fullmatch(value))
        and not _INVALID_VALUE_COMMA_EQUAL_REGEX.search(value)
    )


class TraceState:
    """
    Immutable vendor key/value list carried in the ``tracestate`` header.

    Every mutator returns a new instance. Parsing never raises: invalid
    members are dropped one by one, and an over-long header yields an empty
    state.
    """

    __slots__ = ("_entries",)

    def __init__(self, raw_trace_state: Optional[str] = None) -> None:
        self._entries: Tuple[Tuple[str, str], ...] = ()
        if raw_trace_state:
            self._entries = _parse(raw_trace_state)

    @classmethod
    def parse(cls, raw_trace_state: Optional[str]) -> "TraceState":
        return cls(raw_trace_state)

    @classmethod
    def from_items(cls, items: Sequence[Tuple[str, str]]) -> "TraceState":
        """Build a state from ``(key, value)`` pairs, dropping invalid or repeated keys."""
        entries: List[Tuple[str, str]] = []
        for key, value in items:
            if not validate_key(key) or not validate_value(value):
                continue
            if any(key == seen for seen, _ in entries):
                continue
            entries.append((key, value))
        return cls._from_entries(entries[:MAX_TRACE_STATE_ITEMS])

    @classmethod
    def _from_entries(cls, entries: Sequence[Tuple[str, str]]) -> "TraceState":
        state = cls()
        state._entries = tuple(entries)
        return state

    def get(self, key: str) -> Optional[str]:
        for entry_key, value in self._entries:
            if entry_key == key:
                return value
        return None

    def set(self, key: str, value: str) -> "TraceState":
        """Return a new state with ``key`` moved (or inserted) at the front."""
        if not validate_key(key) or not validate_value(value):
            logger.warning("Invalid tracestate member %r=%r, ignoring", key, value)
            return self
        remaining = [(k, v) for k, v in self._entries if k != key]
        return TraceState._from_entries([(key, value)] + remaining[: MAX_TRACE_STATE_ITEMS - 1])

    def unset(self, key: str) -> "TraceState":
        if key not in self:
            return self
        return TraceState._from_entries([(k, v) for k, v in self._entries if k != key])

    def serialize(self) -> str:
        return LIST_MEMBERS_SEPARATOR.join(
            f"{key}{LIST_MEMBER_KEY_VALUE_SPLITTER}{value}" for key, value in self._entries
        )

    def keys(self) -> List[str]:
        return [key for key, _ in self._entries]

    def items(self) -> List[Tuple[str, str]]:
        return list(self._entries)

    def __contains__(self, key: object) -> bool:
        return any(entry_key == key for entry_key, _ in self._entries)

    def __iter__(self) -> Iterator[str]:
        return iter(self.keys())

    def __len__(self) -> int:
        return len(self._entries)

    def __bool__(self) -> bool:
        return bool(self._entries)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, TraceState):
            return NotImplemented
        return self._entries == other._entries

    def __hash__(self) -> int:
        return hash(self._entries)

    def __repr__(self) -> str:
        return f"TraceState({self.serialize()!r})"


def _parse(raw_trace_state: str) -> Tuple[Tuple[str, str], ...]:
    if len(raw_trace_state) > MAX_TRACE_STATE_LEN:
        logger.debug("tracestate longer than %d characters, discarding", MAX_TRACE_STATE_LEN)
        return ()

    entries: List[Tuple[str, str]] = []
    seen = set()
    for member in raw_trace_state.split(LIST_MEMBERS_SEPARATOR):
        member = member.strip(_OWS)
        key, sep, value = member.partition(LIST_MEMBER_KEY_VALUE_SPLITTER)
        if not sep:
            continue
        # "a=1=" leaves "1=" as the value, which the value grammar rejects.
        if not validate_key(key) or not validate_value(value):
            continue
        if key in seen:
            continue
        seen.add(key)
        entries.append((key, value))
        if len(entries) == MAX_TRACE_STATE_ITEMS:
            break
    return tuple(entries)
