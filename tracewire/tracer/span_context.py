"""Immutable trace metadata and id validity rules."""

from __future__ import annotations

import re
from dataclasses import dataclass, replace
from enum import IntFlag
from typing import Any, Optional

from tracewire.tracer.trace_state import TraceState

INVALID_TRACE_ID = "0" * 32
INVALID_SPAN_ID = "0" * 16

_VALID_TRACE_ID_REGEX = re.compile(r"[0-9a-f]{32}", re.IGNORECASE)
_VALID_SPAN_ID_REGEX = re.compile(r"[0-9a-f]{16}", re.IGNORECASE)


class TraceFlags(IntFlag):
    NONE = 0
    SAMPLED = 1


@dataclass(frozen=True)
class SpanContext:
    trace_id: str
    span_id: str
    trace_flags: int = TraceFlags.NONE
    trace_state: Optional[TraceState] = None
    is_remote: bool = False

    def is_valid(self) -> bool:
        return is_span_context_valid(self)

    @property
    def is_sampled(self) -> bool:
        return bool(self.trace_flags & TraceFlags.SAMPLED)

    def with_trace_state(self, trace_state: Optional[TraceState]) -> "SpanContext":
        return replace(self, trace_state=trace_state)


INVALID_SPAN_CONTEXT = SpanContext(
    trace_id=INVALID_TRACE_ID,
    span_id=INVALID_SPAN_ID,
    trace_flags=TraceFlags.NONE,
)


def is_valid_trace_id(trace_id: Any) -> bool:
    """Return True for a 32 hex character trace id that is not all zeros."""
    if not isinstance(trace_id, str):
        return False
    return bool(_VALID_TRACE_ID_REGEX.fullmatch(trace_id)) and trace_id != INVALID_TRACE_ID


def is_valid_span_id(span_id: Any) -> bool:
    """Return True for a 16 hex character span id that is not all zeros."""
    if not isinstance(span_id, str):
        return False
    return bool(_VALID_SPAN_ID_REGEX.fullmatch(span_id)) and span_id != INVALID_SPAN_ID


def is_span_context_valid(span_context: Optional[SpanContext]) -> bool:
    if span_context is None:
        return False
    return is_valid_trace_id(span_context.trace_id) and is_valid_span_id(span_context.span_id)
