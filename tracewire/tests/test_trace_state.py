"""Tests for tracestate parsing, serialization and updates."""

import unittest

from tracewire.tracer.trace_state import (
    MAX_TRACE_STATE_ITEMS,
    MAX_TRACE_STATE_LEN,
    TraceState,
    validate_key,
    validate_value,
)


class TestTraceStateParse(unittest.TestCase):
    """Test parsing of tracestate header values."""

    def test_parse_and_serialize(self):
        state = TraceState("a=1,b=2")
        self.assertEqual(state.serialize(), "a=1,b=2")
        self.assertEqual(state.get("a"), "1")
        self.assertEqual(state.get("b"), "2")
        self.assertEqual(len(state), 2)

    def test_optional_whitespace_is_trimmed(self):
        state = TraceState("a=1 ,\tb=2 ,  c=3")
        self.assertEqual(state.serialize(), "a=1,b=2,c=3")

    def test_empty_members_are_skipped(self):
        state = TraceState("a=1,,b=2,")
        self.assertEqual(state.serialize(), "a=1,b=2")

    def test_first_duplicate_wins(self):
        state = TraceState("a=1,b=2,a=3")
        self.assertEqual(state.serialize(), "a=1,b=2")

    def test_invalid_members_are_dropped_individually(self):
        state = TraceState("a=1,B=2,c=3,noequals,d=")
        self.assertEqual(state.serialize(), "a=1,c=3")

    def test_vendor_keys(self):
        state = TraceState("tenant@vendor=x,rojo=00f067aa0ba902b7")
        self.assertEqual(state.get("tenant@vendor"), "x")
        self.assertEqual(state.keys(), ["tenant@vendor", "rojo"])

    def test_trailing_equals_value_is_dropped(self):
        """The member a=1= is rejected because its value 1= contains "="."""
        state = TraceState("a=1=,b=2")
        self.assertIsNone(state.get("a"))
        self.assertEqual(state.serialize(), "b=2")

    def test_over_long_header_yields_empty_state(self):
        raw = "a=" + "x" * (MAX_TRACE_STATE_LEN - 1)
        self.assertEqual(len(raw), MAX_TRACE_STATE_LEN + 1)
        state = TraceState(raw)
        self.assertEqual(len(state), 0)
        self.assertEqual(state.serialize(), "")

    def test_header_of_exactly_512_chars_is_parsed(self):
        raw = "a=" + "x" * 254 + ",b=" + "y" * 253
        self.assertEqual(len(raw), MAX_TRACE_STATE_LEN)
        state = TraceState(raw)
        self.assertEqual(len(state), 2)
        self.assertEqual(state.serialize(), raw)

    def test_invalid_members_do_not_count_toward_cap(self):
        valid = ",".join(f"k{i}=v" for i in range(MAX_TRACE_STATE_ITEMS + 1))
        state = TraceState("BAD=1,noeq,1x=2," + valid)
        self.assertEqual(state.keys(), [f"k{i}" for i in range(MAX_TRACE_STATE_ITEMS)])
        self.assertNotIn(f"k{MAX_TRACE_STATE_ITEMS}", state)

    def test_entry_cap(self):
        raw = ",".join(f"k{i}=v{i}" for i in range(MAX_TRACE_STATE_ITEMS + 1))
        state = TraceState(raw)
        self.assertEqual(len(state), MAX_TRACE_STATE_ITEMS)
        self.assertIn("k0", state)
        self.assertNotIn(f"k{MAX_TRACE_STATE_ITEMS}", state)

    def test_idempotence(self):
        samples = [
            "a=1,b=2",
            " a=1 , b=2,a=3",
            "rojo=00f067aa0ba902b7,congo=t61rcWkgMzE",
            "a=1=,b=2,C=3,tenant@vendor=x",
            "",
        ]
        for raw in samples:
            parsed = TraceState.parse(raw)
            self.assertEqual(TraceState.parse(parsed.serialize()), parsed)


class TestTraceStateUpdates(unittest.TestCase):
    """Test that updates are persistent and keep recency order."""

    def test_set_moves_key_to_front(self):
        original = TraceState("a=1,b=2")
        updated = original.set("b", "3")
        self.assertEqual(updated.serialize(), "b=3,a=1")
        self.assertEqual(original.serialize(), "a=1,b=2")

    def test_set_inserts_new_key_at_front(self):
        updated = TraceState("a=1").set("z", "9")
        self.assertEqual(updated.serialize(), "z=9,a=1")

    def test_set_invalid_member_is_ignored_with_warning(self):
        state = TraceState("a=1")
        with self.assertLogs("tracewire.tracer.trace_state", level="WARNING"):
            result = state.set("Invalid Key", "1")
        self.assertIs(result, state)

    def test_set_keeps_entry_cap(self):
        raw = ",".join(f"k{i}=v" for i in range(MAX_TRACE_STATE_ITEMS))
        updated = TraceState(raw).set("new", "1")
        self.assertEqual(len(updated), MAX_TRACE_STATE_ITEMS)
        self.assertEqual(updated.keys()[0], "new")

    def test_unset(self):
        state = TraceState("a=1,b=2")
        self.assertEqual(state.unset("a").serialize(), "b=2")
        self.assertIs(state.unset("missing"), state)

    def test_from_items_drops_invalid_pairs(self):
        state = TraceState.from_items([("a", "1"), ("B", "2"), ("a", "3"), ("c", "x,y")])
        self.assertEqual(state.items(), [("a", "1")])


class TestTraceStateValidation(unittest.TestCase):
    def test_key_grammar(self):
        self.assertTrue(validate_key("a"))
        self.assertTrue(validate_key("a" + "b" * 255))
        self.assertFalse(validate_key("a" + "b" * 256))
        self.assertFalse(validate_key("1abc"))
        self.assertTrue(validate_key("1abc@vendor"))
        self.assertFalse(validate_key(""))

    def test_value_grammar(self):
        self.assertTrue(validate_value("0123 abc"))
        self.assertFalse(validate_value("ends with space "))
        self.assertFalse(validate_value("a,b"))
        self.assertFalse(validate_value("a=b"))
        self.assertFalse(validate_value(""))


if __name__ == "__main__":
    unittest.main()
