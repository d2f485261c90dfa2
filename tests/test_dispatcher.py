"""Tests for ParameterDispatcher.

Tests cover:
- Change-threshold suppression against the last sent value
- Both batch shapes
- Skipping of non-numeric entries
- Unconditional sends for triggers
"""

import math

import pytest

from facebridge.osc.dispatcher import (
    BatchResult,
    ParameterDispatcher,
    coerce_value,
    iter_entries,
)


@pytest.fixture
def dispatcher(osc_sink) -> ParameterDispatcher:
    return ParameterDispatcher(osc_sink, threshold=0.02)


class TestCoerceValue:
    """Tests for value validation."""

    @pytest.mark.parametrize(
        "raw,expected",
        [(1, 1.0), (0.5, 0.5), ("2.5", 2.5), (" -3 ", -3.0), (-0.0, 0.0)],
    )
    def test_accepts_numbers(self, raw, expected):
        """Numbers and numeric strings pass."""
        assert coerce_value(raw) == expected

    @pytest.mark.parametrize("raw", [True, False, None, "abc", "", [1], {"v": 1}, math.nan])
    def test_rejects_others(self, raw):
        """Everything else is discarded."""
        assert coerce_value(raw) is None


class TestIterEntries:
    """Tests for batch shape handling."""

    def test_mapping(self):
        """{address: value} yields pairs."""
        assert list(iter_entries({"/a": 1, "/b": 2})) == [("/a", 1), ("/b", 2)]

    def test_list_of_objects(self):
        """Both key spellings are accepted."""
        batch = [{"address": "/a", "value": 1}, {"addr": "/b", "val": 2}]
        assert list(iter_entries(batch)) == [("/a", 1), ("/b", 2)]

    def test_malformed_items(self):
        """Non-object items come through as (None, None)."""
        assert list(iter_entries([5])) == [(None, None)]

    def test_unsupported_shape(self):
        """Scalars yield nothing."""
        assert list(iter_entries(42)) == []


class TestSendBatch:
    """Tests for threshold filtering."""

    def test_first_value_always_sent(self, dispatcher, osc_sink):
        """An unseen address has no cached value."""
        result = dispatcher.send_batch({"/x": 0.0})

        assert result == BatchResult(sent=1)
        osc_sink.send.assert_called_once_with("/x", 0.0)
        assert dispatcher.last_sent("/x") == 0.0

    def test_below_threshold_suppressed(self, dispatcher, osc_sink):
        """1.0 -> 1.01 is within 0.02 and is not resent."""
        dispatcher.send_batch({"/x": 1.0})
        osc_sink.send.reset_mock()

        result = dispatcher.send_batch({"/x": 1.01})

        assert result.suppressed == 1
        osc_sink.send.assert_not_called()
        assert dispatcher.last_sent("/x") == 1.0

    def test_at_or_above_threshold_sent(self, dispatcher, osc_sink):
        """1.0 -> 1.03 is sent and becomes the new reference."""
        dispatcher.send_batch({"/x": 1.0})
        osc_sink.send.reset_mock()

        dispatcher.send_batch({"/x": 1.03})

        osc_sink.send.assert_called_once_with("/x", 1.03)
        assert dispatcher.last_sent("/x") == 1.03

    def test_compares_against_last_sent_not_last_seen(self, dispatcher, osc_sink):
        """Slow drift is sent once it accumulates past the threshold."""
        dispatcher.send_batch({"/x": 1.0})
        dispatcher.send_batch({"/x": 1.015})
        dispatcher.send_batch({"/x": 1.025})

        assert osc_sink.send.call_count == 2
        assert dispatcher.last_sent("/x") == 1.025

    def test_list_shape(self, dispatcher, osc_sink):
        """List batches go through the same filter."""
        dispatcher.send_batch([{"addr": "/a", "val": "0.5"}, {"address": "/b", "value": 2}])

        osc_sink.send.assert_any_call("/a", 0.5)
        osc_sink.send.assert_any_call("/b", 2.0)

    def test_non_numeric_skipped(self, dispatcher, osc_sink):
        """Bad entries are skipped, good ones still go out."""
        result = dispatcher.send_batch({"/a": "loud", "/b": None, "/c": 1, "": 2})

        assert result.sent == 1
        assert result.skipped == 3
        osc_sink.send.assert_called_once_with("/c", 1.0)

    def test_zero_threshold_sends_everything(self, osc_sink):
        """With threshold 0 every value is sent, equal ones included."""
        dispatcher = ParameterDispatcher(osc_sink, threshold=0.0)
        dispatcher.send_batch({"/x": 1.0})
        dispatcher.send_batch({"/x": 1.0})

        assert osc_sink.send.call_count == 2

    def test_clear_cache_resends(self, dispatcher, osc_sink):
        """After clear_cache the same value goes out again."""
        dispatcher.send_batch({"/x": 1.0})
        dispatcher.clear_cache()
        dispatcher.send_batch({"/x": 1.0})

        assert osc_sink.send.call_count == 2
        assert dispatcher.cached_addresses == 1

    def test_threshold_setter(self, dispatcher, osc_sink):
        """A larger threshold suppresses more."""
        dispatcher.threshold = 1.0
        dispatcher.send_batch({"/x": 0.0})
        dispatcher.send_batch({"/x": 0.5})

        assert osc_sink.send.call_count == 1


class TestSend:
    """Tests for unconditional sends."""

    def test_send_bypasses_cache(self, dispatcher, osc_sink):
        """Trigger sends neither check nor update the cache."""
        dispatcher.send("/cue", 1, "go")
        dispatcher.send("/cue", 1, "go")

        assert osc_sink.send.call_count == 2
        osc_sink.send.assert_called_with("/cue", 1, "go")
        assert dispatcher.last_sent("/cue") is None

    def test_send_without_args(self, dispatcher, osc_sink):
        """Zero-argument messages are allowed."""
        dispatcher.send("/beyond/cue/1/1/start")
        osc_sink.send.assert_called_once_with("/beyond/cue/1/1/start")
