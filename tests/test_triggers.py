"""Tests for TriggerScheduler."""

from facebridge.playback.dataset import Trigger
from facebridge.playback.triggers import TriggerScheduler


def make_scheduler(*times: float) -> TriggerScheduler:
    return TriggerScheduler([Trigger(t, f"/cue/{i}") for i, t in enumerate(times)])


class TestTriggerScheduler:
    """Test suite for ordered one-shot firing."""

    def test_fires_due_triggers_in_order(self):
        """Everything at or before now fires, ascending."""
        scheduler = make_scheduler(1, 2, 3, 10)

        fired = scheduler.advance(3)

        assert [t.address for t in fired] == ["/cue/0", "/cue/1", "/cue/2"]
        assert scheduler.cursor == 3
        assert scheduler.pending == 1

    def test_each_trigger_fires_once(self):
        """A second advance to the same time fires nothing."""
        scheduler = make_scheduler(1, 2)

        assert len(scheduler.advance(5)) == 2
        assert scheduler.advance(5) == []

    def test_rewind_does_not_refire(self):
        """advance(5) then advance(3) never fires anything twice."""
        scheduler = make_scheduler(1, 3, 5, 7)

        first = scheduler.advance(5)
        second = scheduler.advance(3)

        assert len(first) == 3
        assert second == []
        assert scheduler.cursor == 3

    def test_stops_at_first_future_trigger(self):
        """Nothing past now fires."""
        scheduler = make_scheduler(10, 20)
        assert scheduler.advance(9.999) == []

    def test_reset_allows_refire(self):
        """reset() rewinds the cursor."""
        scheduler = make_scheduler(1, 2)
        scheduler.advance(10)

        scheduler.reset()

        assert len(scheduler.advance(10)) == 2

    def test_load_rewinds(self):
        """Loading new triggers starts from the top."""
        scheduler = make_scheduler(1)
        scheduler.advance(10)

        scheduler.load([Trigger(0, "/new")])

        assert [t.address for t in scheduler.advance(0)] == ["/new"]

    def test_empty(self):
        """No triggers, nothing fires."""
        assert TriggerScheduler().advance(1e9) == []
