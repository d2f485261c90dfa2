"""Tests for dataset parsing.

Tests cover:
- Frame / Trigger parsing from the wire shape
- Trigger sorting
- All-or-nothing rejection of malformed payloads
"""

import pytest

from facebridge.exceptions import DatasetError
from facebridge.playback.dataset import Dataset, Frame, Trigger


class TestFrame:
    """Tests for Frame parsing."""

    def test_from_dict_splits_time_and_params(self):
        """timeMs becomes time_ms, everything else a parameter."""
        frame = Frame.from_dict({"timeMs": 40, "/a": 1, "/b": 0.5})

        assert frame.time_ms == 40.0
        assert frame.params == {"/a": 1.0, "/b": 0.5}

    def test_param_order_preserved(self):
        """Parameters keep capture order."""
        frame = Frame.from_dict({"timeMs": 0, "/z": 1, "/a": 2, "/m": 3})
        assert list(frame.params) == ["/z", "/a", "/m"]

    def test_to_dict_round_trip(self):
        """Flattening gives back the wire shape."""
        data = {"timeMs": 10.0, "/a": 1.0}
        assert Frame.from_dict(data).to_dict() == data

    def test_missing_time_rejected(self):
        """Frames need timeMs."""
        with pytest.raises(DatasetError, match="timeMs"):
            Frame.from_dict({"/a": 1})

    def test_non_numeric_param_rejected(self):
        """String parameter values fail the load."""
        with pytest.raises(DatasetError) as exc_info:
            Frame.from_dict({"timeMs": 0, "/a": "high"}, index=7)

        assert exc_info.value.details["index"] == 7
        assert exc_info.value.details["section"] == "frames"

    def test_bool_time_rejected(self):
        """true is not a time."""
        with pytest.raises(DatasetError):
            Frame.from_dict({"timeMs": True})


class TestTrigger:
    """Tests for Trigger parsing."""

    def test_from_dict(self):
        """Address and args are kept."""
        trigger = Trigger.from_dict({"timeMs": 100, "address": "/cue", "args": [1, "go"]})

        assert trigger.time_ms == 100.0
        assert trigger.address == "/cue"
        assert trigger.args == (1, "go")

    def test_args_default_empty(self):
        """Missing args means no arguments."""
        assert Trigger.from_dict({"timeMs": 0, "address": "/cue"}).args == ()

    def test_missing_address_rejected(self):
        """Triggers need an address."""
        with pytest.raises(DatasetError, match="address"):
            Trigger.from_dict({"timeMs": 0})

    def test_nested_args_rejected(self):
        """Args must be scalars."""
        with pytest.raises(DatasetError):
            Trigger.from_dict({"timeMs": 0, "address": "/cue", "args": [[1]]})


class TestDataset:
    """Tests for Dataset.from_dict."""

    def test_parses_frames_and_sorts_triggers(self, dataset_payload):
        """Triggers are sorted ascending, frames keep order."""
        dataset = Dataset.from_dict(dataset_payload)

        assert dataset.frame_count == 3
        assert [t.time_ms for t in dataset.triggers] == [500.0, 1500.0, 2500.0]
        assert dataset.duration_ms == 2000.0

    def test_triggers_optional(self):
        """A dataset without triggers is valid."""
        dataset = Dataset.from_dict({"frames": [{"timeMs": 0, "/a": 1}]})
        assert dataset.triggers == ()

    @pytest.mark.parametrize(
        "payload",
        [
            None,
            [],
            {},
            {"frames": []},
            {"frames": "nope"},
            {"frames": [{"timeMs": 0}], "triggers": {"a": 1}},
            {"frames": [{"timeMs": 0}, {"timeMs": "x"}]},
            {"frames": [{"timeMs": 0}], "triggers": [{"timeMs": 0, "address": 5}]},
        ],
    )
    def test_malformed_payloads_rejected(self, payload):
        """Every malformed shape raises DatasetError."""
        with pytest.raises(DatasetError):
            Dataset.from_dict(payload)
