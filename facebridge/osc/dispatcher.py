"""Parameter Dispatcher - Change-threshold filtering for OSC sends.

Live capture streams resend every parameter every frame. The dispatcher
keeps the last value sent per address and only resends when the new
value moved by at least the threshold (default 0.02).

The cache lives as long as the dispatcher. It is not cleared by dataset
reloads or mode changes; clear_cache() is the only way to forget it.
A send that is lost on the wire therefore heals only once the value
moves past the threshold again.
"""

import math
from dataclasses import dataclass
from typing import Any, Iterable, Mapping, Protocol

from facebridge.config.constants import BRIDGE
from facebridge.observability.logging import get_logger

logger = get_logger(__name__)

# Batch entries arrive either as {address: value} or as a list of
# {"address", "value"} objects; the browser spells them "addr"/"val".
_ADDRESS_KEYS = ("address", "addr")
_VALUE_KEYS = ("value", "val")


class ParameterSink(Protocol):
    """Anything that can send an OSC message (OscSender, test doubles)."""

    def send(self, address: str, *args: Any) -> bool:
        ...


@dataclass
class BatchResult:
    """Outcome of one send_batch call."""

    sent: int = 0
    suppressed: int = 0
    skipped: int = 0


def coerce_value(raw: Any) -> float | None:
    """Validate one batch value.

    Accepts ints, floats and numeric strings. Booleans, NaN and anything
    unparseable are rejected.

    Returns:
        The float value, or None if the entry must be discarded
    """
    if isinstance(raw, bool):
        return None
    if isinstance(raw, (int, float)):
        value = float(raw)
    elif isinstance(raw, str):
        try:
            value = float(raw.strip())
        except ValueError:
            return None
    else:
        return None
    return None if math.isnan(value) else value


def iter_entries(batch: Any) -> Iterable[tuple[Any, Any]]:
    """Yield (address, raw_value) pairs from either batch shape.

    Malformed list items yield (None, None) and are skipped downstream.
    """
    if isinstance(batch, Mapping):
        yield from batch.items()
        return
    if not isinstance(batch, (list, tuple)):
        return
    for item in batch:
        if not isinstance(item, Mapping):
            yield None, None
            continue
        address = next((item[k] for k in _ADDRESS_KEYS if k in item), None)
        value = next((item[k] for k in _VALUE_KEYS if k in item), None)
        yield address, value


class ParameterDispatcher:
    """Threshold-filtered front end of the OSC sender.

    Usage:
        dispatcher = ParameterDispatcher(osc_sender, threshold=0.02)

        dispatcher.send_batch({"/beyond/zone/face/livecontrol/angley": 12.5})
        dispatcher.send("/beyond/cue/1/3/start", 1)
    """

    def __init__(
        self,
        sink: ParameterSink,
        threshold: float = BRIDGE.CHANGE_THRESHOLD,
    ) -> None:
        self._sink = sink
        self._threshold = threshold
        self._cache: dict[str, float] = {}

    def send(self, address: str, *args: Any) -> bool:
        """Send unconditionally, bypassing the threshold and the cache."""
        return self._sink.send(address, *args)

    def send_batch(self, batch: Any) -> BatchResult:
        """Send every entry that changed by at least the threshold.

        Args:
            batch: {address: value} mapping or list of
                {"address"/"addr", "value"/"val"} objects

        Returns:
            Counts of sent, suppressed and skipped entries
        """
        result = BatchResult()

        for address, raw in iter_entries(batch):
            value = coerce_value(raw)
            if not isinstance(address, str) or not address or value is None:
                result.skipped += 1
                continue

            last = self._cache.get(address, -math.inf)
            if abs(value - last) < self._threshold:
                result.suppressed += 1
                continue

            self._cache[address] = value
            self._sink.send(address, value)
            result.sent += 1

        if result.skipped:
            logger.debug("osc_batch_entries_skipped", skipped=result.skipped)

        return result

    def clear_cache(self) -> None:
        """Forget every last-sent value so the next batch resends all."""
        self._cache.clear()

    def last_sent(self, address: str) -> float | None:
        """Last value sent for address, None if never sent."""
        return self._cache.get(address)

    @property
    def threshold(self) -> float:
        """Minimum change that triggers a resend."""
        return self._threshold

    @threshold.setter
    def threshold(self, value: float) -> None:
        self._threshold = value

    @property
    def cached_addresses(self) -> int:
        """Number of addresses with a remembered value."""
        return len(self._cache)
