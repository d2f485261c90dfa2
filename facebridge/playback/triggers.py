"""Trigger Scheduler - Ordered one-shot event firing.

A single cursor walks the time-sorted trigger list. advance() fires
everything between the cursor and "now" and moves the cursor past it.
The cursor never moves backwards on its own: seeking to an earlier time
fires nothing and un-fires nothing until reset().
"""

from typing import Sequence

from facebridge.playback.dataset import Trigger


class TriggerScheduler:
    """Fires each trigger at most once per reset cycle.

    Usage:
        scheduler = TriggerScheduler()
        scheduler.load(dataset.triggers)

        for trigger in scheduler.advance(now_ms):
            dispatcher.send(trigger.address, *trigger.args)
    """

    def __init__(self, triggers: Sequence[Trigger] = ()) -> None:
        self._triggers: tuple[Trigger, ...] = ()
        self._cursor = 0
        self.load(triggers)

    def load(self, triggers: Sequence[Trigger]) -> None:
        """Replace the trigger list and rewind.

        Args:
            triggers: Triggers sorted ascending by time_ms
        """
        self._triggers = tuple(triggers)
        self.reset()

    def reset(self) -> None:
        """Rewind so every trigger can fire again."""
        self._cursor = 0

    def advance(self, now_ms: float) -> list[Trigger]:
        """Fire every pending trigger due at or before now_ms.

        Args:
            now_ms: Current timeline position

        Returns:
            Newly fired triggers in ascending time order
        """
        fired: list[Trigger] = []
        while self._cursor < len(self._triggers):
            trigger = self._triggers[self._cursor]
            if trigger.time_ms > now_ms:
                break
            fired.append(trigger)
            self._cursor += 1
        return fired

    @property
    def cursor(self) -> int:
        """Index of the next trigger to fire."""
        return self._cursor

    @property
    def pending(self) -> int:
        """Triggers not yet fired in this cycle."""
        return len(self._triggers) - self._cursor

    def __len__(self) -> int:
        return len(self._triggers)
