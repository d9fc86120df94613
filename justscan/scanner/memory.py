"""
justscan/scanner/memory.py
-----------------
Time-windowed store for the three scan signals.

Each slot holds the last observed value and when it was observed. A slot
is live while now - timestamp < window. A scan is accepted when the
keyword, roll number and name slots are all live at the same moment.
"""

from dataclasses import dataclass

RECENCY_WINDOW_SECONDS = 5.0

KEYWORD = "keyword"
ROLL_NO = "roll_no"
NAME = "name"
SLOTS = (KEYWORD, ROLL_NO, NAME)


@dataclass
class Slot:
    value: object = None
    timestamp: float = None

    @property
    def observed(self):
        return self.timestamp is not None


class SignalMemory:

    def __init__(self, window=RECENCY_WINDOW_SECONDS, keyword_required=True):
        if window <= 0:
            raise ValueError("window must be positive")
        self.window = window
        self.keyword_required = keyword_required
        self._last_now = None
        self.reset()

    def reset(self):
        self.slots = {name: Slot() for name in SLOTS}

    def _clamp(self, now):
        # Timestamps never run backwards, even if the caller's clock does
        if self._last_now is not None and now < self._last_now:
            now = self._last_now
        self._last_now = now
        return now

    def observe(self, observation, now):
        """Refresh every slot whose signal fired. Slots that did not fire are left alone."""
        now = self._clamp(now)
        if observation.keyword:
            self.slots[KEYWORD] = Slot(True, now)
        if observation.roll_no:
            self.slots[ROLL_NO] = Slot(observation.roll_no, now)
        if observation.name:
            self.slots[NAME] = Slot(True, now)

    def live(self, name, now):
        if name == KEYWORD and not self.keyword_required:
            return True
        slot = self.slots[name]
        return slot.observed and (now - slot.timestamp) < self.window

    def live_roll_no(self, now):
        """Roll number still inside the window, or None."""
        if self.live(ROLL_NO, now):
            return self.slots[ROLL_NO].value
        return None

    def decide(self, now):
        """Roll number to verify when all three signals are live, else None."""
        now = self._clamp(now)
        if not all(self.live(name, now) for name in SLOTS):
            return None

        return self.slots[ROLL_NO].value
