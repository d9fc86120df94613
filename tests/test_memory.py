import itertools

import pytest

from justscan.scanner.memory import KEYWORD, NAME, ROLL_NO, SignalMemory
from justscan.scanner.signals import Observation


def _fired(keyword=False, roll_no=False, name=False):
    return Observation(keyword=keyword, roll_no="12345" if roll_no else None, name=name)


class TestDecay:

    @pytest.mark.parametrize("slot", [KEYWORD, ROLL_NO, NAME])
    def test_live_inside_window_dead_after(self, slot):
        memory = SignalMemory(window=5.0)
        memory.observe(_fired(**{slot: True}), now=100.0)

        assert memory.live(slot, 100.0)
        assert memory.live(slot, 104.999)
        assert not memory.live(slot, 105.0)
        assert not memory.live(slot, 160.0)

    def test_non_firing_does_not_clear(self):
        memory = SignalMemory()
        memory.observe(_fired(keyword=True), now=1.0)
        memory.observe(Observation(), now=2.0)
        assert memory.live(KEYWORD, 2.0)

    def test_refire_refreshes_timestamp(self):
        memory = SignalMemory()
        memory.observe(_fired(roll_no=True), now=0.0)
        memory.observe(_fired(roll_no=True), now=4.0)
        assert memory.live(ROLL_NO, 8.0)

    def test_timestamps_never_go_backwards(self):
        memory = SignalMemory()
        memory.observe(_fired(keyword=True), now=10.0)
        memory.observe(_fired(roll_no=True), now=3.0)
        assert memory.slots[ROLL_NO].timestamp == 10.0


class TestDecision:

    @pytest.mark.parametrize("keyword, roll_no, name", list(itertools.product([False, True], repeat=3)))
    def test_all_three_required(self, keyword, roll_no, name):
        memory = SignalMemory()
        memory.observe(_fired(keyword, roll_no, name), now=1.0)
        expected = "12345" if (keyword and roll_no and name) else None
        assert memory.decide(now=2.0) == expected

    def test_no_keyword_policy_live_from_start(self):
        memory = SignalMemory(keyword_required=False)
        assert memory.live(KEYWORD, 0.0)
        assert memory.live(KEYWORD, 1e6)
        memory.observe(_fired(roll_no=True, name=True), now=1.0)
        assert memory.decide(now=1.5) == "12345"

    def test_accepts_latest_roll_no_while_name_still_live(self):
        # a name read for one card still counts inside the window
        memory = SignalMemory(keyword_required=False)
        memory.observe(Observation(roll_no="12345", name=True), now=0.0)
        memory.observe(Observation(roll_no="54321"), now=1.0)
        assert memory.decide(now=1.0) == "54321"

    def test_reset_clears_slots(self):
        memory = SignalMemory()
        memory.observe(_fired(True, True, True), now=1.0)
        memory.reset()
        assert memory.decide(now=1.0) is None
        assert memory.live_roll_no(1.0) is None


def test_window_must_be_positive():
    with pytest.raises(ValueError):
        SignalMemory(window=0)
