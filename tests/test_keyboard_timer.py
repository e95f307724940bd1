"""
Keypad mask, physical key mapping, delay timer and mode values.
"""

import pytest

from chip8vm.keyboard import KEY_MAPPING, Keyboard, map_key
from chip8vm.mode import PAUSED, RUNNING, Paused, Running, WaitForKey
from chip8vm.timer import DelayTimer


class TestKeyboard:

    def test_set_and_release(self):
        kb = Keyboard()
        assert not kb.is_down(0xA)
        kb.set_down(0xA)
        assert kb.is_down(0xA)
        assert kb.mask == 1 << 0xA
        kb.set_up(0xA)
        assert not kb.is_down(0xA)

    def test_release_of_key_not_down_keeps_it_up(self):
        kb = Keyboard()
        kb.set_up(0x3)
        assert not kb.is_down(0x3)
        assert kb.mask == 0

    def test_keys_are_independent(self):
        kb = Keyboard()
        kb.set_down(0x0)
        kb.set_down(0xF)
        kb.set_up(0x0)
        assert kb.pressed() == [0xF]

    def test_reset(self):
        kb = Keyboard()
        for key in range(16):
            kb.set_down(key)
        assert kb.mask == 0xFFFF
        kb.reset()
        assert kb.mask == 0
        assert kb.pressed() == []

    @pytest.mark.parametrize("key", [16, -1, 0x20])
    def test_out_of_range_rejected(self, key):
        kb = Keyboard()
        with pytest.raises(ValueError):
            kb.set_down(key)
        with pytest.raises(ValueError):
            kb.is_down(key)

    def test_describe(self):
        kb = Keyboard()
        kb.set_down(0x1)
        text = kb.describe()
        assert "1: True" in text
        assert "F: False" in text

    def test_mapping(self):
        assert map_key('Q') == 0x4
        assert map_key('x') == 0x0
        assert map_key('escape') is None
        assert sorted(KEY_MAPPING.values()) == list(range(16))


class TestDelayTimer:

    def test_counts_down_to_zero_and_stays(self):
        timer = DelayTimer()
        timer.set(10)
        for expected in range(9, -1, -1):
            assert timer.tick() == expected
        assert timer.value == 0
        assert timer.tick() == 0
        assert timer.value == 0

    def test_value_is_eight_bit(self):
        timer = DelayTimer()
        timer.set(0x1FF)
        assert timer.value == 0xFF

    def test_reset(self):
        timer = DelayTimer(7)
        timer.reset()
        assert int(timer) == 0


class TestMode:

    def test_equality(self):
        assert WaitForKey(3) == WaitForKey(register=3)
        assert WaitForKey(3) != WaitForKey(4)
        assert Running() == RUNNING
        assert Paused() == PAUSED
        assert RUNNING != PAUSED

    def test_labels(self):
        assert str(RUNNING) == "RUNNING"
        assert str(PAUSED) == "PAUSED"
        assert str(WaitForKey(0xA)) == "GETKEY VA"
