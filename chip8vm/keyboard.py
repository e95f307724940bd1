"""
CHIP-8 keypad state: a 16-bit mask, one bit per hexadecimal key.
"""

import logging
from typing import List, Optional

from .constants import KEYPAD_SIZE, LOG_TARGET_INPUT

logger = logging.getLogger(LOG_TARGET_INPUT)

# CHIP-8 keypad mapping to keyboard keys
# Original CHIP-8 keypad:     Modern keyboard mapping:
# 1 2 3 C                     1 2 3 4
# 4 5 6 D          =>         Q W E R
# 7 8 9 E                     A S D F
# A 0 B F                     Z X C V
KEY_MAPPING = {
    '1': 0x1, '2': 0x2, '3': 0x3, '4': 0xC,
    'q': 0x4, 'w': 0x5, 'e': 0x6, 'r': 0xD,
    'a': 0x7, 's': 0x8, 'd': 0x9, 'f': 0xE,
    'z': 0xA, 'x': 0x0, 'c': 0xB, 'v': 0xF
}


def map_key(name: str) -> Optional[int]:
    """Translate a physical key name to a CHIP-8 key index, None if unmapped"""
    return KEY_MAPPING.get(name.lower())


def _bit(key: int) -> int:
    key = int(key)
    if not 0 <= key < KEYPAD_SIZE:
        raise ValueError(f"key index out of range: {key}")
    return 1 << key


class Keyboard:
    """Pressed/released state of the 16 CHIP-8 keys"""

    def __init__(self, mask: int = 0):
        self.mask = mask & 0xFFFF

    def set_down(self, key: int):
        self.mask |= _bit(key)

    def set_up(self, key: int):
        self.mask &= ~_bit(key) & 0xFFFF

    def is_down(self, key: int) -> bool:
        return bool(self.mask & _bit(key))

    def reset(self):
        self.mask = 0

    def pressed(self) -> List[int]:
        return [key for key in range(KEYPAD_SIZE) if self.mask & (1 << key)]

    def describe(self) -> str:
        states = ", ".join(f"{key:X}: {self.is_down(key)}" for key in range(KEYPAD_SIZE))
        return f"[ {states} ]"

    def log_state(self):
        if logger.isEnabledFor(logging.DEBUG):
            logger.debug(self.describe())

    def __repr__(self):
        return f"Keyboard(mask=0x{self.mask:04X})"
