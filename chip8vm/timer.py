"""
Delay timer. Counts down once per external tick, independent of the
instruction rate, and never goes below zero.
"""

import logging

from .constants import LOG_TARGET_TIMER

logger = logging.getLogger(LOG_TARGET_TIMER)


class DelayTimer:

    def __init__(self, value: int = 0):
        self.value = value & 0xFF

    def set(self, value: int):
        self.value = int(value) & 0xFF
        logger.debug("set delay timer to %d", self.value)

    def tick(self) -> int:
        if self.value > 0:
            self.value -= 1
        return self.value

    def reset(self):
        self.value = 0

    def __int__(self):
        return self.value

    def __repr__(self):
        return f"DelayTimer({self.value})"
