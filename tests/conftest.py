"""
Shared fixtures. ROMs are hand-assembled byte strings; no ROM files needed.
"""

import pytest

from chip8vm.driver import Chip8Driver
from chip8vm.engine import ExecutionEngine
from chip8vm.machine import Chip8


def assemble(*words: int) -> bytes:
    """Pack 16-bit instruction words big-endian"""
    return b''.join(bytes([(w >> 8) & 0xFF, w & 0xFF]) for w in words)


@pytest.fixture
def vm():
    return Chip8()


@pytest.fixture
def engine():
    return ExecutionEngine()


@pytest.fixture
def run_words():
    """Load the words as a ROM, execute `steps` instructions, return the machine"""

    def _run(*words, steps=None, quirks=None):
        machine = Chip8()
        machine.load_rom(assemble(*words))
        cpu = ExecutionEngine(quirks)
        for _ in range(len(words) if steps is None else steps):
            cpu.step(machine)
        return machine

    return _run


@pytest.fixture
def driver_for():
    def _driver(*words, **kwargs):
        driver = Chip8Driver(**kwargs)
        driver.load_rom(assemble(*words))
        return driver

    return _driver
