"""
CHIP-8 machine state: memory, registers, program counter, index register,
call stack, display buffer, keypad, delay timer and execution mode.

The instance is created once and mutated in place; nothing replaces it.
"""

import logging
from collections import deque
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Tuple, Union

import numpy as np

from .constants import (
    CHIP8_FONT, DEFAULT_HISTORY_SIZE, DISPLAY_HEIGHT, DISPLAY_PIXELS,
    DISPLAY_WIDTH, FONT_SIZE, FONT_START, LOG_TARGET_INPUT, MAX_ROM_SIZE,
    MEMORY_SIZE, PC_INIT, REGISTER_COUNT, STACK_LIMIT,
)
from .errors import (
    MemoryAccessError, RomLoadError, StackOverflowError, StackUnderflowError,
)
from .instructions import TraceEntry
from .keyboard import Keyboard
from .mode import RUNNING, Mode, WaitForKey
from .timer import DelayTimer

logger = logging.getLogger(__name__)
input_logger = logging.getLogger(LOG_TARGET_INPUT)

RomSource = Union[bytes, bytearray, np.ndarray, str, Path]


def vram_index(x: int, y: int) -> Optional[int]:
    """
    Convert x and y coordinates to a linear vram index.
    Returns None when the coordinate is outside the screen bounds.
    """
    if 0 <= x < DISPLAY_WIDTH and 0 <= y < DISPLAY_HEIGHT:
        return DISPLAY_WIDTH * y + x
    return None


@dataclass(frozen=True)
class MachineSnapshot:
    """Read-only copy of the state the debug tooling displays"""
    registers: Tuple[int, ...]
    program_counter: int
    index_register: int
    stack: Tuple[int, ...]
    delay_timer: int
    mode: Mode
    redraw: bool
    keys: int
    history: Tuple[TraceEntry, ...]

    def format_registers(self) -> str:
        return " ".join(f"V{i:X}={value:02X}" for i, value in enumerate(self.registers))


class Chip8:
    """
    Single CHIP-8 machine. Holds state only; instructions are applied by
    chip8vm.engine.ExecutionEngine and paced by chip8vm.driver.Chip8Driver.
    """

    def __init__(self, history_size: Optional[int] = DEFAULT_HISTORY_SIZE,
                 stack_limit: Optional[int] = STACK_LIMIT):
        self.history_size = history_size
        self.stack_limit = stack_limit
        self.reset()

    def reset(self):
        """Reset the machine to its power-on state"""
        self.memory = np.zeros(MEMORY_SIZE, dtype=np.uint8)
        self.registers = np.zeros(REGISTER_COUNT, dtype=np.uint8)
        self.index_register = 0
        self.program_counter = PC_INIT
        self.stack = []
        self.vram = np.zeros(DISPLAY_PIXELS, dtype=np.uint8)
        self.keyboard = Keyboard()
        self.delay_timer = DelayTimer()
        # Set whenever vram changes. The renderer clears it after drawing,
        # the core never does.
        self.redraw = False
        self.mode: Mode = RUNNING
        self.history = deque(maxlen=self.history_size)

        # Load font into memory
        self.memory[FONT_START:FONT_START + FONT_SIZE] = CHIP8_FONT

    def load_rom(self, rom_data: RomSource) -> int:
        """Copy a raw ROM image into memory at PC_INIT, returns its size"""
        if isinstance(rom_data, (str, Path)):
            try:
                with open(rom_data, 'rb') as f:
                    rom_bytes = f.read()
            except OSError as e:
                raise RomLoadError(f"cannot read ROM {rom_data}: {e}") from e
        elif isinstance(rom_data, np.ndarray):
            if rom_data.size and (rom_data.min() < 0 or rom_data.max() > 0xFF):
                raise RomLoadError("ROM array holds values outside 0-255")
            rom_bytes = rom_data.astype(np.uint8).tobytes()
        else:
            rom_bytes = bytes(rom_data)

        if len(rom_bytes) > MAX_ROM_SIZE:
            raise RomLoadError(f"ROM too large: {len(rom_bytes)} bytes, max {MAX_ROM_SIZE}")

        self.memory[PC_INIT:PC_INIT + len(rom_bytes)] = np.frombuffer(rom_bytes, dtype=np.uint8)

        logger.info("Loaded ROM: %d bytes", len(rom_bytes))
        if len(rom_bytes) >= 2:
            logger.debug("First instruction: 0x%02X%02X",
                         self.memory[PC_INIT], self.memory[PC_INIT + 1])
        return len(rom_bytes)

    # Memory access

    def check_range(self, address: int, length: int = 1):
        if address < 0 or length < 0 or address + length > MEMORY_SIZE:
            raise MemoryAccessError(address, length)

    def read_memory(self, address: int, length: int = 1) -> np.ndarray:
        self.check_range(address, length)
        return self.memory[address:address + length].copy()

    def write_memory(self, address: int, values):
        data = np.asarray(values, dtype=np.uint8).ravel()
        self.check_range(address, len(data))
        self.memory[address:address + len(data)] = data

    def fetch(self) -> Tuple[int, int]:
        """Read the word at PC and advance PC by 2. Returns (address, word)."""
        address = self.program_counter
        self.check_range(address, 2)
        # Convert to regular Python int to avoid numpy overflow issues
        high_byte = int(self.memory[address])
        low_byte = int(self.memory[address + 1])
        self.program_counter += 2
        return address, (high_byte << 8) | low_byte

    # Call stack

    def push_return(self, address: int, current: int):
        if self.stack_limit is not None and len(self.stack) >= self.stack_limit:
            raise StackOverflowError(current, len(self.stack))
        self.stack.append(address)

    def pop_return(self, current: int) -> int:
        if not self.stack:
            raise StackUnderflowError(current)
        return self.stack.pop()

    # Display

    def get_pixel(self, x: int, y: int) -> Optional[int]:
        index = vram_index(x, y)
        return None if index is None else int(self.vram[index])

    def set_pixel(self, x: int, y: int, pixel: bool):
        """Does nothing if the coordinate is outside the screen bounds"""
        index = vram_index(x, y)
        if index is not None:
            self.vram[index] = 1 if pixel else 0

    def get_display(self) -> np.ndarray:
        """Get current display state as 2D array"""
        return self.vram.reshape(DISPLAY_HEIGHT, DISPLAY_WIDTH).copy()

    # Input

    def key_down(self, key: int):
        self.keyboard.set_down(key)
        input_logger.debug("key down: 0x%X", key)

    def key_up(self, key: int):
        """Release a key; completes a pending Fx0A wait"""
        self.keyboard.set_up(key)
        input_logger.debug("key up: 0x%X", key)
        if isinstance(self.mode, WaitForKey):
            self.registers[self.mode.register] = key
            input_logger.debug("V%X <- 0x%X, resuming", self.mode.register, key)
            self.mode = RUNNING

    def snapshot(self) -> MachineSnapshot:
        return MachineSnapshot(
            registers=tuple(int(v) for v in self.registers),
            program_counter=self.program_counter,
            index_register=self.index_register,
            stack=tuple(self.stack),
            delay_timer=self.delay_timer.value,
            mode=self.mode,
            redraw=self.redraw,
            keys=self.keyboard.mask,
            history=tuple(self.history),
        )
