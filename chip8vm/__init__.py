"""
chip8vm - a CHIP-8 interpreter core with a headless cycle driver.
"""

from .constants import DISPLAY_HEIGHT, DISPLAY_WIDTH, MEMORY_SIZE, PC_INIT
from .driver import Chip8Driver
from .engine import ExecutionEngine
from .errors import (
    Chip8Error, ConfigurationError, DecodeError, FatalError, MemoryAccessError,
    RomLoadError, StackOverflowError, StackUnderflowError,
)
from .instructions import Instruction, TraceEntry, decode
from .keyboard import Keyboard
from .machine import Chip8, MachineSnapshot, vram_index
from .mode import PAUSED, RUNNING, Mode, Paused, Running, WaitForKey
from .timer import DelayTimer

__version__ = "0.1.0"
