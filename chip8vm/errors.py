"""
Exceptions raised by the CHIP-8 core.

Decode errors are recoverable: the driver decides whether to log and halt or
log and continue. Stack and memory errors are fatal for the running session.
"""

from typing import Optional


class Chip8Error(Exception):
    """Base class for every error raised by the interpreter"""


class DecodeError(Chip8Error):
    """Unknown opcode bit pattern"""

    def __init__(self, word: int, address: Optional[int] = None):
        self.word = word
        self.address = address
        message = f"unknown instruction 0x{word:04X}"
        if address is not None:
            message += f" at PC=0x{address:03X}"
        super().__init__(message)


class FatalError(Chip8Error):
    """Machine state cannot be trusted after this; stepping must stop"""


class StackUnderflowError(FatalError):
    """Return executed with an empty call stack"""

    def __init__(self, address: int):
        self.address = address
        super().__init__(f"RET with empty stack at PC=0x{address:03X}")


class StackOverflowError(FatalError):
    """Call nested deeper than the configured stack limit"""

    def __init__(self, address: int, depth: int):
        self.address = address
        self.depth = depth
        super().__init__(f"stack overflow ({depth} entries) at PC=0x{address:03X}")


class MemoryAccessError(FatalError):
    """Access to memory outside 0x000-0xFFF"""

    def __init__(self, address: int, length: int = 1):
        self.address = address
        self.length = length
        super().__init__(
            f"memory access out of range: {length} byte(s) at 0x{address:04X}")


class RomLoadError(Chip8Error, ValueError):
    """ROM image cannot be loaded"""


class ConfigurationError(Chip8Error, ValueError):
    """Invalid quirk or driver setting"""
