"""
CHIP-8 system constants shared by the machine model, the engine and the tooling.
"""

import numpy as np

# CHIP-8 System Constants
MEMORY_SIZE = 4096
DISPLAY_WIDTH = 64
DISPLAY_HEIGHT = 32
DISPLAY_PIXELS = DISPLAY_WIDTH * DISPLAY_HEIGHT
REGISTER_COUNT = 16
KEYPAD_SIZE = 16
FLAG_REGISTER = 0xF
STACK_LIMIT = 16

# Initial program counter value and the offset at which the ROM is loaded
PC_INIT = 0x200
MAX_ROM_SIZE = MEMORY_SIZE - PC_INIT

FONT_START = 0x000
FONT_GLYPH_SIZE = 5
FONT_SIZE = 80

DELAY_TIMER_FREQUENCY = 60.0  # Hz
DEFAULT_INSTRUCTION_FREQUENCY = 700.0  # Hz
DEFAULT_HISTORY_SIZE = 64

LOG_TARGET_INPUT = "chip8vm.input"
LOG_TARGET_INSTRUCTIONS = "chip8vm.instr"
LOG_TARGET_DRAWING = "chip8vm.draw"
LOG_TARGET_TIMER = "chip8vm.timer"
LOG_TARGET_DRIVER = "chip8vm.driver"

# CHIP-8 Quirks configuration
DEFAULT_QUIRKS = {
    'memory': True,      # Fx55/Fx65 increment I register
    'logic': True,       # 8xy1/8xy2/8xy3 reset vF to 0
    'jumping': False,    # Bnnn uses vX instead of v0
    'shifting': False,   # 8xy6/8xyE shift vX in place instead of reading vY
}

# CHIP-8 Font set (hexadecimal digits 0-F)
CHIP8_FONT = np.array([
    0xF0, 0x90, 0x90, 0x90, 0xF0,  # 0
    0x20, 0x60, 0x20, 0x20, 0x70,  # 1
    0xF0, 0x10, 0xF0, 0x80, 0xF0,  # 2
    0xF0, 0x10, 0xF0, 0x10, 0xF0,  # 3
    0x90, 0x90, 0xF0, 0x10, 0x10,  # 4
    0xF0, 0x80, 0xF0, 0x10, 0xF0,  # 5
    0xF0, 0x80, 0xF0, 0x90, 0xF0,  # 6
    0xF0, 0x10, 0x20, 0x40, 0x40,  # 7
    0xF0, 0x90, 0xF0, 0x90, 0xF0,  # 8
    0xF0, 0x90, 0xF0, 0x10, 0xF0,  # 9
    0xF0, 0x90, 0xF0, 0x90, 0x90,  # A
    0xE0, 0x90, 0xE0, 0x90, 0xE0,  # B
    0xF0, 0x80, 0x80, 0x80, 0xF0,  # C
    0xE0, 0x90, 0x90, 0x90, 0xE0,  # D
    0xF0, 0x80, 0xF0, 0x80, 0xF0,  # E
    0xF0, 0x80, 0xF0, 0x80, 0x80   # F
], dtype=np.uint8)
