"""
CHIP-8 Execution Engine
Applies exactly one decoded instruction to a Chip8 machine.

Quirks are a plain dict merged over
DEFAULT_QUIRKS. The defaults give the classic behaviour: logic ops reset vF,
Fx55/Fx65 advance I, Bnnn adds v0 and shifts read vY.
"""

import logging
from typing import Dict, Optional

from . import instructions as ins
from .constants import (
    DEFAULT_QUIRKS, DISPLAY_HEIGHT, DISPLAY_WIDTH, FLAG_REGISTER,
    FONT_GLYPH_SIZE, FONT_START, LOG_TARGET_DRAWING, LOG_TARGET_INSTRUCTIONS,
)
from .display import render_text
from .errors import ConfigurationError, DecodeError
from .machine import Chip8, vram_index
from .mode import WaitForKey

instr_logger = logging.getLogger(LOG_TARGET_INSTRUCTIONS)
draw_logger = logging.getLogger(LOG_TARGET_DRAWING)

VF = FLAG_REGISTER


def resolve_quirks(quirks: Optional[Dict[str, bool]] = None) -> Dict[str, bool]:
    """Merge user quirks over the defaults, rejecting unknown names"""
    resolved = dict(DEFAULT_QUIRKS)
    for name, enabled in (quirks or {}).items():
        if name not in DEFAULT_QUIRKS:
            raise ConfigurationError(f"unknown quirk: {name!r}")
        resolved[name] = bool(enabled)
    return resolved


class ExecutionEngine:
    """Fetch, decode and execute for a single machine"""

    def __init__(self, quirks: Optional[Dict[str, bool]] = None):
        self.quirks = resolve_quirks(quirks)
        self._handlers = {
            ins.Clear: self._clear,
            ins.Return: self._return,
            ins.Jump: self._jump,
            ins.Call: self._call,
            ins.SkipEq: self._skip_eq,
            ins.SkipNeq: self._skip_neq,
            ins.SkipEqReg: self._skip_eq_reg,
            ins.LoadImm: self._load_imm,
            ins.AddImm: self._add_imm,
            ins.Copy: self._copy,
            ins.Or: self._or,
            ins.And: self._and,
            ins.Xor: self._xor,
            ins.AddReg: self._add_reg,
            ins.SubReg: self._sub_reg,
            ins.ShiftRight: self._shift_right,
            ins.SubRegReverse: self._sub_reg_reverse,
            ins.ShiftLeft: self._shift_left,
            ins.SkipNeqReg: self._skip_neq_reg,
            ins.LoadI: self._load_i,
            ins.JumpV0Offset: self._jump_v0_offset,
            ins.DrawSprite: self._draw_sprite,
            ins.SkipIfKeyDown: self._skip_if_key_down,
            ins.SkipIfKeyUp: self._skip_if_key_up,
            ins.ReadDelayTimer: self._read_delay_timer,
            ins.WaitForKeyPress: self._wait_for_key,
            ins.SetDelayTimer: self._set_delay_timer,
            ins.AddXToI: self._add_x_to_i,
            ins.LoadFontChar: self._load_font_char,
            ins.StoreBCD: self._store_bcd,
            ins.StoreRegisters: self._store_registers,
            ins.LoadRegisters: self._load_registers,
        }
        self.reset_stats()

    def reset_stats(self):
        # Instrumentation
        self.stats = {
            'instructions_executed': 0,
            'decode_errors': 0,
            'display_writes': 0,
            'display_clears': 0,
            'sprite_collisions': 0,
            'jumps_taken': 0,
            'subroutine_calls': 0,
            'returns': 0,
            'timer_sets': 0,
            'key_checks': 0,
            'blocking_key_waits': 0,
            'memory_reads': 0,
            'memory_writes': 0,
        }

    def get_stats(self) -> Dict[str, int]:
        """Get current instrumentation statistics"""
        return self.stats.copy()

    def step(self, vm: Chip8) -> ins.TraceEntry:
        """Fetch the word at PC, advance PC by 2, decode and execute it"""
        address, word = vm.fetch()
        try:
            instruction = ins.decode(word)
        except DecodeError as e:
            self.stats['decode_errors'] += 1
            raise DecodeError(word, address) from e

        entry = ins.TraceEntry(address, word, instruction)
        vm.history.append(entry)
        instr_logger.debug("0x%04X: %s", word, instruction)

        self.execute(vm, instruction)
        return entry

    def execute(self, vm: Chip8, instruction: ins.Instruction):
        """Apply one instruction; PC must already point past it"""
        self._handlers[type(instruction)](vm, instruction)
        self.stats['instructions_executed'] += 1

    # 0nnn / 1nnn / 2nnn / Bnnn

    def _clear(self, vm, op):
        vm.vram.fill(0)
        vm.redraw = True
        self.stats['display_clears'] += 1

    def _return(self, vm, op):
        vm.program_counter = vm.pop_return(vm.program_counter - 2)
        self.stats['returns'] += 1

    def _jump(self, vm, op):
        vm.program_counter = op.address
        self.stats['jumps_taken'] += 1

    def _call(self, vm, op):
        vm.push_return(vm.program_counter, vm.program_counter - 2)
        vm.program_counter = op.address
        self.stats['subroutine_calls'] += 1

    def _jump_v0_offset(self, vm, op):
        if self.quirks['jumping']:
            # use vX where X is the high nibble of nnn
            register = (op.address & 0xF00) >> 8
        else:
            register = 0
        vm.program_counter = op.address + int(vm.registers[register])
        self.stats['jumps_taken'] += 1

    # Skips

    def _skip_eq(self, vm, op):
        if int(vm.registers[op.register]) == op.value:
            vm.program_counter += 2

    def _skip_neq(self, vm, op):
        if int(vm.registers[op.register]) != op.value:
            vm.program_counter += 2

    def _skip_eq_reg(self, vm, op):
        if int(vm.registers[op.register_x]) == int(vm.registers[op.register_y]):
            vm.program_counter += 2

    def _skip_neq_reg(self, vm, op):
        if int(vm.registers[op.register_x]) != int(vm.registers[op.register_y]):
            vm.program_counter += 2

    # Register loads and arithmetic

    def _load_imm(self, vm, op):
        vm.registers[op.register] = op.value

    def _add_imm(self, vm, op):
        # vF is untouched by 7xkk
        vm.registers[op.register] = (int(vm.registers[op.register]) + op.value) & 0xFF

    def _copy(self, vm, op):
        vm.registers[op.register_x] = vm.registers[op.register_y]

    def _logic(self, vm, op, result):
        vm.registers[op.register_x] = result
        if self.quirks['logic']:
            vm.registers[VF] = 0

    def _or(self, vm, op):
        self._logic(vm, op, int(vm.registers[op.register_x]) | int(vm.registers[op.register_y]))

    def _and(self, vm, op):
        self._logic(vm, op, int(vm.registers[op.register_x]) & int(vm.registers[op.register_y]))

    def _xor(self, vm, op):
        self._logic(vm, op, int(vm.registers[op.register_x]) ^ int(vm.registers[op.register_y]))

    def _add_reg(self, vm, op):
        # Store operands BEFORE modifying vF
        result = int(vm.registers[op.register_x]) + int(vm.registers[op.register_y])
        vm.registers[op.register_x] = result & 0xFF
        vm.registers[VF] = 1 if result > 0xFF else 0

    def _sub_reg(self, vm, op):
        vx_val = int(vm.registers[op.register_x])
        vy_val = int(vm.registers[op.register_y])
        vm.registers[op.register_x] = (vx_val - vy_val) & 0xFF
        vm.registers[VF] = 1 if vx_val >= vy_val else 0  # NOT borrow

    def _sub_reg_reverse(self, vm, op):
        vx_val = int(vm.registers[op.register_x])
        vy_val = int(vm.registers[op.register_y])
        vm.registers[op.register_x] = (vy_val - vx_val) & 0xFF
        vm.registers[VF] = 1 if vy_val >= vx_val else 0  # NOT borrow

    def _shift_source(self, vm, op) -> int:
        register = op.register_x if self.quirks['shifting'] else op.register_y
        return int(vm.registers[register])

    def _shift_right(self, vm, op):
        value = self._shift_source(vm, op)
        shifted_out = value & 0x1
        vm.registers[op.register_x] = value >> 1
        vm.registers[VF] = shifted_out

    def _shift_left(self, vm, op):
        value = self._shift_source(vm, op)
        shifted_out = (value & 0x80) >> 7
        vm.registers[op.register_x] = (value << 1) & 0xFF
        vm.registers[VF] = shifted_out

    # Index register and memory

    def _load_i(self, vm, op):
        vm.index_register = op.address

    def _add_x_to_i(self, vm, op):
        vm.index_register = (vm.index_register + int(vm.registers[op.register_x])) & 0xFFFF

    def _load_font_char(self, vm, op):
        vm.index_register = FONT_START + FONT_GLYPH_SIZE * int(vm.registers[op.register_x])

    def _store_bcd(self, vm, op):
        value = int(vm.registers[op.register_x])
        vm.write_memory(vm.index_register, [value // 100, (value // 10) % 10, value % 10])
        self.stats['memory_writes'] += 3

    def _store_registers(self, vm, op):
        count = op.register_x + 1
        vm.write_memory(vm.index_register, vm.registers[:count])
        self.stats['memory_writes'] += count
        if self.quirks['memory']:
            vm.index_register = (vm.index_register + count) & 0xFFFF

    def _load_registers(self, vm, op):
        count = op.register_x + 1
        vm.registers[:count] = vm.read_memory(vm.index_register, count)
        self.stats['memory_reads'] += count
        if self.quirks['memory']:
            vm.index_register = (vm.index_register + count) & 0xFFFF

    # Display

    def _draw_sprite(self, vm, op):
        """Draw an n-byte sprite from I at (Vx, Vy), XOR-ing it into vram"""
        start_x = int(vm.registers[op.register_x])
        start_y = int(vm.registers[op.register_y])

        # Only the start position wraps; pixels past the edge are clipped
        if start_x >= DISPLAY_WIDTH:
            start_x %= DISPLAY_WIDTH
        if start_y >= DISPLAY_HEIGHT:
            start_y %= DISPLAY_HEIGHT

        draw_logger.debug("drawing %d bytes at %d,%d", op.length, start_x, start_y)

        sprite = vm.read_memory(vm.index_register, op.length)
        self.stats['memory_reads'] += op.length

        vm.registers[VF] = 0  # Clear collision flag

        for row, sprite_byte in enumerate(sprite):
            sprite_byte = int(sprite_byte)
            for col in range(8):
                index = vram_index(start_x + col, start_y + row)
                if index is None:
                    continue
                sprite_pixel = (sprite_byte >> (7 - col)) & 1
                old_pixel = int(vm.vram[index])
                if old_pixel and sprite_pixel:
                    vm.registers[VF] = 1
                    self.stats['sprite_collisions'] += 1
                vm.vram[index] = old_pixel ^ sprite_pixel

        draw_logger.debug("Finished drawing. VF: %d", vm.registers[VF])
        if draw_logger.isEnabledFor(logging.DEBUG):
            draw_logger.debug("vram:\n%s", render_text(vm.get_display()))

        vm.redraw = True
        self.stats['display_writes'] += 1

    # Keys and timer

    def _skip_if_key_down(self, vm, op):
        key = int(vm.registers[op.register_x]) & 0xF
        instr_logger.debug("SkipIfKey: %X", key)
        vm.keyboard.log_state()
        self.stats['key_checks'] += 1
        if vm.keyboard.is_down(key):
            vm.program_counter += 2

    def _skip_if_key_up(self, vm, op):
        key = int(vm.registers[op.register_x]) & 0xF
        instr_logger.debug("SkipIfNotKey: %X", key)
        vm.keyboard.log_state()
        self.stats['key_checks'] += 1
        if not vm.keyboard.is_down(key):
            vm.program_counter += 2

    def _wait_for_key(self, vm, op):
        vm.mode = WaitForKey(register=op.register_x)
        self.stats['blocking_key_waits'] += 1

    def _read_delay_timer(self, vm, op):
        vm.registers[op.register_x] = vm.delay_timer.value

    def _set_delay_timer(self, vm, op):
        vm.delay_timer.set(vm.registers[op.register_x])
        self.stats['timer_sets'] += 1
