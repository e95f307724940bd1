"""
Instruction decoder tests: every opcode pattern, rejected patterns and the
trace text used by the debug history.
"""

import pytest

from chip8vm import instructions as ins
from chip8vm.engine import ExecutionEngine
from chip8vm.errors import DecodeError


class TestDecodeTable:

    @pytest.mark.parametrize("word, expected", [
        (0x00E0, ins.Clear()),
        (0x00EE, ins.Return()),
        (0x1ABC, ins.Jump(0xABC)),
        (0x2345, ins.Call(0x345)),
        (0x3A42, ins.SkipEq(0xA, 0x42)),
        (0x4B07, ins.SkipNeq(0xB, 0x07)),
        (0x5120, ins.SkipEqReg(0x1, 0x2)),
        (0x6A05, ins.LoadImm(0xA, 0x05)),
        (0x7CFF, ins.AddImm(0xC, 0xFF)),
        (0x8120, ins.Copy(0x1, 0x2)),
        (0x8121, ins.Or(0x1, 0x2)),
        (0x8122, ins.And(0x1, 0x2)),
        (0x8123, ins.Xor(0x1, 0x2)),
        (0x8124, ins.AddReg(0x1, 0x2)),
        (0x8125, ins.SubReg(0x1, 0x2)),
        (0x8126, ins.ShiftRight(0x1, 0x2)),
        (0x8127, ins.SubRegReverse(0x1, 0x2)),
        (0x812E, ins.ShiftLeft(0x1, 0x2)),
        (0x9340, ins.SkipNeqReg(0x3, 0x4)),
        (0xA123, ins.LoadI(0x123)),
        (0xB300, ins.JumpV0Offset(0x300)),
        (0xD015, ins.DrawSprite(0x0, 0x1, 0x5)),
        (0xE59E, ins.SkipIfKeyDown(0x5)),
        (0xE5A1, ins.SkipIfKeyUp(0x5)),
        (0xF207, ins.ReadDelayTimer(0x2)),
        (0xF30A, ins.WaitForKeyPress(0x3)),
        (0xF415, ins.SetDelayTimer(0x4)),
        (0xF51E, ins.AddXToI(0x5)),
        (0xF629, ins.LoadFontChar(0x6)),
        (0xF733, ins.StoreBCD(0x7)),
        (0xF855, ins.StoreRegisters(0x8)),
        (0xF965, ins.LoadRegisters(0x9)),
    ])
    def test_decodes(self, word, expected):
        assert ins.decode(word) == expected

    def test_every_variant_is_reachable(self):
        decoded = {type(ins.decode(w)) for w in range(0x10000)
                   if not _raises(w)}
        assert decoded == set(ins.INSTRUCTION_TYPES)

    def test_engine_handles_every_variant(self):
        assert set(ExecutionEngine()._handlers) == set(ins.INSTRUCTION_TYPES)

    def test_decoding_is_pure(self):
        assert ins.decode(0xD015) == ins.decode(0xD015)
        assert ins.decode(0xD015) is not ins.decode(0xD015)

    def test_accepts_numpy_integers(self):
        import numpy as np
        assert ins.decode(np.uint16(0x6A05)) == ins.LoadImm(0xA, 5)


def _raises(word):
    try:
        ins.decode(word)
    except DecodeError:
        return True
    return False


class TestDecodeErrors:

    @pytest.mark.parametrize("word", [
        0x0000,  # SYS calls are not supported
        0x0123,
        0x00E1,
        0x5121,
        0x8128,
        0x812F,
        0x9341,
        0xC0FF,  # RND is not part of this instruction set
        0xE09F,
        0xF018,  # no sound timer
        0xF0FF,
        0xFFFF,
    ])
    def test_unknown_patterns(self, word):
        with pytest.raises(DecodeError) as excinfo:
            ins.decode(word)
        assert excinfo.value.word == word
        assert f"0x{word:04X}" in str(excinfo.value)

    def test_address_in_message(self):
        err = DecodeError(0xFFFF, 0x2A4)
        assert err.address == 0x2A4
        assert "PC=0x2A4" in str(err)


class TestTraceText:

    @pytest.mark.parametrize("word, text", [
        (0x00E0, "CLS"),
        (0x00EE, "RET"),
        (0x1208, "JP $208"),
        (0x6A05, "LD VA, #05"),
        (0x8124, "ADD V1, V2"),
        (0xA20A, "LD I, $20A"),
        (0xB300, "JP V0, $300"),
        (0xD015, "DRW V0, V1, #5"),
        (0xE59E, "SKP V5"),
        (0xF30A, "LD V3, K"),
        (0xF855, "LD [I], V8"),
    ])
    def test_str(self, word, text):
        assert str(ins.decode(word)) == text

    def test_trace_entry(self):
        entry = ins.TraceEntry(0x200, 0x6A05, ins.decode(0x6A05))
        assert str(entry) == "$200  6A05  LD VA, #05"
        assert entry.address == 0x200

    def test_patterns_are_unique(self):
        patterns = [t.pattern for t in ins.INSTRUCTION_TYPES]
        assert len(patterns) == len(set(patterns))
