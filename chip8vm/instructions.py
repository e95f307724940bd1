"""
CHIP-8 Instruction Decoder
Turns a 16-bit instruction word into a typed instruction value.

Every opcode is its own frozen dataclass, so the set of instructions is closed
and the execution engine can dispatch on the type. Decoding never touches the
machine.
"""

from dataclasses import dataclass
from typing import NamedTuple

from .errors import DecodeError


@dataclass(frozen=True)
class Instruction:
    """Base class of all decoded instructions"""

    pattern = "????"
    mnemonic = "???"

    @property
    def operands(self) -> str:
        return ""

    def __str__(self):
        operands = self.operands
        return f"{self.mnemonic} {operands}" if operands else self.mnemonic


@dataclass(frozen=True)
class _Address(Instruction):
    address: int

    @property
    def operands(self) -> str:
        return f"${self.address:03X}"


@dataclass(frozen=True)
class _RegisterImmediate(Instruction):
    register: int
    value: int

    @property
    def operands(self) -> str:
        return f"V{self.register:X}, #{self.value:02X}"


@dataclass(frozen=True)
class _RegisterPair(Instruction):
    register_x: int
    register_y: int

    @property
    def operands(self) -> str:
        return f"V{self.register_x:X}, V{self.register_y:X}"


@dataclass(frozen=True)
class _Register(Instruction):
    register_x: int

    @property
    def operands(self) -> str:
        return f"V{self.register_x:X}"


@dataclass(frozen=True)
class Clear(Instruction):
    pattern = "00E0"
    mnemonic = "CLS"


@dataclass(frozen=True)
class Return(Instruction):
    pattern = "00EE"
    mnemonic = "RET"


@dataclass(frozen=True)
class Jump(_Address):
    pattern = "1nnn"
    mnemonic = "JP"


@dataclass(frozen=True)
class Call(_Address):
    pattern = "2nnn"
    mnemonic = "CALL"


@dataclass(frozen=True)
class SkipEq(_RegisterImmediate):
    pattern = "3xkk"
    mnemonic = "SE"


@dataclass(frozen=True)
class SkipNeq(_RegisterImmediate):
    pattern = "4xkk"
    mnemonic = "SNE"


@dataclass(frozen=True)
class SkipEqReg(_RegisterPair):
    pattern = "5xy0"
    mnemonic = "SE"


@dataclass(frozen=True)
class LoadImm(_RegisterImmediate):
    pattern = "6xkk"
    mnemonic = "LD"


@dataclass(frozen=True)
class AddImm(_RegisterImmediate):
    pattern = "7xkk"
    mnemonic = "ADD"


@dataclass(frozen=True)
class Copy(_RegisterPair):
    pattern = "8xy0"
    mnemonic = "LD"


@dataclass(frozen=True)
class Or(_RegisterPair):
    pattern = "8xy1"
    mnemonic = "OR"


@dataclass(frozen=True)
class And(_RegisterPair):
    pattern = "8xy2"
    mnemonic = "AND"


@dataclass(frozen=True)
class Xor(_RegisterPair):
    pattern = "8xy3"
    mnemonic = "XOR"


@dataclass(frozen=True)
class AddReg(_RegisterPair):
    pattern = "8xy4"
    mnemonic = "ADD"


@dataclass(frozen=True)
class SubReg(_RegisterPair):
    """Vx = Vx - Vy"""
    pattern = "8xy5"
    mnemonic = "SUB"


@dataclass(frozen=True)
class ShiftRight(_RegisterPair):
    pattern = "8xy6"
    mnemonic = "SHR"


@dataclass(frozen=True)
class SubRegReverse(_RegisterPair):
    """Vx = Vy - Vx"""
    pattern = "8xy7"
    mnemonic = "SUBN"


@dataclass(frozen=True)
class ShiftLeft(_RegisterPair):
    pattern = "8xyE"
    mnemonic = "SHL"


@dataclass(frozen=True)
class SkipNeqReg(_RegisterPair):
    pattern = "9xy0"
    mnemonic = "SNE"


@dataclass(frozen=True)
class LoadI(_Address):
    pattern = "Annn"
    mnemonic = "LD"

    @property
    def operands(self) -> str:
        return f"I, ${self.address:03X}"


@dataclass(frozen=True)
class JumpV0Offset(_Address):
    pattern = "Bnnn"
    mnemonic = "JP"

    @property
    def operands(self) -> str:
        return f"V0, ${self.address:03X}"


@dataclass(frozen=True)
class DrawSprite(_RegisterPair):
    length: int

    pattern = "Dxyn"
    mnemonic = "DRW"

    @property
    def operands(self) -> str:
        return f"V{self.register_x:X}, V{self.register_y:X}, #{self.length:X}"


@dataclass(frozen=True)
class SkipIfKeyDown(_Register):
    pattern = "Ex9E"
    mnemonic = "SKP"


@dataclass(frozen=True)
class SkipIfKeyUp(_Register):
    pattern = "ExA1"
    mnemonic = "SKNP"


@dataclass(frozen=True)
class ReadDelayTimer(_Register):
    pattern = "Fx07"
    mnemonic = "LD"

    @property
    def operands(self) -> str:
        return f"V{self.register_x:X}, DT"


@dataclass(frozen=True)
class WaitForKeyPress(_Register):
    pattern = "Fx0A"
    mnemonic = "LD"

    @property
    def operands(self) -> str:
        return f"V{self.register_x:X}, K"


@dataclass(frozen=True)
class SetDelayTimer(_Register):
    pattern = "Fx15"
    mnemonic = "LD"

    @property
    def operands(self) -> str:
        return f"DT, V{self.register_x:X}"


@dataclass(frozen=True)
class AddXToI(_Register):
    pattern = "Fx1E"
    mnemonic = "ADD"

    @property
    def operands(self) -> str:
        return f"I, V{self.register_x:X}"


@dataclass(frozen=True)
class LoadFontChar(_Register):
    pattern = "Fx29"
    mnemonic = "LD"

    @property
    def operands(self) -> str:
        return f"F, V{self.register_x:X}"


@dataclass(frozen=True)
class StoreBCD(_Register):
    pattern = "Fx33"
    mnemonic = "LD"

    @property
    def operands(self) -> str:
        return f"B, V{self.register_x:X}"


@dataclass(frozen=True)
class StoreRegisters(_Register):
    pattern = "Fx55"
    mnemonic = "LD"

    @property
    def operands(self) -> str:
        return f"[I], V{self.register_x:X}"


@dataclass(frozen=True)
class LoadRegisters(_Register):
    pattern = "Fx65"
    mnemonic = "LD"

    @property
    def operands(self) -> str:
        return f"V{self.register_x:X}, [I]"


INSTRUCTION_TYPES = (
    Clear, Return, Jump, Call, SkipEq, SkipNeq, SkipEqReg, LoadImm, AddImm,
    Copy, Or, And, Xor, AddReg, SubReg, ShiftRight, SubRegReverse, ShiftLeft,
    SkipNeqReg, LoadI, JumpV0Offset, DrawSprite, SkipIfKeyDown, SkipIfKeyUp,
    ReadDelayTimer, WaitForKeyPress, SetDelayTimer, AddXToI, LoadFontChar,
    StoreBCD, StoreRegisters, LoadRegisters,
)

_REGISTER_PAIR_OPS = {
    0x0: Copy,
    0x1: Or,
    0x2: And,
    0x3: Xor,
    0x4: AddReg,
    0x5: SubReg,
    0x6: ShiftRight,
    0x7: SubRegReverse,
    0xE: ShiftLeft,
}

_FXXX_OPS = {
    0x07: ReadDelayTimer,
    0x0A: WaitForKeyPress,
    0x15: SetDelayTimer,
    0x1E: AddXToI,
    0x29: LoadFontChar,
    0x33: StoreBCD,
    0x55: StoreRegisters,
    0x65: LoadRegisters,
}


class TraceEntry(NamedTuple):
    """One decoded instruction as recorded in the machine's history"""
    address: int
    word: int
    instruction: Instruction

    def __str__(self):
        return f"${self.address:03X}  {self.word:04X}  {self.instruction}"


def decode(word: int) -> Instruction:
    """
    Decode a single CHIP-8 instruction word.
    Raises DecodeError for bit patterns outside the opcode table.
    """
    word = int(word)
    if not 0 <= word <= 0xFFFF:
        raise DecodeError(word & 0xFFFF)

    # Extract components
    opcode = (word & 0xF000) >> 12
    x = (word & 0x0F00) >> 8
    y = (word & 0x00F0) >> 4
    n = word & 0x000F
    kk = word & 0x00FF
    nnn = word & 0x0FFF

    if word == 0x00E0:
        return Clear()
    elif word == 0x00EE:
        return Return()
    elif opcode == 0x1:
        return Jump(nnn)
    elif opcode == 0x2:
        return Call(nnn)
    elif opcode == 0x3:
        return SkipEq(x, kk)
    elif opcode == 0x4:
        return SkipNeq(x, kk)
    elif opcode == 0x5 and n == 0:
        return SkipEqReg(x, y)
    elif opcode == 0x6:
        return LoadImm(x, kk)
    elif opcode == 0x7:
        return AddImm(x, kk)
    elif opcode == 0x8 and n in _REGISTER_PAIR_OPS:
        return _REGISTER_PAIR_OPS[n](x, y)
    elif opcode == 0x9 and n == 0:
        return SkipNeqReg(x, y)
    elif opcode == 0xA:
        return LoadI(nnn)
    elif opcode == 0xB:
        return JumpV0Offset(nnn)
    elif opcode == 0xD:
        return DrawSprite(x, y, n)
    elif opcode == 0xE and kk == 0x9E:
        return SkipIfKeyDown(x)
    elif opcode == 0xE and kk == 0xA1:
        return SkipIfKeyUp(x)
    elif opcode == 0xF and kk in _FXXX_OPS:
        return _FXXX_OPS[kk](x)

    raise DecodeError(word)

