"""CHIP-8 instruction decoding."""

import enum

import jax.numpy as jnp
import numpy as np
from chex import dataclass

from octet.errors import InvalidOpcode


class Instruction(enum.Enum):
    """Every instruction shape the interpreter understands."""
    CLEAR = "00E0"
    RETURN = "00EE"
    JUMP = "1NNN"
    CALL = "2NNN"
    SKIP_IF_EQUAL_IMMEDIATE = "3XNN"
    SKIP_IF_NOT_EQUAL_IMMEDIATE = "4XNN"
    SKIP_IF_EQUAL_REGISTER = "5XY0"
    SET_REGISTER = "6XNN"
    ADD_IMMEDIATE = "7XNN"
    COPY_REGISTER = "8XY0"
    OR = "8XY1"
    AND = "8XY2"
    XOR = "8XY3"
    ADD = "8XY4"
    SUBTRACT = "8XY5"
    SHIFT_RIGHT = "8XY6"
    REVERSE_SUBTRACT = "8XY7"
    SHIFT_LEFT = "8XYE"
    SKIP_IF_NOT_EQUAL_REGISTER = "9XY0"
    SET_INDEX = "ANNN"
    JUMP_WITH_OFFSET = "BNNN"
    RANDOM = "CXNN"
    DRAW = "DXYN"
    SKIP_IF_KEY = "EX9E"
    SKIP_IF_NOT_KEY = "EXA1"
    GET_DELAY_TIMER = "FX07"
    WAIT_FOR_KEY = "FX0A"
    SET_DELAY_TIMER = "FX15"
    SET_SOUND_TIMER = "FX18"
    ADD_TO_INDEX = "FX1E"
    FONT_CHARACTER = "FX29"
    BCD = "FX33"
    STORE_REGISTERS = "FX55"
    LOAD_REGISTERS = "FX65"


@dataclass(frozen=True)
class DecodedInstruction:
    """Decoded CHIP-8 instruction with extracted operands.

    Handlers read only the operand fields, so the same handler runs on a
    host-decoded instruction or on one traced by :func:`decode_operands`.
    """
    raw: int
    tag: Instruction
    opcode: int  # First nibble
    x: int       # Second nibble (VX register)
    y: int       # Third nibble (VY register)
    n: int       # Fourth nibble (4-bit immediate)
    nn: int      # Last byte (8-bit immediate)
    nnn: int     # Last 12 bits (12-bit address)

    def __str__(self) -> str:
        return f"{self.raw:04X} {self.tag.name}"


_FULL_WORD = {
    0x00E0: Instruction.CLEAR,
    0x00EE: Instruction.RETURN,
}

_BY_OPCODE = {
    0x1: Instruction.JUMP,
    0x2: Instruction.CALL,
    0x3: Instruction.SKIP_IF_EQUAL_IMMEDIATE,
    0x4: Instruction.SKIP_IF_NOT_EQUAL_IMMEDIATE,
    0x5: Instruction.SKIP_IF_EQUAL_REGISTER,
    0x6: Instruction.SET_REGISTER,
    0x7: Instruction.ADD_IMMEDIATE,
    0x9: Instruction.SKIP_IF_NOT_EQUAL_REGISTER,
    0xA: Instruction.SET_INDEX,
    0xB: Instruction.JUMP_WITH_OFFSET,
    0xC: Instruction.RANDOM,
    0xD: Instruction.DRAW,
}

# 8XYN, dispatched on N
_ALU = {
    0x0: Instruction.COPY_REGISTER,
    0x1: Instruction.OR,
    0x2: Instruction.AND,
    0x3: Instruction.XOR,
    0x4: Instruction.ADD,
    0x5: Instruction.SUBTRACT,
    0x6: Instruction.SHIFT_RIGHT,
    0x7: Instruction.REVERSE_SUBTRACT,
    0xE: Instruction.SHIFT_LEFT,
}

# EXNN, dispatched on NN
_KEYS = {
    0x9E: Instruction.SKIP_IF_KEY,
    0xA1: Instruction.SKIP_IF_NOT_KEY,
}

# FXNN, dispatched on NN
_MISC = {
    0x07: Instruction.GET_DELAY_TIMER,
    0x0A: Instruction.WAIT_FOR_KEY,
    0x15: Instruction.SET_DELAY_TIMER,
    0x18: Instruction.SET_SOUND_TIMER,
    0x1E: Instruction.ADD_TO_INDEX,
    0x29: Instruction.FONT_CHARACTER,
    0x33: Instruction.BCD,
    0x55: Instruction.STORE_REGISTERS,
    0x65: Instruction.LOAD_REGISTERS,
}


INSTRUCTIONS = tuple(Instruction)


def _build_opcode_table() -> np.ndarray:
    """Map every 16-bit word to the index of its tag in INSTRUCTIONS, or -1."""
    index = {tag: i for i, tag in enumerate(INSTRUCTIONS)}
    words = np.arange(0x10000)
    opcode, n, nn = words >> 12, words & 0xF, words & 0xFF

    table = np.full(0x10000, -1, dtype=np.int8)
    for value, tag in _BY_OPCODE.items():
        table[opcode == value] = index[tag]
    for value, tag in _ALU.items():
        table[(opcode == 0x8) & (n == value)] = index[tag]
    for value, tag in _KEYS.items():
        table[(opcode == 0xE) & (nn == value)] = index[tag]
    for value, tag in _MISC.items():
        table[(opcode == 0xF) & (nn == value)] = index[tag]
    for word, tag in _FULL_WORD.items():
        table[word] = index[tag]
    return table


OPCODE_TABLE = _build_opcode_table()
_OPCODE_TABLE_DEVICE = jnp.asarray(OPCODE_TABLE)


def decode(instruction: int) -> DecodedInstruction:
    """Decode 16-bit instruction into components.

    Raises:
        InvalidOpcode: if the word matches no known instruction shape.
    """
    instruction = int(instruction) & 0xFFFF
    tag_index = int(OPCODE_TABLE[instruction])
    if tag_index < 0:
        raise InvalidOpcode(instruction)
    return DecodedInstruction(
        raw=instruction,
        tag=INSTRUCTIONS[tag_index],
        opcode=(instruction & 0xF000) >> 12,
        x=(instruction & 0x0F00) >> 8,
        y=(instruction & 0x00F0) >> 4,
        n=instruction & 0x000F,
        nn=instruction & 0x00FF,
        nnn=instruction & 0x0FFF
    )


def decode_operands(instruction) -> DecodedInstruction:
    """Traceable decode. ``tag`` holds the tag's index in INSTRUCTIONS, -1 if invalid."""
    instruction = jnp.asarray(instruction, dtype=jnp.int32) & 0xFFFF
    return DecodedInstruction(
        raw=instruction,
        tag=_OPCODE_TABLE_DEVICE[instruction].astype(jnp.int32),
        opcode=(instruction & 0xF000) >> 12,
        x=(instruction & 0x0F00) >> 8,
        y=(instruction & 0x00F0) >> 4,
        n=instruction & 0x000F,
        nn=instruction & 0x00FF,
        nnn=instruction & 0x0FFF
    )
