"""CHIP-8 ALU operations (8xxx).

Each operation maps (VX, VY) to (result, flag). A flag of None leaves VF
untouched. The result is written to VX first and the flag to VF second, so
when X is F the flag wins.
"""

from typing import Optional

import jax.numpy as jnp
from octet.constants import FLAG_REGISTER
from octet.decode import DecodedInstruction
from octet.state import EmulatorState


def alu_set(vx: jnp.ndarray, vy: jnp.ndarray) -> tuple[jnp.ndarray, Optional[jnp.ndarray]]:
    """8XY0 - Set: VX = VY."""
    return vy, None


def alu_or(vx: jnp.ndarray, vy: jnp.ndarray) -> tuple[jnp.ndarray, Optional[jnp.ndarray]]:
    """8XY1 - Binary OR: VX |= VY."""
    return vx | vy, None


def alu_and(vx: jnp.ndarray, vy: jnp.ndarray) -> tuple[jnp.ndarray, Optional[jnp.ndarray]]:
    """8XY2 - Binary AND: VX &= VY."""
    return vx & vy, None


def alu_xor(vx: jnp.ndarray, vy: jnp.ndarray) -> tuple[jnp.ndarray, Optional[jnp.ndarray]]:
    """8XY3 - Logical XOR: VX ^= VY."""
    return vx ^ vy, None


def alu_add(vx: jnp.ndarray, vy: jnp.ndarray) -> tuple[jnp.ndarray, Optional[jnp.ndarray]]:
    """8XY4 - Add: VX += VY, VF = carry."""
    result = vx + vy
    return result & 0xFF, result > 0xFF


def alu_sub_xy(vx: jnp.ndarray, vy: jnp.ndarray) -> tuple[jnp.ndarray, Optional[jnp.ndarray]]:
    """8XY5 - Subtract: VX -= VY, VF = 0 on borrow else 1."""
    return (vx - vy) & 0xFF, vx >= vy


def alu_shift_right(vx: jnp.ndarray, vy: jnp.ndarray) -> tuple[jnp.ndarray, Optional[jnp.ndarray]]:
    """8XY6 - Shift right: VX >>= 1, VF = bit shifted out."""
    return vx >> 1, vx & 1


def alu_sub_yx(vx: jnp.ndarray, vy: jnp.ndarray) -> tuple[jnp.ndarray, Optional[jnp.ndarray]]:
    """8XY7 - Subtract: VX = VY - VX, VF = 0 on borrow else 1."""
    return (vy - vx) & 0xFF, vy >= vx


def alu_shift_left(vx: jnp.ndarray, vy: jnp.ndarray) -> tuple[jnp.ndarray, Optional[jnp.ndarray]]:
    """8XYE - Shift left: VX <<= 1, VF = bit shifted out."""
    return (vx << 1) & 0xFF, (vx & 0x80) >> 7


def make_alu_instruction(operation):
    """Wrap an ALU operation as an 8XYN handler."""
    def alu_instruction(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
        vx = jnp.astype(state.V[instruction.x], jnp.int32)
        vy = jnp.astype(state.V[instruction.y], jnp.int32)

        result, vf = operation(vx, vy)

        new_V = state.V.at[instruction.x].set(jnp.astype(result, jnp.uint8))
        if vf is not None:
            new_V = new_V.at[FLAG_REGISTER].set(jnp.astype(vf, jnp.uint8))
        return state.replace(V=new_V)
    return alu_instruction


execute_copy_register = make_alu_instruction(alu_set)
execute_or = make_alu_instruction(alu_or)
execute_and = make_alu_instruction(alu_and)
execute_xor = make_alu_instruction(alu_xor)
execute_add_registers = make_alu_instruction(alu_add)
execute_subtract = make_alu_instruction(alu_sub_xy)
execute_shift_right = make_alu_instruction(alu_shift_right)
execute_reverse_subtract = make_alu_instruction(alu_sub_yx)
execute_shift_left = make_alu_instruction(alu_shift_left)
