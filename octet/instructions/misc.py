"""CHIP-8 miscellaneous instructions (Fxxx)."""

import jax.numpy as jnp
from octet.state import EmulatorState, flag_fault
from octet.decode import DecodedInstruction
from octet.constants import FONT_START, FONT_GLYPH_SIZE, ADDRESS_MASK, FLAG_REGISTER, NUM_REGISTERS
from octet.errors import MEMORY_FAULT
from octet.memory import gather_bytes, in_range


def execute_get_delay_timer(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """FX07 - Set VX to delay timer value."""
    return state.replace(V=state.V.at[instruction.x].set(state.delay_timer))


def execute_set_delay_timer(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """FX15 - Set delay timer to VX."""
    return state.replace(delay_timer=state.V[instruction.x])


def execute_set_sound_timer(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """FX18 - Set sound timer to VX."""
    return state.replace(sound_timer=state.V[instruction.x])


def execute_add_to_index(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """FX1E - Add VX to I register.

    VF is set to 1 when the sum leaves the 12-bit address space and is left
    alone otherwise.
    """
    new_i = jnp.astype(state.I, jnp.int32) + jnp.astype(state.V[instruction.x], jnp.int32)
    overflow_flag = new_i > ADDRESS_MASK
    new_vf = jnp.where(overflow_flag, 1, state.V[FLAG_REGISTER])
    return state.replace(
        I=jnp.astype(new_i & ADDRESS_MASK, jnp.uint16),
        V=state.V.at[FLAG_REGISTER].set(jnp.astype(new_vf, jnp.uint8))
    )


def execute_wait_for_key(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """FX0A - Wait for key press.

    Does not block: with no key held the pc is stepped back so the same
    instruction is fetched again on the next cycle.
    """
    pressed_key = state.keypad.last_pressed
    waiting = pressed_key < 0
    new_vx = jnp.where(waiting, state.V[instruction.x], jnp.astype(pressed_key, jnp.uint8))
    return state.replace(
        pc=jnp.where(waiting, state.pc - 2, state.pc),
        V=state.V.at[instruction.x].set(new_vx)
    )


def execute_font_character(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """FX29 - Set I to location of sprite for digit VX."""
    digit = jnp.astype(state.V[instruction.x], jnp.int32) & 0x0F
    font_address = FONT_START + digit * FONT_GLYPH_SIZE
    return state.replace(I=jnp.astype(font_address, jnp.uint16))


def execute_bcd_conversion(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """FX33 - Store BCD representation of VX at I, I+1, I+2."""
    value = jnp.astype(state.V[instruction.x], jnp.int32)

    digits = jnp.array([
        value // 100,
        (value // 10) % 10,
        value % 10
    ], dtype=jnp.uint8)

    start = jnp.astype(state.I, jnp.int32)
    new_memory = state.memory.at[start + jnp.arange(3)].set(digits, mode="drop")
    state = flag_fault(state, ~in_range(start, 3), MEMORY_FAULT, start, 3)
    return state.replace(memory=new_memory)


def execute_store_registers(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """FX55 - Store V0 through VX in memory starting at I."""
    count = instruction.x + 1
    start = jnp.astype(state.I, jnp.int32)
    register_mask = jnp.arange(NUM_REGISTERS) < count
    indices = start + jnp.arange(NUM_REGISTERS)
    current_memory_values = gather_bytes(state.memory, start, NUM_REGISTERS)
    new_memory_values = jnp.where(register_mask, state.V, current_memory_values)
    new_memory = state.memory.at[indices].set(new_memory_values, mode="drop")
    state = flag_fault(state, ~in_range(start, count), MEMORY_FAULT, start, count)
    return state.replace(memory=new_memory)


def execute_load_registers(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """FX65 - Load V0 through VX from memory starting at I."""
    count = instruction.x + 1
    start = jnp.astype(state.I, jnp.int32)
    register_mask = jnp.arange(NUM_REGISTERS) < count
    values = gather_bytes(state.memory, start, NUM_REGISTERS)
    state = flag_fault(state, ~in_range(start, count), MEMORY_FAULT, start, count)
    return state.replace(V=jnp.where(register_mask, values, state.V))
