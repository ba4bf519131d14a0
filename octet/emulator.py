"""Main CHIP-8 emulator execution engine.

A whole fetch-decode-execute cycle is one compiled function. Handlers never
raise; they record a fault code in the state instead (see
:func:`octet.state.flag_fault`). The host inspects that code once per cycle
and, when it is set, throws the result away and raises the matching
:class:`EmulatorError`, so a faulting instruction leaves no trace.
"""

import jax
import jax.lax
import jax.numpy as jnp

from octet.state import EmulatorState, canonicalize, flag_fault
from octet.decode import DecodedInstruction, Instruction, INSTRUCTIONS, decode_operands
from octet.errors import INVALID_OPCODE, MEMORY_FAULT, NO_FAULT, error_from_code
from octet.memory import check_range, in_range, read_word, load_program
from octet.instructions.system import execute_clear_screen, execute_return
from octet.instructions.control_flow import (
    execute_jump, execute_call, execute_skip_if_equal_immediate,
    execute_skip_if_not_equal_immediate, execute_skip_if_equal_register,
    execute_skip_if_not_equal_register, execute_jump_with_offset,
    execute_skip_if_key, execute_skip_if_not_key
)
from octet.instructions.alu import (
    execute_copy_register, execute_or, execute_and, execute_xor, execute_add_registers,
    execute_subtract, execute_shift_right, execute_reverse_subtract, execute_shift_left
)
from octet.instructions.memory import execute_set, execute_add, execute_set_index, execute_random
from octet.instructions.display import execute_display
from octet.instructions.misc import (
    execute_get_delay_timer, execute_wait_for_key, execute_set_delay_timer,
    execute_set_sound_timer, execute_add_to_index, execute_font_character,
    execute_bcd_conversion, execute_store_registers, execute_load_registers
)


HANDLERS = {
    Instruction.CLEAR: execute_clear_screen,
    Instruction.RETURN: execute_return,
    Instruction.JUMP: execute_jump,
    Instruction.CALL: execute_call,
    Instruction.SKIP_IF_EQUAL_IMMEDIATE: execute_skip_if_equal_immediate,
    Instruction.SKIP_IF_NOT_EQUAL_IMMEDIATE: execute_skip_if_not_equal_immediate,
    Instruction.SKIP_IF_EQUAL_REGISTER: execute_skip_if_equal_register,
    Instruction.SET_REGISTER: execute_set,
    Instruction.ADD_IMMEDIATE: execute_add,
    Instruction.COPY_REGISTER: execute_copy_register,
    Instruction.OR: execute_or,
    Instruction.AND: execute_and,
    Instruction.XOR: execute_xor,
    Instruction.ADD: execute_add_registers,
    Instruction.SUBTRACT: execute_subtract,
    Instruction.SHIFT_RIGHT: execute_shift_right,
    Instruction.REVERSE_SUBTRACT: execute_reverse_subtract,
    Instruction.SHIFT_LEFT: execute_shift_left,
    Instruction.SKIP_IF_NOT_EQUAL_REGISTER: execute_skip_if_not_equal_register,
    Instruction.SET_INDEX: execute_set_index,
    Instruction.JUMP_WITH_OFFSET: execute_jump_with_offset,
    Instruction.RANDOM: execute_random,
    Instruction.DRAW: execute_display,
    Instruction.SKIP_IF_KEY: execute_skip_if_key,
    Instruction.SKIP_IF_NOT_KEY: execute_skip_if_not_key,
    Instruction.GET_DELAY_TIMER: execute_get_delay_timer,
    Instruction.WAIT_FOR_KEY: execute_wait_for_key,
    Instruction.SET_DELAY_TIMER: execute_set_delay_timer,
    Instruction.SET_SOUND_TIMER: execute_set_sound_timer,
    Instruction.ADD_TO_INDEX: execute_add_to_index,
    Instruction.FONT_CHARACTER: execute_font_character,
    Instruction.BCD: execute_bcd_conversion,
    Instruction.STORE_REGISTERS: execute_store_registers,
    Instruction.LOAD_REGISTERS: execute_load_registers,
}


def execute_invalid(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    return flag_fault(state, True, INVALID_OPCODE)


def _branch(handler):
    return lambda state, instruction: canonicalize(handler(state, instruction))


# Indexed by position in INSTRUCTIONS; the extra last branch takes invalid words
_BRANCHES = [_branch(HANDLERS[tag]) for tag in INSTRUCTIONS] + [_branch(execute_invalid)]


def _dispatch(state: EmulatorState, instruction) -> EmulatorState:
    decoded = decode_operands(instruction)
    branch = jnp.where(decoded.tag < 0, len(INSTRUCTIONS), decoded.tag)
    return jax.lax.switch(branch, _BRANCHES, state, decoded)


@jax.jit
def _execute(state: EmulatorState, instruction) -> EmulatorState:
    return _dispatch(state, instruction)


@jax.jit
def _step(state: EmulatorState) -> tuple[EmulatorState, jnp.ndarray]:
    address = jnp.astype(state.pc, jnp.int32)
    instruction = read_word(state.memory, address)
    state = flag_fault(state, ~in_range(address, 2), MEMORY_FAULT, address, 2)
    state = state.replace(pc=state.pc + 2)
    return _dispatch(state, instruction), instruction


def _check_fault(state: EmulatorState, instruction=None, address=None) -> None:
    code = int(state.fault)
    if code != NO_FAULT:
        raise error_from_code(
            code, instruction=instruction, address=address,
            start=int(state.fault_start), length=int(state.fault_length),
        )


def execute_decoded(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """Apply an already decoded instruction."""
    return execute(state, instruction.raw)


def execute(state: EmulatorState, instruction: int) -> EmulatorState:
    """Execute single CHIP-8 instruction.

    Raises:
        EmulatorError: with ``instruction`` filled in; ``state`` is untouched.
    """
    instruction = int(instruction) & 0xFFFF
    new_state = _execute(state, instruction)
    _check_fault(new_state, instruction=instruction)
    return new_state


def fetch(state: EmulatorState) -> tuple[EmulatorState, int]:
    """Fetch next instruction from memory."""
    address = int(state.pc)
    check_range(address, 2)
    return state.replace(pc=state.pc + 2), int(read_word(state.memory, address))


def step(state: EmulatorState) -> EmulatorState:
    """Run one fetch-decode-execute cycle.

    Raises:
        EmulatorError: with ``address`` and ``instruction`` filled in.
            ``instruction`` stays None when the fetch itself faulted.
    """
    new_state, instruction = _step(state)
    if int(new_state.fault) != NO_FAULT:
        address = int(state.pc)
        fetched = int(instruction) if in_range(address, 2) else None
        _check_fault(new_state, instruction=fetched, address=address)
    return new_state


def load_rom(state: EmulatorState, filename: str) -> EmulatorState:
    """Load ROM data into CHIP-8 memory starting at 0x200."""
    with open(filename, 'rb') as f:
        rom_data = f.read()
    return load_program(state, rom_data)
