"""CHIP-8 system instructions (0x0xxx)."""

import jax.numpy as jnp
from octet.state import EmulatorState, flag_fault
from octet.decode import DecodedInstruction
from octet.errors import STACK_UNDERFLOW
from octet.stack import pop


def execute_clear_screen(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """00E0 - Clear display."""
    return state.replace(display=jnp.zeros_like(state.display), display_changed=True)


def execute_return(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """00EE - Return from subroutine."""
    stack, address, underflow = pop(state.stack)
    state = flag_fault(state, underflow, STACK_UNDERFLOW)
    return state.replace(stack=stack, pc=address)
