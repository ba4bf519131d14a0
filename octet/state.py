"""CHIP-8 emulator state structures."""

import jax
import jax.numpy as jnp
from dataclasses import field

from flax.struct import dataclass, PyTreeNode

from octet.constants import (
    MEMORY_SIZE, PROGRAM_START, FONT_START, FONT_DATA, SCREEN_WIDTH, SCREEN_HEIGHT,
    STACK_SIZE, NUM_REGISTERS, NUM_KEYS,
)
from octet.errors import NO_FAULT


@dataclass
class StackState:
    """Stack state for subroutine calls."""
    data: jnp.ndarray = field(default_factory=lambda: jnp.zeros(STACK_SIZE, dtype=jnp.uint16))
    pointer: jnp.ndarray = field(default_factory=lambda: jnp.zeros((), dtype=jnp.int32))


@dataclass
class KeypadState:
    """Sixteen held flags plus the most recently pressed key that is still held.

    ``last_pressed`` is -1 when no such key exists.
    """
    held: jnp.ndarray = field(default_factory=lambda: jnp.zeros(NUM_KEYS, dtype=jnp.bool_))
    last_pressed: jnp.ndarray = field(default_factory=lambda: jnp.array(-1, dtype=jnp.int8))


class EmulatorState(PyTreeNode):
    """Main CHIP-8 emulator state.

    ``fault`` is only ever non-zero in the output of a step that must be
    discarded; see :func:`octet.emulator.step`.
    """
    rng: jax.random.PRNGKey
    memory: jnp.ndarray = field(default_factory=lambda: jnp.zeros(MEMORY_SIZE, dtype=jnp.uint8))
    pc: jnp.ndarray = field(default_factory=lambda: jnp.astype(PROGRAM_START, jnp.uint16))
    display: jnp.ndarray = field(default_factory=lambda: jnp.zeros((SCREEN_WIDTH, SCREEN_HEIGHT), dtype=jnp.bool_))
    display_changed: jnp.ndarray = field(default_factory=lambda: jnp.zeros((), dtype=jnp.bool_))
    stack: StackState = StackState()
    delay_timer: jnp.ndarray = field(default_factory=lambda: jnp.zeros((), dtype=jnp.uint8))
    sound_timer: jnp.ndarray = field(default_factory=lambda: jnp.zeros((), dtype=jnp.uint8))
    keypad: KeypadState = KeypadState()
    V: jnp.ndarray = field(default_factory=lambda: jnp.zeros(NUM_REGISTERS, dtype=jnp.uint8))
    I: jnp.ndarray = field(default_factory=lambda: jnp.zeros((), dtype=jnp.uint16))
    fault: jnp.ndarray = field(default_factory=lambda: jnp.zeros((), dtype=jnp.int32))
    fault_start: jnp.ndarray = field(default_factory=lambda: jnp.zeros((), dtype=jnp.int32))
    fault_length: jnp.ndarray = field(default_factory=lambda: jnp.zeros((), dtype=jnp.int32))


def create_state(rng: jax.random.PRNGKey = jax.random.PRNGKey(0)) -> EmulatorState:
    """Create initial emulator state with font data loaded."""
    state = EmulatorState(rng)
    return state.replace(memory=state.memory.at[FONT_START:FONT_START + len(FONT_DATA)].set(FONT_DATA))


def flag_fault(state: EmulatorState, condition, code: int, start=0, length=0) -> EmulatorState:
    """Record fault ``code`` where ``condition`` holds. The first fault of a step wins."""
    raised = condition & (state.fault == NO_FAULT)
    return state.replace(
        fault=jnp.where(raised, code, state.fault),
        fault_start=jnp.where(raised, start, state.fault_start),
        fault_length=jnp.where(raised, length, state.fault_length),
    )


def canonicalize(state: EmulatorState) -> EmulatorState:
    """Cast every field back to its storage dtype so all handlers agree on types."""
    cast = jax.lax.convert_element_type
    return state.replace(
        memory=cast(state.memory, jnp.uint8),
        pc=cast(state.pc, jnp.uint16),
        display=cast(state.display, jnp.bool_),
        display_changed=cast(state.display_changed, jnp.bool_),
        stack=state.stack.replace(
            data=cast(state.stack.data, jnp.uint16),
            pointer=cast(state.stack.pointer, jnp.int32),
        ),
        delay_timer=cast(state.delay_timer, jnp.uint8),
        sound_timer=cast(state.sound_timer, jnp.uint8),
        keypad=state.keypad.replace(
            held=cast(state.keypad.held, jnp.bool_),
            last_pressed=cast(state.keypad.last_pressed, jnp.int8),
        ),
        V=cast(state.V, jnp.uint8),
        I=cast(state.I, jnp.uint16),
        fault=cast(state.fault, jnp.int32),
        fault_start=cast(state.fault_start, jnp.int32),
        fault_length=cast(state.fault_length, jnp.int32),
    )


@jax.jit
def tick_timers(state: EmulatorState) -> EmulatorState:
    """Decrement delay and sound timers by one, stopping at zero."""
    return state.replace(
        delay_timer=jnp.where(state.delay_timer > 0, state.delay_timer - 1, 0).astype(jnp.uint8),
        sound_timer=jnp.where(state.sound_timer > 0, state.sound_timer - 1, 0).astype(jnp.uint8),
    )
