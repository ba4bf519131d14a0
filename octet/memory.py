"""Access to CHIP-8 memory.

``check_range``, ``read_bytes`` and ``write_bytes`` work on concrete
addresses and raise :class:`MemoryFault`. ``in_range``, ``gather_bytes`` and
``read_word`` are traceable; callers inside the compiled step pair them with
``in_range`` and :func:`octet.state.flag_fault`.
"""

import jax.numpy as jnp

from octet.constants import MEMORY_SIZE, PROGRAM_START, MAX_PROGRAM_SIZE
from octet.errors import MemoryFault
from octet.state import EmulatorState


def check_range(start: int, length: int = 1) -> None:
    """Raise MemoryFault unless [start, start + length) lies inside memory."""
    if start < 0 or length < 0 or start + length > MEMORY_SIZE:
        raise MemoryFault(start, length)


def read_bytes(memory: jnp.ndarray, start: int, length: int) -> jnp.ndarray:
    check_range(start, length)
    return memory[start:start + length]


def write_bytes(memory: jnp.ndarray, start: int, values) -> jnp.ndarray:
    values = jnp.asarray(values, dtype=jnp.uint8)
    check_range(start, values.shape[0])
    return memory.at[start:start + values.shape[0]].set(values)


def in_range(start, length):
    return (start >= 0) & (start + length <= MEMORY_SIZE)


def gather_bytes(memory: jnp.ndarray, start, length: int) -> jnp.ndarray:
    """Read ``length`` bytes from ``start``; addresses past the end read as 0."""
    return memory.at[start + jnp.arange(length)].get(mode="fill", fill_value=0)


def read_word(memory: jnp.ndarray, address) -> jnp.ndarray:
    """Read a big-endian 16-bit word."""
    high, low = gather_bytes(memory, address, 2).astype(jnp.uint16)
    return (high << 8) | low


def load_program(state: EmulatorState, program: bytes) -> EmulatorState:
    """Copy program bytes verbatim into memory starting at 0x200."""
    if len(program) > MAX_PROGRAM_SIZE:
        raise ValueError(
            f"Program is {len(program)} bytes, at most {MAX_PROGRAM_SIZE} fit in memory"
        )
    if not program:
        return state
    return state.replace(memory=write_bytes(state.memory, PROGRAM_START, list(program)))
