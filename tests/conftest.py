"""Test configuration and fixtures for CHIP-8 interpreter tests."""

import pytest
import jax.numpy as jnp
from octet import create_state, Chip8
from octet.logging import EmulatorLogger


@pytest.fixture
def fresh_state():
    """Provide a fresh emulator state for each test."""
    return create_state()


@pytest.fixture
def quiet_logger():
    return EmulatorLogger(log_level="CRITICAL", use_colors=False)


@pytest.fixture
def make_machine(quiet_logger):
    """Build a machine running the given instruction words."""
    def _make(*words, data=b""):
        return Chip8(assemble(*words) + data, logger=quiet_logger)
    return _make


def assemble(*words):
    """Pack 16-bit instruction words into big-endian program bytes."""
    return b"".join(word.to_bytes(2, "big") for word in words)


def setup_sprite_in_memory(state, address, sprite_bytes):
    """Helper to put sprite data in memory."""
    return state.replace(
        memory=state.memory.at[address:address+len(sprite_bytes)].set(
            jnp.array(sprite_bytes, dtype=jnp.uint8)
        )
    )


def set_registers(state, **registers):
    """Set registers by name, e.g. set_registers(state, V1=0x10, VF=1)."""
    V = state.V
    for name, value in registers.items():
        V = V.at[int(name[1:], 16)].set(value)
    return state.replace(V=V)
