"""Tests for miscellaneous instructions (Fxxx)."""

import jax.numpy as jnp
import pytest
from octet import execute, create_state, tick_timers, MemoryFault, PROGRAM_START
from octet.keypad import press_key, release_key
from conftest import set_registers


class TestTimers:
    """Test timer-related instructions."""

    def test_misc_timer_instructions(self, fresh_state):
        state = execute(fresh_state, 0x6030)  # V0 = 48
        state = execute(state, 0xF015)  # Set delay timer to V0
        assert state.delay_timer == 48

        state = execute(state, 0x6120)  # V1 = 32
        state = execute(state, 0xF118)  # Set sound timer to V1
        assert state.sound_timer == 32

        state = execute(state, 0xF207)  # V2 = delay timer
        assert state.V[2] == 48

    def test_tick_timers(self, fresh_state):
        state = fresh_state.replace(
            delay_timer=jnp.array(2, dtype=jnp.uint8),
            sound_timer=jnp.array(1, dtype=jnp.uint8),
        )
        state = tick_timers(state)
        assert state.delay_timer == 1
        assert state.sound_timer == 0

        state = tick_timers(tick_timers(state))
        assert state.delay_timer == 0
        assert state.sound_timer == 0


class TestIndexAdd:
    """FX1E - Add VX to I."""

    def test_add_to_index(self, fresh_state):
        state = set_registers(fresh_state, V3=0x10, VF=0x05)
        state = execute(state, 0xA300)
        state = execute(state, 0xF31E)
        assert state.I == 0x310
        assert state.V[15] == 0x05  # untouched without overflow

    def test_add_to_index_overflow(self, fresh_state):
        state = set_registers(fresh_state, V3=0x02)
        state = execute(state, 0xAFFF)
        state = execute(state, 0xF31E)
        assert state.I == 0x001
        assert state.V[15] == 1


class TestBCD:
    """Test BCD conversion."""

    @pytest.mark.parametrize("value, digits", [
        (234, [2, 3, 4]),
        (156, [1, 5, 6]),
        (0, [0, 0, 0]),
        (7, [0, 0, 7]),
        (255, [2, 5, 5]),
    ])
    def test_bcd(self, fresh_state, value, digits):
        state = set_registers(fresh_state, V0=value)
        state = execute(state, 0xA300)
        state = execute(state, 0xF033)

        assert [int(b) for b in state.memory[0x300:0x303]] == digits

    def test_bcd_past_end_of_memory(self, fresh_state):
        state = execute(fresh_state, 0xAFFE)
        with pytest.raises(MemoryFault):
            execute(state, 0xF033)


class TestFont:
    """Test font character addressing."""

    def test_font_all_characters(self, fresh_state):
        state = fresh_state
        for digit in range(16):
            state = execute(state, 0x6000 | digit)
            state = execute(state, 0xF029)
            assert state.I == 0x50 + digit * 5, f"Font address wrong for digit {digit:X}"

    def test_font_uses_low_nibble(self, fresh_state):
        state = set_registers(fresh_state, V4=0x3A)
        state = execute(state, 0xF429)
        assert state.I == 0x50 + 0xA * 5


class TestMemoryOperations:
    """Test store/load register operations."""

    def test_store_load_round_trip(self, fresh_state):
        state = set_registers(fresh_state, V0=1, V1=2, V2=3, V3=4)
        state = execute(state, 0xA300)

        state = execute(state, 0xF255)  # Store V0-V2
        assert state.I == 0x300
        assert [int(b) for b in state.memory[0x300:0x304]] == [1, 2, 3, 0]

        state = set_registers(state, V0=0, V1=0, V2=0)
        state = execute(state, 0xF265)
        assert [int(v) for v in state.V[:4]] == [1, 2, 3, 4]
        assert state.I == 0x300

    def test_store_single_register(self, fresh_state):
        """X = 0 touches exactly V0 at I."""
        state = set_registers(fresh_state, V0=0xAA, V1=0xBB)
        state = execute(state, 0xA300)
        state = execute(state, 0xF055)
        assert state.memory[0x300] == 0xAA
        assert state.memory[0x301] == 0

    def test_load_single_register(self, fresh_state):
        state = fresh_state.replace(memory=fresh_state.memory.at[0x300:0x302].set(jnp.array([7, 8], dtype=jnp.uint8)))
        state = execute(state, 0xA300)
        state = execute(state, 0xF065)
        assert state.V[0] == 7
        assert state.V[1] == 0

    def test_store_all_registers(self, fresh_state):
        state = fresh_state.replace(V=jnp.arange(1, 17, dtype=jnp.uint8))
        state = execute(state, 0xA300)
        state = execute(state, 0xFF55)
        assert [int(b) for b in state.memory[0x300:0x310]] == list(range(1, 17))

    def test_load_all_registers(self, fresh_state):
        state = fresh_state.replace(memory=fresh_state.memory.at[0x300:0x310].set(jnp.arange(16, dtype=jnp.uint8) * 2))
        state = execute(state, 0xA300)
        state = execute(state, 0xFF65)
        assert [int(v) for v in state.V] == [i * 2 for i in range(16)]

    def test_store_past_end_is_atomic(self, fresh_state):
        state = set_registers(fresh_state, V0=1, V1=2)
        state = execute(state, 0xAFFF)
        with pytest.raises(MemoryFault):
            execute(state, 0xF155)
        assert state.memory[0xFFF] == 0

    def test_store_and_load_ending_at_last_byte(self, fresh_state):
        state = set_registers(fresh_state, V0=9, V1=8)
        state = execute(state, 0xAFFE)
        state = execute(state, 0xF155)
        assert [int(b) for b in state.memory[0xFFE:]] == [9, 8]

        state = execute(set_registers(state, V0=0, V1=0, V2=7), 0xF165)
        assert [int(v) for v in state.V[:3]] == [9, 8, 7]


class TestWaitForKey:
    """FX0A reads the most recent key that is still held."""

    def test_wait_without_key(self, fresh_state):
        state = execute(fresh_state, 0xF00A)
        assert state.pc == PROGRAM_START - 2

    def test_wait_with_key(self, fresh_state):
        state = fresh_state.replace(keypad=press_key(fresh_state.keypad, 7))
        state = execute(state, 0xF30A)
        assert state.V[3] == 7
        assert state.pc == PROGRAM_START

    def test_wait_uses_latest_press(self, fresh_state):
        keypad = press_key(press_key(fresh_state.keypad, 2), 9)
        state = execute(fresh_state.replace(keypad=keypad), 0xF00A)
        assert state.V[0] == 9

    def test_wait_ignores_earlier_still_held_key(self, fresh_state):
        """Releasing the latest key does not fall back to an older one."""
        keypad = release_key(press_key(press_key(fresh_state.keypad, 2), 9), 9)
        state = execute(fresh_state.replace(keypad=keypad), 0xF00A)
        assert state.pc == PROGRAM_START - 2
