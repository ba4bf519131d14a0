"""Stateful facade over the functional interpreter core.

``Chip8`` owns the machine state. Drivers (the scheduler, a frontend, tests)
only go through its methods: step a cycle, tick timers, feed keys, and read
or consume the display.
"""

from typing import Optional

import jax
import jax.numpy as jnp

from octet.emulator import step as step_state
from octet.errors import EmulatorError
from octet.keypad import press_key, release_key, release_all
from octet.logging import EmulatorLogger
from octet.memory import load_program, read_bytes
from octet.state import EmulatorState, create_state, tick_timers


class Chip8:
    """A CHIP-8 machine with one program loaded."""

    def __init__(self, program: bytes = b"", seed: int = 0, logger: Optional[EmulatorLogger] = None):
        self.seed = seed
        self.logger = logger or EmulatorLogger(log_level="WARNING")
        self.program = b""
        self.state: EmulatorState = create_state(jax.random.PRNGKey(seed))
        self.fault: Optional[EmulatorError] = None
        self.cycles = 0
        if program:
            self.load(program)

    @classmethod
    def from_file(cls, filename: str, **kwargs) -> "Chip8":
        with open(filename, "rb") as f:
            program = f.read()
        machine = cls(**kwargs)
        machine.load(program, source=filename)
        return machine

    @property
    def halted(self) -> bool:
        return self.fault is not None

    def load(self, program: bytes, source: str = "program") -> None:
        """Reset the machine and copy ``program`` in at 0x200."""
        state = load_program(create_state(jax.random.PRNGKey(self.seed)), bytes(program))
        self.program = bytes(program)
        self.state = state
        self.fault = None
        self.cycles = 0
        self.logger.log_program_loaded(source, len(self.program))

    def reset(self) -> None:
        """Reload the current program from a fresh state."""
        self.load(self.program, source="reset")

    def step(self) -> None:
        """Run one fetch-decode-execute cycle.

        A fault halts the machine: it is logged, kept in ``fault`` and
        re-raised, and every later call raises it again.
        """
        if self.fault is not None:
            raise self.fault
        try:
            self.state = step_state(self.state)
        except EmulatorError as e:
            self.fault = e
            self.logger.log_fault(e)
            self.logger.log_state(self.state, level="ERROR")
            raise
        self.cycles += 1

    def tick_timers(self) -> None:
        self.state = tick_timers(self.state)

    def press_key(self, key: int) -> None:
        self.state = self.state.replace(keypad=press_key(self.state.keypad, key))

    def release_key(self, key: int) -> None:
        self.state = self.state.replace(keypad=release_key(self.state.keypad, key))

    def release_all_keys(self) -> None:
        self.state = self.state.replace(keypad=release_all(self.state.keypad))

    @property
    def display(self) -> jnp.ndarray:
        """Boolean pixel grid of shape (64, 32), indexed [x, y]."""
        return self.state.display

    @property
    def display_changed(self) -> bool:
        return bool(self.state.display_changed)

    def consume_display(self) -> Optional[jnp.ndarray]:
        """Return the grid and clear the changed flag, or None if unchanged."""
        if not bool(self.state.display_changed):
            return None
        self.state = self.state.replace(display_changed=jnp.zeros((), dtype=jnp.bool_))
        return self.state.display

    def read_memory(self, start: int, length: int = 1) -> bytes:
        """Copy ``length`` bytes out of memory; raises MemoryFault past the end."""
        return bytes(jax.device_get(read_bytes(self.state.memory, start, length)).tolist())

    @property
    def delay_timer(self) -> int:
        return int(self.state.delay_timer)

    @property
    def sound_timer(self) -> int:
        return int(self.state.sound_timer)

    @property
    def sound_active(self) -> bool:
        return self.sound_timer > 0
