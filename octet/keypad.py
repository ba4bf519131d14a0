"""Input latch over the sixteen logical CHIP-8 keys.

Policy: every key has an independent held flag, read by EX9E/EXA1. FX0A reads
``last_pressed``, the most recently pressed key that is still held. Releasing
that key clears it; it never falls back to a key pressed earlier that is
still down.
"""

from typing import Optional

import jax.numpy as jnp

from octet.constants import NUM_KEYS
from octet.state import KeypadState


def _check_key(key: int) -> int:
    key = int(key)
    if not 0 <= key < NUM_KEYS:
        raise ValueError(f"Logical key must be in 0x0-0xF, got {key}")
    return key


def press_key(keypad: KeypadState, key: int) -> KeypadState:
    """Mark key as held and make it the most recent press."""
    key = _check_key(key)
    return keypad.replace(held=keypad.held.at[key].set(True), last_pressed=jnp.asarray(key, dtype=jnp.int8))


def release_key(keypad: KeypadState, key: int) -> KeypadState:
    """Mark key as released."""
    key = _check_key(key)
    last_pressed = jnp.where(keypad.last_pressed == key, -1, keypad.last_pressed).astype(jnp.int8)
    return keypad.replace(held=keypad.held.at[key].set(False), last_pressed=last_pressed)


def release_all(keypad: KeypadState) -> KeypadState:
    return KeypadState()


def is_key_held(keypad: KeypadState, key: int) -> bool:
    return bool(keypad.held[int(key) & 0xF])


def last_pressed_key(keypad: KeypadState) -> Optional[int]:
    pressed = int(keypad.last_pressed)
    return None if pressed < 0 else pressed
