"""CHIP-8 display operations."""

import jax
import jax.numpy as jnp
from octet.state import EmulatorState, flag_fault
from octet.decode import DecodedInstruction
from octet.constants import SCREEN_WIDTH, SCREEN_HEIGHT, FLAG_REGISTER
from octet.errors import MEMORY_FAULT
from octet.memory import gather_bytes, in_range

MAX_SPRITE_HEIGHT = 15

# Pre-computed coordinate grids for display operations
xx, yy = jnp.meshgrid(jnp.arange(SCREEN_WIDTH), jnp.arange(SCREEN_HEIGHT), indexing='ij')


@jax.jit
def blit_sprite(display: jnp.ndarray, rows: jnp.ndarray, sprite_x, sprite_y, height):
    """XOR an 8-pixel-wide sprite onto the display, clipping at the edges.

    Args:
        display: Boolean array of shape (64, 32)
        rows: uint8 array of MAX_SPRITE_HEIGHT sprite rows, unused rows ignored
        sprite_x: Left column, already reduced modulo the screen width
        sprite_y: Top row, already reduced modulo the screen height
        height: Number of sprite rows to draw

    Returns:
        Tuple of (new display, collision, any pixel toggled)
    """
    in_screen = (xx >= sprite_x) & (xx < sprite_x + 8) & (yy >= sprite_y) & (yy < sprite_y + height)

    row_offset = jnp.clip(yy - sprite_y, 0, MAX_SPRITE_HEIGHT - 1)
    col_offset = jnp.clip(xx - sprite_x, 0, 7)
    sprite_bytes = rows[row_offset].astype(jnp.int32)
    sprite = (((sprite_bytes >> (7 - col_offset)) & 1) == 1) & in_screen

    return display ^ sprite, jnp.any(display & sprite), jnp.any(sprite)


def execute_display(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """DXYN - Draw sprite at (VX, VY) with height N."""
    sprite_x = jnp.astype(state.V[instruction.x], jnp.int32) % SCREEN_WIDTH
    sprite_y = jnp.astype(state.V[instruction.y], jnp.int32) % SCREEN_HEIGHT

    start = jnp.astype(state.I, jnp.int32)
    rows = gather_bytes(state.memory, start, MAX_SPRITE_HEIGHT)

    display, collision, toggled = blit_sprite(state.display, rows, sprite_x, sprite_y, instruction.n)

    state = flag_fault(state, ~in_range(start, instruction.n), MEMORY_FAULT, start, instruction.n)
    return state.replace(
        display=display,
        display_changed=state.display_changed | toggled,
        V=state.V.at[FLAG_REGISTER].set(jnp.astype(collision, jnp.uint8))
    )
