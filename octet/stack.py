"""CHIP-8 stack operations.

Both operations are traceable: instead of raising they report whether the
stack was full (push) or empty (pop) and leave it unchanged in that case.
"""

import jax.numpy as jnp
from octet.constants import STACK_SIZE
from octet.state import StackState


def push(stack: StackState, address: jnp.ndarray) -> tuple[StackState, jnp.ndarray]:
    """Push address onto stack. Returns the new stack and an overflow flag."""
    overflow = stack.pointer >= STACK_SIZE
    slot = jnp.minimum(stack.pointer, STACK_SIZE - 1)
    value = jnp.where(overflow, stack.data[slot], jnp.astype(address, jnp.uint16))
    new_data = stack.data.at[slot].set(value)
    return stack.replace(data=new_data, pointer=jnp.where(overflow, stack.pointer, stack.pointer + 1)), overflow


def pop(stack: StackState) -> tuple[StackState, jnp.ndarray, jnp.ndarray]:
    """Pop address from stack. Returns the new stack, the address and an underflow flag."""
    underflow = stack.pointer <= 0
    new_pointer = jnp.maximum(stack.pointer - 1, 0)
    popped_address = stack.data[new_pointer]
    new_data = stack.data.at[new_pointer].set(jnp.where(underflow, popped_address, 0))
    return stack.replace(data=new_data, pointer=new_pointer), popped_address, underflow
