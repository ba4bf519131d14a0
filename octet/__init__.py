"""CHIP-8 interpreter package."""

from octet.state import EmulatorState, create_state, tick_timers
from octet.emulator import execute, execute_decoded, load_rom, fetch, step
from octet.decode import DecodedInstruction, Instruction, decode
from octet.errors import EmulatorError, InvalidOpcode, StackOverflow, StackUnderflow, MemoryFault
from octet.constants import *
from octet.machine import Chip8
from octet.rendering import display_to_rgb, create_color_scheme

__all__ = [
    "EmulatorState",
    "create_state",
    "tick_timers",
    "fetch",
    "execute",
    "execute_decoded",
    "step",
    "load_rom",
    "DecodedInstruction",
    "Instruction",
    "decode",
    "EmulatorError",
    "InvalidOpcode",
    "StackOverflow",
    "StackUnderflow",
    "MemoryFault",
    "Chip8",
    "PROGRAM_START",
    "FONT_START",
    "SCREEN_WIDTH",
    "SCREEN_HEIGHT",
    "display_to_rgb",
    "create_color_scheme",
]
