"""Fatal emulator conditions.

Every error raised while fetching, decoding or executing an instruction is
fatal to the run. The machine records where it happened (``address`` is the
location the word was fetched from, ``instruction`` the raw 16-bit word) so
the driver can report it before shutting down.
"""

from typing import Optional

from octet.constants import STACK_SIZE


class EmulatorError(Exception):
    """Base class for fatal emulator conditions."""

    def __init__(self, message: str, instruction: Optional[int] = None, address: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.instruction = instruction
        self.address = address

    def __str__(self) -> str:
        parts = [self.message]
        if self.instruction is not None:
            parts.append(f"instruction=0x{self.instruction:04X}")
        if self.address is not None:
            parts.append(f"address=0x{self.address:03X}")
        return " ".join(parts)


class InvalidOpcode(EmulatorError):
    """Instruction word matches no known instruction shape."""

    def __init__(self, instruction: int, address: Optional[int] = None):
        super().__init__("Invalid opcode", instruction=instruction, address=address)


class StackOverflow(EmulatorError):
    """Subroutine call past the call stack capacity."""


class StackUnderflow(EmulatorError):
    """Return with an empty call stack."""


class MemoryFault(EmulatorError):
    """Read or write outside the addressable memory."""

    def __init__(self, start: int, length: int = 1, **kwargs):
        super().__init__(f"Memory access out of range [0x{start:X}, 0x{start + length:X})", **kwargs)
        self.start = start
        self.length = length


# Fault codes carried in EmulatorState.fault by the compiled step
NO_FAULT = 0
INVALID_OPCODE = 1
STACK_OVERFLOW = 2
STACK_UNDERFLOW = 3
MEMORY_FAULT = 4


def error_from_code(code: int, instruction: Optional[int] = None, address: Optional[int] = None,
                    start: int = 0, length: int = 0) -> EmulatorError:
    """Build the exception matching a fault code raised inside the compiled step."""
    if code == INVALID_OPCODE:
        return InvalidOpcode(instruction, address=address)
    if code == STACK_OVERFLOW:
        return StackOverflow(f"Call stack full ({STACK_SIZE} frames)", instruction=instruction, address=address)
    if code == STACK_UNDERFLOW:
        return StackUnderflow("Return with empty call stack", instruction=instruction, address=address)
    if code == MEMORY_FAULT:
        return MemoryFault(start, length, instruction=instruction, address=address)
    raise ValueError(f"Unknown fault code {code}")
