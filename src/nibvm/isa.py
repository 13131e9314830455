"""Instruction set and packed-stream decoding for the nib machine."""

from typing import Iterable, List

# =============================================================================
# Constants
# =============================================================================

HIGH_NIBBLE_MASK = 0xF0
LOW_NIBBLE_MASK  = 0x0F

# Opcodes
OP_WRITE      = 0x0
OP_LOOP_END   = 0x1
OP_INCR_VAL   = 0x2
OP_INCR_PTR   = 0x3
OP_LOOP_START = 0x4
OP_DECR_VAL   = 0x5
OP_DECR_PTR   = 0x6
OP_READ       = 0x7

# First nibble value with no meaning; used to pad odd-length programs.
OP_NOP = 0x8

OPCODE_NAMES = {
    OP_WRITE: "WRITE",
    OP_LOOP_END: "LOOP_END",
    OP_INCR_VAL: "INCR_VAL",
    OP_INCR_PTR: "INCR_PTR",
    OP_LOOP_START: "LOOP_START",
    OP_DECR_VAL: "DECR_VAL",
    OP_DECR_PTR: "DECR_PTR",
    OP_READ: "READ",
}


def is_opcode(value: int) -> bool:
    """Whether a nibble is one of the eight defined instructions."""
    return value in OPCODE_NAMES


def opcode_name(value: int) -> str:
    return OPCODE_NAMES.get(value, f"NOP(0x{value:X})")

# =============================================================================
# Decoding (packed bytes -> instructions)
# =============================================================================


def decode(source: bytes) -> bytes:
    """
    Expand a packed program into one instruction per byte.

    Each source byte holds two instructions, high nibble first, so a buffer
    of N bytes decodes to exactly 2N instructions. Every nibble is accepted;
    values without an opcode are executed as no-ops.

    Args:
        source: Packed program bytes

    Returns:
        Decoded instruction stream
    """
    result = bytearray(len(source) * 2)
    offset = 0

    for current in source:
        result[offset] = (current & HIGH_NIBBLE_MASK) >> 4
        result[offset + 1] = current & LOW_NIBBLE_MASK
        offset += 2

    return bytes(result)

# =============================================================================
# Encoding (instructions -> packed bytes)
# =============================================================================


def encode(instructions: Iterable[int]) -> bytes:
    """
    Pack instructions two per byte, high nibble first.

    An odd number of instructions is padded with OP_NOP so the final
    instruction keeps its meaning.

    Raises:
        ValueError: If an instruction does not fit in a nibble
    """
    values: List[int] = list(instructions)
    for i, value in enumerate(values):
        if not (0 <= value <= LOW_NIBBLE_MASK):
            raise ValueError(f"Instruction at {i} must be 0-0xF, got {value}")

    if len(values) % 2:
        values.append(OP_NOP)

    return bytes((values[i] << 4) | values[i + 1] for i in range(0, len(values), 2))


def find_loop_end(program: bytes, start: int) -> int:
    """
    Return the index of the LOOP_END matching the LOOP_START at `start`.

    Returns -1 when the program ends before the loop is closed.
    """
    depth = 1
    for index in range(start + 1, len(program)):
        instruction = program[index]
        if instruction == OP_LOOP_START:
            depth += 1
        elif instruction == OP_LOOP_END:
            depth -= 1
            if depth == 0:
                return index
    return -1
