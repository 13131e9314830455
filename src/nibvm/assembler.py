"""Text mnemonics for nib programs.

Each instruction is written as one of the familiar tape-language symbols:

    >  INCR_PTR     <  DECR_PTR
    +  INCR_VAL     -  DECR_VAL
    .  WRITE        ,  READ
    [  LOOP_START   ]  LOOP_END

Every other character is treated as a comment.
"""

from typing import List

from .isa import (
    OP_WRITE, OP_LOOP_END, OP_INCR_VAL, OP_INCR_PTR,
    OP_LOOP_START, OP_DECR_VAL, OP_DECR_PTR, OP_READ,
    decode, encode, is_opcode,
)

SYMBOLS = {
    ">": OP_INCR_PTR,
    "<": OP_DECR_PTR,
    "+": OP_INCR_VAL,
    "-": OP_DECR_VAL,
    ".": OP_WRITE,
    ",": OP_READ,
    "[": OP_LOOP_START,
    "]": OP_LOOP_END,
}

MNEMONICS = {opcode: symbol for symbol, opcode in SYMBOLS.items()}


def assemble_to_instructions(source: str) -> List[int]:
    """
    Translate mnemonic text to a list of opcodes.

    Examples:
        "+>."        -> [INCR_VAL, INCR_PTR, WRITE]
        "[-] clear"  -> [LOOP_START, DECR_VAL, LOOP_END]
    """
    return [SYMBOLS[char] for char in source if char in SYMBOLS]


def assemble(source: str) -> bytes:
    """Translate mnemonic text to a packed program."""
    return encode(assemble_to_instructions(source))


def disassemble(data: bytes) -> str:
    """Render a packed program as mnemonic text, dropping inert nibbles."""
    return "".join(MNEMONICS[op] for op in decode(data) if is_opcode(op))
