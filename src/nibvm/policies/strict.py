"""
Strict policy - fails loudly on out-of-bounds access

Selected with --safe. Behavior:
- DECR_PTR is unchecked: moving left from cell 0 wraps the cursor to
  0xFFFFFFFF, which the next cell access reports as out of bounds
- INCR_VAL, DECR_VAL, WRITE, READ and LOOP_START raise DataIndexOutOfBounds
  when the cursor is past the end of the tape
- LOOP_END with no open loop raises UnexpectedLoopEnd
"""

from typing import Optional

from nibvm.errors import DataIndexOutOfBounds, UnexpectedLoopEnd
from nibvm.memory import LoopStack, Tape

NAME = "strict"


def retreat(tape: Tape) -> None:
    tape.retreat()


def check_access(tape: Tape, ip: int) -> None:
    """
    Verify the cursor addresses an existing cell.

    Raises:
        DataIndexOutOfBounds: If the cursor is at or past the tape length
    """
    if not tape.in_bounds():
        raise DataIndexOutOfBounds(ip, tape.cursor, len(tape))


def leave_loop(stack: LoopStack, ip: int) -> Optional[int]:
    """
    Return the position of the loop start to jump back to.

    Raises:
        UnexpectedLoopEnd: If no loop is open
    """
    if not stack:
        raise UnexpectedLoopEnd(ip)
    return stack.pop()
