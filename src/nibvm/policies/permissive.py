"""
Permissive policy - clamps and ignores instead of failing

The default policy. Behavior:
- DECR_PTR at cell 0 does nothing, so the cursor never underflows
- Cell accesses are not checked: INCR_PTR grows the tape eagerly and the
  cursor cannot go below 0, so it always addresses an existing cell
- LOOP_END with no open loop does nothing and execution continues with
  the next instruction
"""

from typing import Optional

from nibvm.memory import LoopStack, Tape

NAME = "permissive"


def retreat(tape: Tape) -> None:
    if tape.cursor > 0:
        tape.cursor -= 1


def check_access(tape: Tape, ip: int) -> None:
    pass


def leave_loop(stack: LoopStack, ip: int) -> Optional[int]:
    """Return the loop start to jump back to, or None at top level."""
    if not stack:
        return None
    return stack.pop()
