"""Growable tape and loop stack owned by the execution engine.

Both containers start with a capacity of `step_size` and grow by another
`step_size` when an index reaches the current capacity. The tape allocates
its zeroed cells up front; the loop stack only stores open positions.
"""

import logging
from typing import List

logger = logging.getLogger(__name__)

# The data cursor behaves like an unsigned 32-bit index.
CURSOR_MASK = 0xFFFFFFFF
CELL_MASK = 0xFF


class Tape:
    """Zero-initialized byte cells with a movable cursor."""

    def __init__(self, step_size: int):
        self.step_size = step_size
        self.cells = bytearray(step_size)
        self.cursor = 0

    def __len__(self) -> int:
        return len(self.cells)

    def grow(self) -> None:
        self.cells.extend(bytes(self.step_size))
        logger.debug("tape grew to %d cells", len(self.cells))

    def advance(self) -> None:
        """Move right, growing the tape when the cursor reaches its end."""
        self.cursor = (self.cursor + 1) & CURSOR_MASK
        if self.cursor == len(self.cells):
            self.grow()

    def retreat(self) -> None:
        """Move left without a lower bound; 0 wraps to CURSOR_MASK."""
        self.cursor = (self.cursor - 1) & CURSOR_MASK

    def in_bounds(self) -> bool:
        return self.cursor < len(self.cells)

    def read(self) -> int:
        return self.cells[self.cursor]

    def write(self, value: int) -> None:
        self.cells[self.cursor] = value & CELL_MASK

    def increment(self) -> None:
        self.cells[self.cursor] = (self.cells[self.cursor] + 1) & CELL_MASK

    def decrement(self) -> None:
        self.cells[self.cursor] = (self.cells[self.cursor] - 1) & CELL_MASK

    def snapshot(self) -> bytes:
        return bytes(self.cells)


class LoopStack:
    """Saved LOOP_START positions, one per open loop."""

    def __init__(self, step_size: int):
        self.step_size = step_size
        self.capacity = step_size
        self.positions: List[int] = []

    def __len__(self) -> int:
        return len(self.positions)

    def push(self, position: int) -> None:
        if len(self.positions) == self.capacity:
            self.capacity += self.step_size
            logger.debug("loop stack grew to %d slots", self.capacity)
        self.positions.append(position)

    def pop(self) -> int:
        """
        Remove and return the innermost loop position.

        Raises:
            IndexError: If no loop is open
        """
        if not self.positions:
            raise IndexError("pop from empty loop stack")
        return self.positions.pop()
