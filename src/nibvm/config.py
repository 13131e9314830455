"""Run configuration: memory step size, bounds policy and end-of-input handling."""

from dataclasses import dataclass
from enum import Enum
from typing import Union

from .errors import InvalidMemoryStepSize

# =============================================================================
# Configuration Constants
# =============================================================================

# Extra memory allocated for the tape and loop stack whenever they run out.
DEFAULT_STEP_SIZE = 32768
MAX_STEP_SIZE = 0xFFFFFFFF

STRICT = "strict"
PERMISSIVE = "permissive"


class EofPolicy(Enum):
    """What READ stores once standard input is exhausted."""
    ALL_ONES = "ff"          # getchar() EOF truncated to a byte
    ZERO = "zero"
    UNCHANGED = "unchanged"


def parse_step_size(value: Union[str, int]) -> int:
    """
    Validate a memory step size given as an int or a decimal string.

    Raises:
        InvalidMemoryStepSize: If the value is not an integer in [1, MAX_STEP_SIZE]
    """
    if isinstance(value, bool):
        raise InvalidMemoryStepSize("Invalid memory step size")
    if isinstance(value, str):
        try:
            value = int(value.strip(), 10)
        except ValueError:
            raise InvalidMemoryStepSize(f"Invalid memory step size '{value}'") from None
    if not isinstance(value, int) or not (1 <= value <= MAX_STEP_SIZE):
        raise InvalidMemoryStepSize(f"Invalid memory step size '{value}'")
    return value


@dataclass(frozen=True)
class RunConfig:
    """Settings fixed for the whole run."""
    step_size: int = DEFAULT_STEP_SIZE
    strict: bool = False
    eof: EofPolicy = EofPolicy.ALL_ONES

    def __post_init__(self):
        parse_step_size(self.step_size)
        if not isinstance(self.eof, EofPolicy):
            raise ValueError(f"eof must be an EofPolicy, got {self.eof!r}")

    @property
    def policy_name(self) -> str:
        return STRICT if self.strict else PERMISSIVE
