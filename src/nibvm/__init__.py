"""nibvm: an interpreter for nibble-encoded tape programs."""

from .isa import (
    # Opcodes
    OP_WRITE, OP_LOOP_END, OP_INCR_VAL, OP_INCR_PTR,
    OP_LOOP_START, OP_DECR_VAL, OP_DECR_PTR, OP_READ, OP_NOP,
    OPCODE_NAMES, is_opcode, opcode_name,
    # Decoding
    decode, encode, find_loop_end,
)

from .errors import (
    NibException,
    InvalidArguments, UnreadableInputFile, InvalidMemoryStepSize,
    ExecutionError, DataIndexOutOfBounds, UnexpectedLoopEnd,
    UnterminatedLoop, StepLimitExceeded,
)

from .config import (
    DEFAULT_STEP_SIZE, EofPolicy, RunConfig, parse_step_size,
)

from .memory import Tape, LoopStack

from .registry import (
    get_available_policies,
    get_policy,
)

from .engine import (
    Engine, RunResult,
    run_program, run_bytes, run_file, read_program,
)

from .assembler import assemble, disassemble

__version__ = "0.1.0"
