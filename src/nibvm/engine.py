"""Execution engine: the dispatch loop over a decoded nib program."""

import logging
import os
import sys
from dataclasses import dataclass
from typing import BinaryIO, Optional, Union

from .config import EofPolicy, RunConfig
from .errors import StepLimitExceeded, UnreadableInputFile, UnterminatedLoop
from .isa import (
    OP_WRITE, OP_LOOP_END, OP_INCR_VAL, OP_INCR_PTR,
    OP_LOOP_START, OP_DECR_VAL, OP_DECR_PTR, OP_READ,
    decode, find_loop_end,
)
from .memory import Tape, LoopStack
from .registry import get_policy

logger = logging.getLogger(__name__)

EOF_BYTE = 0xFF


@dataclass(frozen=True)
class RunResult:
    """Machine state observed after a run finishes."""
    steps: int
    cursor: int
    tape: bytes
    loop_depth: int


class Engine:
    """
    Runs one decoded program to completion.

    The engine owns the tape and loop stack for the duration of the run.
    Bounds handling is delegated to the policy module selected by the
    configuration; opcode meanings and growth are shared by all policies.
    """

    def __init__(
        self,
        program: bytes,
        config: Optional[RunConfig] = None,
        stdin: Optional[BinaryIO] = None,
        stdout: Optional[BinaryIO] = None,
    ):
        self.program = bytes(program)
        self.config = config or RunConfig()
        self.policy = get_policy(self.config.policy_name)
        self.stdin = stdin if stdin is not None else sys.stdin.buffer
        self.stdout = stdout if stdout is not None else sys.stdout.buffer
        self.tape = Tape(self.config.step_size)
        self.loops = LoopStack(self.config.step_size)
        self.ip = 0
        self.steps = 0

    @property
    def finished(self) -> bool:
        return self.ip >= len(self.program)

    def _read_byte(self) -> None:
        self.stdout.flush()
        data = self.stdin.read(1)
        if data:
            self.tape.write(data[0])
        elif self.config.eof is EofPolicy.ALL_ONES:
            self.tape.write(EOF_BYTE)
        elif self.config.eof is EofPolicy.ZERO:
            self.tape.write(0)

    def step(self) -> None:
        """
        Execute the instruction at the instruction cursor.

        Raises:
            DataIndexOutOfBounds: Strict policy, cell access past the tape
            UnexpectedLoopEnd: Strict policy, LOOP_END with no open loop
            UnterminatedLoop: Skipped loop has no matching LOOP_END
        """
        ip = self.ip
        instruction = self.program[ip]
        tape = self.tape
        policy = self.policy

        if instruction == OP_INCR_PTR:
            tape.advance()

        elif instruction == OP_DECR_PTR:
            policy.retreat(tape)

        elif instruction == OP_INCR_VAL:
            policy.check_access(tape, ip)
            tape.increment()

        elif instruction == OP_DECR_VAL:
            policy.check_access(tape, ip)
            tape.decrement()

        elif instruction == OP_WRITE:
            policy.check_access(tape, ip)
            self.stdout.write(bytes((tape.read(),)))

        elif instruction == OP_READ:
            policy.check_access(tape, ip)
            self._read_byte()

        elif instruction == OP_LOOP_START:
            policy.check_access(tape, ip)
            if tape.read() == 0:
                ip = find_loop_end(self.program, ip)
                if ip < 0:
                    raise UnterminatedLoop(self.ip)
            else:
                self.loops.push(ip)

        elif instruction == OP_LOOP_END:
            target = policy.leave_loop(self.loops, ip)
            if target is not None:
                # Re-examine the matching LOOP_START on the next step.
                self.ip = target
                self.steps += 1
                return

        self.ip = ip + 1
        self.steps += 1

    def run(self, max_steps: Optional[int] = None) -> RunResult:
        """
        Execute until the instruction cursor reaches the end of the program.

        Args:
            max_steps: Optional instruction budget; None means unlimited

        Raises:
            ExecutionError: On any fatal condition, see step()
            StepLimitExceeded: If the budget runs out first
        """
        logger.debug(
            "running %d instructions (policy=%s, step_size=%d)",
            len(self.program), self.policy.NAME, self.config.step_size,
        )
        try:
            while not self.finished:
                if max_steps is not None and self.steps >= max_steps:
                    raise StepLimitExceeded(self.ip, max_steps)
                self.step()
        finally:
            self.stdout.flush()

        logger.debug("finished after %d steps", self.steps)
        return RunResult(
            steps=self.steps,
            cursor=self.tape.cursor,
            tape=self.tape.snapshot(),
            loop_depth=len(self.loops),
        )


def run_program(
    instructions: bytes,
    config: Optional[RunConfig] = None,
    stdin: Optional[BinaryIO] = None,
    stdout: Optional[BinaryIO] = None,
    max_steps: Optional[int] = None,
) -> RunResult:
    """Run an already decoded instruction stream."""
    return Engine(instructions, config, stdin, stdout).run(max_steps)


def run_bytes(
    source: bytes,
    config: Optional[RunConfig] = None,
    stdin: Optional[BinaryIO] = None,
    stdout: Optional[BinaryIO] = None,
    max_steps: Optional[int] = None,
) -> RunResult:
    """Decode a packed program and run it."""
    instructions = decode(source)
    logger.debug("decoded %d bytes into %d instructions", len(source), len(instructions))
    return run_program(instructions, config, stdin, stdout, max_steps)


def read_program(path: Union[str, os.PathLike]) -> bytes:
    """
    Read a packed program file.

    Raises:
        UnreadableInputFile: If the file cannot be opened or read
    """
    try:
        with open(path, "rb") as fp:
            return fp.read()
    except OSError as e:
        raise UnreadableInputFile("Invalid input file, or insufficient permissions") from e


def run_file(
    path: Union[str, os.PathLike],
    config: Optional[RunConfig] = None,
    stdin: Optional[BinaryIO] = None,
    stdout: Optional[BinaryIO] = None,
) -> RunResult:
    """Read, decode and run a program file."""
    return run_bytes(read_program(path), config, stdin, stdout)
