"""
Policy-divergence fuzzer for nibvm.

Generates programs and runs each one under the strict and the permissive
policy with the same input, then compares the outcomes. Programs that
behave differently are reported; they show which inputs rely on the
permissive policy's clamping.
"""

import io
from dataclasses import dataclass
from random import Random
from typing import Callable, Optional

from nibvm.config import RunConfig
from nibvm.engine import run_bytes
from nibvm.errors import ExecutionError, StepLimitExceeded
from nibvm.isa import decode, opcode_name
from .generators import GENERATORS, generate_mixed_program


# =============================================================================
# Configuration Constants
# =============================================================================

DEFAULT_MAX_STEPS = 10_000
DEFAULT_STEP_SIZE = 4
DEFAULT_INPUT = b"\x03\x01"


# =============================================================================
# Execution Results
# =============================================================================

@dataclass(frozen=True)
class ExecutionResult:
    """Base class for execution results - used as a union type."""


@dataclass(frozen=True)
class Completed(ExecutionResult):
    output: bytes


@dataclass(frozen=True)
class Failed(ExecutionResult):
    reason: str


@dataclass(frozen=True)
class Exhausted(ExecutionResult):
    steps: int


def execute_with_policy(
    program: bytes,
    strict: bool,
    input_data: bytes = DEFAULT_INPUT,
    step_size: int = DEFAULT_STEP_SIZE,
    max_steps: int = DEFAULT_MAX_STEPS,
) -> ExecutionResult:
    """Run a packed program under one policy and capture its outcome."""
    stdout = io.BytesIO()
    config = RunConfig(step_size=step_size, strict=strict)
    try:
        run_bytes(program, config, io.BytesIO(input_data), stdout, max_steps)
        return Completed(stdout.getvalue())
    except StepLimitExceeded as e:
        return Exhausted(e.max_steps)
    except ExecutionError as e:
        return Failed(type(e).__name__)


def compare_results(strict: ExecutionResult, permissive: ExecutionResult) -> bool:
    """
    Compare results of the two policies for equivalence.

    Returns True if results match, considering:
    - Failures match when the error kind is the same
    - Exhausted runs match any exhausted run
    - Completed runs match only with identical output
    """
    return type(strict) == type(permissive) and (
        isinstance(strict, Exhausted) or strict == permissive
    )


# =============================================================================
# Statistics Tracking
# =============================================================================

@dataclass
class FuzzingStatistics:
    """Tracks fuzzing run statistics."""
    total_tests: int = 0
    divergences: int = 0
    strict_only_failures: int = 0
    exhausted: int = 0

    @property
    def agreements(self) -> int:
        return self.total_tests - self.divergences

    @property
    def divergence_rate(self) -> float:
        return (self.divergences / self.total_tests * 100) if self.total_tests > 0 else 0.0

    def record_test(self, strict: ExecutionResult, permissive: ExecutionResult, results_match: bool) -> None:
        """Record results of a single test."""
        self.total_tests += 1

        if isinstance(strict, Exhausted) or isinstance(permissive, Exhausted):
            self.exhausted += 1

        if isinstance(strict, Failed) and isinstance(permissive, Completed):
            self.strict_only_failures += 1

        if not results_match:
            self.divergences += 1

    def print_summary(self) -> None:
        """Print formatted summary of results."""
        print("\n" + "=" * 60)
        print("Fuzzer Summary")
        print("-" * 40)
        print(f"Total tests run:           {self.total_tests}")
        print(f"Agreements:                {self.agreements}")
        print(f"Divergences:               {self.divergences}")
        print(f"Strict-only failures:      {self.strict_only_failures}")
        print(f"Step budget exhausted:     {self.exhausted}")

        if self.divergences > 0:
            print(f"Divergence rate:        {self.divergence_rate:.1f}%")
        else:
            print("\nPolicies agreed on every program!")


# =============================================================================
# Divergence Reporting
# =============================================================================

def report_divergence(test_num: int, program: bytes, strict: ExecutionResult, permissive: ExecutionResult) -> None:
    """Print detailed divergence report."""
    print(f"\nTest {test_num}: Policies diverge")
    print(f"  Program:    {program.hex()}")
    print(f"    {[opcode_name(op) for op in decode(program)]}")
    print(f"  Strict:     {strict}")
    print(f"  Permissive: {permissive}")


def print_header(num_tests: int, generator: str) -> None:
    """Print fuzzer run header."""
    print(f"nibvm Policy Fuzzer - Running {num_tests} tests")
    print(f"Generator: {generator}")
    print("=" * 60)


# =============================================================================
# Fuzzer Main Logic
# =============================================================================

def run_single_test(program: bytes, max_steps: int = DEFAULT_MAX_STEPS) -> tuple[ExecutionResult, ExecutionResult, bool]:
    """
    Run one program under both policies.

    Returns:
        Tuple of (strict_result, permissive_result, results_match)
    """
    strict = execute_with_policy(program, strict=True, max_steps=max_steps)
    permissive = execute_with_policy(program, strict=False, max_steps=max_steps)
    return strict, permissive, compare_results(strict, permissive)


def run_fuzzer(
    num_tests: int = 1000,
    seed: Optional[int] = None,
    generator: str = "mixed",
    max_steps: int = DEFAULT_MAX_STEPS,
    verbose: bool = True,
) -> FuzzingStatistics:
    """
    Run the fuzzer for a specified number of tests.

    Args:
        num_tests: Number of programs to generate
        seed: Random seed for reproducibility
        generator: Generator type: "random", "structured", or "mixed"
        max_steps: Instruction budget per run
        verbose: Print header, divergence reports and summary

    Returns:
        FuzzingStatistics object with results
    """
    rng = Random(seed)
    generator_func: Callable[[Random], bytes] = GENERATORS.get(generator, generate_mixed_program)
    stats = FuzzingStatistics()

    if verbose:
        print_header(num_tests, generator)

    for i in range(num_tests):
        program = generator_func(rng)
        strict, permissive, matches = run_single_test(program, max_steps)

        stats.record_test(strict, permissive, matches)

        if verbose and not matches:
            report_divergence(i + 1, program, strict, permissive)

    if verbose:
        stats.print_summary()
    return stats


# =============================================================================
# CLI Entry Point
# =============================================================================

if __name__ == "__main__":
    import argparse

    parser = argparse.ArgumentParser(description="Policy-divergence fuzzer for nibvm")
    parser.add_argument(
        "-n", "--num-tests",
        type=int,
        default=1000,
        help="Number of random programs to run (default: 1000)"
    )
    parser.add_argument(
        "-s", "--seed",
        type=int,
        default=None,
        help="Random seed for reproducibility"
    )
    parser.add_argument(
        "-g", "--generator",
        type=str,
        default="mixed",
        choices=list(GENERATORS),
        help="Generator type (default: %(default)s)"
    )
    parser.add_argument(
        "--max-steps",
        type=int,
        default=DEFAULT_MAX_STEPS,
        help="Instruction budget per run (default: %(default)s)"
    )

    args = parser.parse_args()

    run_fuzzer(
        num_tests=args.num_tests,
        seed=args.seed,
        generator=args.generator,
        max_steps=args.max_steps,
    )
