"""Fuzzing framework comparing the strict and permissive policies."""

from .fuzzer import (
    ExecutionResult, Completed, Failed, Exhausted,
    FuzzingStatistics,
    execute_with_policy, compare_results,
    run_fuzzer,
)

from .generators import (
    GeneratorConfig,
    GENERATORS,
    generate_random_bytes,
    generate_structured_program,
    generate_mixed_program,
)
