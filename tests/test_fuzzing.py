"""
Tests for the policy-divergence fuzzer.

Run with: uv run python tests/test_fuzzing.py
"""

from random import Random

from nibvm.assembler import assemble
from nibvm.isa import decode, OP_LOOP_START, OP_LOOP_END
from nibvm.fuzzing import (
    Completed, Failed, Exhausted,
    FuzzingStatistics,
    execute_with_policy, compare_results, run_fuzzer,
    GENERATORS, generate_random_bytes, generate_structured_program,
)


def test_execution_results():
    print("Execution Result Tests")
    print("=" * 50)

    program = assemble("<-.")
    assert execute_with_policy(program, strict=True) == Failed("DataIndexOutOfBounds")
    assert execute_with_policy(program, strict=False) == Completed(b"\xff")
    print("✓ Out-of-bounds access: strict fails, permissive completes")

    program = assemble("+]")
    assert execute_with_policy(program, strict=True) == Failed("UnexpectedLoopEnd")
    assert execute_with_policy(program, strict=False) == Completed(b"")
    print("✓ Lone loop end: strict fails, permissive completes")

    program = assemble("[")
    assert execute_with_policy(program, strict=True) == Failed("UnterminatedLoop")
    assert execute_with_policy(program, strict=False) == Failed("UnterminatedLoop")
    print("✓ Unterminated loop fails under both policies")

    assert execute_with_policy(assemble("+[]"), strict=False, max_steps=50) == Exhausted(50)
    print("✓ Step budget reported as exhausted")

    assert execute_with_policy(assemble(",.,."), strict=True, input_data=b"ok") == Completed(b"ok")
    print("✓ Input is fed to READ")


def test_comparison():
    print("\nComparison Tests")
    print("=" * 50)

    assert compare_results(Completed(b"a"), Completed(b"a"))
    assert not compare_results(Completed(b"a"), Completed(b"b"))
    assert compare_results(Failed("UnterminatedLoop"), Failed("UnterminatedLoop"))
    assert not compare_results(Failed("UnexpectedLoopEnd"), Completed(b""))
    assert compare_results(Exhausted(10), Exhausted(20))
    assert not compare_results(Exhausted(10), Completed(b""))
    print("✓ Result comparison")

    stats = FuzzingStatistics()
    stats.record_test(Failed("DataIndexOutOfBounds"), Completed(b""), False)
    stats.record_test(Completed(b"x"), Completed(b"x"), True)
    stats.record_test(Exhausted(5), Exhausted(5), True)
    assert stats.total_tests == 3
    assert stats.divergences == 1 and stats.agreements == 2
    assert stats.strict_only_failures == 1
    assert stats.exhausted == 1
    assert round(stats.divergence_rate, 1) == 33.3
    print("✓ Statistics bookkeeping")


def test_generators():
    print("\nGenerator Tests")
    print("=" * 50)

    assert set(GENERATORS) == {"random", "structured", "mixed"}

    rng = Random(7)
    for _ in range(50):
        program = generate_random_bytes(rng, max_length=8)
        assert 1 <= len(program) <= 8
    print("✓ Random byte programs")

    assert generate_structured_program(Random(3)) == generate_structured_program(Random(3))
    rng = Random(11)
    for _ in range(50):
        instructions = decode(generate_structured_program(rng))
        assert len(instructions) > 0
        assert instructions.count(OP_LOOP_START) <= instructions.count(OP_LOOP_END)
    print("✓ Structured programs close every loop they open")


def test_fuzzer_run():
    print("\nFuzzer Run Tests")
    print("=" * 50)

    stats = run_fuzzer(num_tests=200, seed=1, generator="structured", max_steps=2000, verbose=False)
    assert stats.total_tests == 200
    assert stats.agreements + stats.divergences == 200
    assert stats.strict_only_failures <= stats.divergences
    print(f"✓ Structured run ({stats.divergences} divergences)")

    again = run_fuzzer(num_tests=200, seed=1, generator="structured", max_steps=2000, verbose=False)
    assert again == stats
    print("✓ Runs are reproducible with a seed")

    stats = run_fuzzer(num_tests=100, seed=2, generator="mixed", max_steps=2000, verbose=False)
    assert stats.total_tests == 100
    print("✓ Mixed run")


if __name__ == "__main__":
    test_execution_results()
    test_comparison()
    test_generators()
    test_fuzzer_run()
    print("\n" + "=" * 50)
    print("All tests passed!")
