"""Random program generators for the policy-divergence fuzzer."""

from dataclasses import dataclass
from enum import Enum
from random import Random
from typing import Callable, List

from nibvm.isa import (
    OP_WRITE, OP_INCR_VAL, OP_INCR_PTR, OP_LOOP_START, OP_LOOP_END,
    OP_DECR_VAL, OP_DECR_PTR, OP_READ, encode,
)


# =============================================================================
# Configuration Constants
# =============================================================================

# Structure-aware generation probabilities
PROB_INCR_PTR = 0.18
PROB_DECR_PTR = 0.18
PROB_INCR_VAL = 0.20
PROB_DECR_VAL = 0.10
PROB_WRITE = 0.12
PROB_READ = 0.07
PROB_LOOP = 0.12
PROB_UNMATCHED_END = 0.03

# Mixed strategy probabilities
PROB_RANDOM_STRATEGY = 0.3


@dataclass
class GeneratorConfig:
    """Configuration for program generators."""
    max_length: int = 16              # Packed bytes, for the random generator
    max_instructions: int = 24        # For the structured generator
    max_depth: int = 2                # Loop nesting, for the structured generator


DEFAULT_CONFIG = GeneratorConfig()


# =============================================================================
# Instruction Selection
# =============================================================================

class InstructionChoice(Enum):
    """Instruction kinds used in structure-aware generation."""
    INCR_PTR = "incr_ptr"
    DECR_PTR = "decr_ptr"
    INCR_VAL = "incr_val"
    DECR_VAL = "decr_val"
    WRITE = "write"
    READ = "read"
    LOOP = "loop"
    UNMATCHED_END = "unmatched_end"


SIMPLE_OPCODES = {
    InstructionChoice.INCR_PTR: OP_INCR_PTR,
    InstructionChoice.DECR_PTR: OP_DECR_PTR,
    InstructionChoice.INCR_VAL: OP_INCR_VAL,
    InstructionChoice.DECR_VAL: OP_DECR_VAL,
    InstructionChoice.WRITE: OP_WRITE,
    InstructionChoice.READ: OP_READ,
}


def choose_instruction(rng: Random) -> InstructionChoice:
    """Choose instruction kind based on configured probabilities."""
    weights = [
        (InstructionChoice.INCR_PTR, int(PROB_INCR_PTR * 100)),
        (InstructionChoice.DECR_PTR, int(PROB_DECR_PTR * 100)),
        (InstructionChoice.INCR_VAL, int(PROB_INCR_VAL * 100)),
        (InstructionChoice.DECR_VAL, int(PROB_DECR_VAL * 100)),
        (InstructionChoice.WRITE, int(PROB_WRITE * 100)),
        (InstructionChoice.READ, int(PROB_READ * 100)),
        (InstructionChoice.LOOP, int(PROB_LOOP * 100)),
        (InstructionChoice.UNMATCHED_END, int(PROB_UNMATCHED_END * 100)),
    ]
    choices, probs = zip(*weights)
    return rng.choices(choices, weights=probs)[0]


# =============================================================================
# Program Generators
# =============================================================================

def generate_random_bytes(rng: Random, max_length: int = DEFAULT_CONFIG.max_length) -> bytes:
    """Generate completely random packed bytes - no structure consideration."""
    length = rng.randint(1, max_length)
    return bytes(rng.randint(0, 255) for _ in range(length))


def _structured_instructions(rng: Random, budget: int, depth: int) -> List[int]:
    instructions: List[int] = []

    while len(instructions) < budget:
        choice = choose_instruction(rng)

        if choice == InstructionChoice.LOOP:
            if depth <= 0:
                continue
            # Bodies end with DECR_VAL on the loop cell, so simple loops terminate.
            inner_budget = rng.randint(0, max(0, (budget - len(instructions)) // 2))
            body = _structured_instructions(rng, inner_budget, depth - 1)
            instructions.extend([OP_LOOP_START, *body, OP_DECR_VAL, OP_LOOP_END])

        elif choice == InstructionChoice.UNMATCHED_END:
            instructions.append(OP_LOOP_END)

        else:
            instructions.append(SIMPLE_OPCODES[choice])

    return instructions


def generate_structured_program(
    rng: Random,
    max_instructions: int = DEFAULT_CONFIG.max_instructions,
    max_depth: int = DEFAULT_CONFIG.max_depth,
) -> bytes:
    """
    Generate a packed program with balanced loops.

    Loop bodies are random instruction sequences followed by DECR_VAL, so
    most loops count their cell down to zero. Pointer moves inside bodies
    and stray LOOP_END instructions still exercise the paths where the
    strict and permissive policies disagree.

    Args:
        rng: Random number generator (use Random(seed) for reproducibility)
        max_instructions: Approximate upper bound on the number of instructions
        max_depth: Maximum loop nesting

    Returns:
        Packed program bytes
    """
    budget = rng.randint(1, max_instructions)
    return encode(_structured_instructions(rng, budget, max_depth))


def generate_mixed_program(rng: Random) -> bytes:
    """Pick between raw random bytes and a structured program."""
    if rng.random() < PROB_RANDOM_STRATEGY:
        return generate_random_bytes(rng)
    return generate_structured_program(rng)


# Generator registry for dispatch
GENERATORS: dict[str, Callable[[Random], bytes]] = {
    "random": generate_random_bytes,
    "structured": generate_structured_program,
    "mixed": generate_mixed_program,
}
