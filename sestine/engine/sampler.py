"""
Candidate Sampler

Produces one constraint-satisfying sestina by bounded rejection sampling.
Mandatory numbers are placed first, the rest are drawn from the stream
while skipping duplicates and excluded numbers. The any-of clause is only
checked after the fill; when it fails the whole sample is thrown away and
sampling restarts from the current stream position.
"""
from dataclasses import dataclass

from sestine.constraints import (
    MAX_NUM,
    MIN_NUM,
    NUMBERS_PER_DRAW,
    check_constraints,
    is_valid,
)
from sestine.engine.rng import int_in_range
from sestine.errors import GenerationExhausted


@dataclass(frozen=True)
class GenerationLimits:
    """Retry guards. Pathological constraints fail on these, never hang."""

    max_fill_draws: int = 100_000
    max_resamples: int = 1_000
    max_nonce: int = 50_000


DEFAULT_LIMITS = GenerationLimits()


def _fill(stream, constraints, max_draws):
    picked = set(constraints.must_include)
    draws = 0
    while len(picked) < NUMBERS_PER_DRAW:
        draws += 1
        if draws > max_draws:
            raise GenerationExhausted(
                f"Could not complete a sestina within {max_draws:,} draws "
                f"({len(picked)}/{NUMBERS_PER_DRAW} picked)"
            )
        x = int_in_range(stream, MIN_NUM, MAX_NUM)
        if x in picked or x in constraints.exclude:
            continue
        picked.add(x)
    return tuple(sorted(picked))


def sample_one(stream, constraints, limits=DEFAULT_LIMITS):
    """
    Draw one valid sestina from `stream`.

    Parameters
    ----------
    stream : RandomStream
        Source of floats in [0, 1); advanced in place.
    constraints : Constraints
    limits : GenerationLimits

    Returns
    -------
    tuple of 6 sorted ints in 1-90.

    Raises
    ------
    ImpossibleConstraint
        must_include larger than 6, out of range, or overlapping exclude.
    GenerationExhausted
        Fill guard or resample guard exceeded.
    """
    check_constraints(constraints)

    for _ in range(limits.max_resamples + 1):
        numbers = _fill(stream, constraints, limits.max_fill_draws)
        if is_valid(numbers, constraints):
            return numbers

    raise GenerationExhausted(
        f"No sample satisfied must_include_any_of after {limits.max_resamples:,} resamples"
    )
