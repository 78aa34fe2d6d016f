"""
Probability Engine for SuperEnalotto (6 of 90)

Exact hypergeometric match probabilities for a single sestina and the
"best of k sestine" aggregate used by the odds display.

The aggregate treats the k sestine as independent even though the ledger
guarantees they are all distinct; drawing without replacement would give a
slightly different figure. The approximation is kept on purpose: it is a
display number, not a prediction.
"""
import warnings

import numpy as np

from sestine.constraints import MAX_NUM, NUMBERS_PER_DRAW

MATCH_LEVELS = range(NUMBERS_PER_DRAW + 1)


def binomial(n, k):
    """
    Exact C(n, k) by the iterative multiplicative formula.

    Uses min(k, n - k) steps; every intermediate value is itself a
    binomial coefficient, so integer division is exact.
    """
    if k < 0 or k > n:
        return 0
    k = min(k, n - k)
    result = 1
    for i in range(1, k + 1):
        result = result * (n - k + i) // i
    return result


TOTAL_COMBINATIONS = binomial(MAX_NUM, NUMBERS_PER_DRAW)  # 622,614,630


def exact_match_probability(r):
    """P(a random sestina shares exactly r numbers with a fixed draw)."""
    if r < 0 or r > NUMBERS_PER_DRAW:
        return 0.0
    misses = MAX_NUM - NUMBERS_PER_DRAW
    return binomial(NUMBERS_PER_DRAW, r) * binomial(misses, NUMBERS_PER_DRAW - r) / TOTAL_COMBINATIONS


def match_distribution():
    """Array p[r] = exact_match_probability(r) for r in 0..6."""
    return np.array([exact_match_probability(r) for r in MATCH_LEVELS], dtype=np.float64)


def at_least_distribution(k):
    """
    Probability that the best of `k` sestine reaches at least m matches.

    p(m) = 1 - CDF(m-1)^k for m in 1..6, computed as
    -expm1(k * log1p(-tail)) so the m=6 entry keeps its precision.

    Returns
    -------
    list of {"m": int, "p": float}, sorted by m descending (6 first).
    """
    if k <= 0:
        warnings.warn("at_least_distribution called with no sestine; every probability is 0.")
        return [{"m": m, "p": 0.0} for m in range(NUMBERS_PER_DRAW, 0, -1)]

    pmf = match_distribution()
    out = []
    for m in range(1, NUMBERS_PER_DRAW + 1):
        tail = float(pmf[m:].sum())  # 1 - CDF(m-1)
        p = float(-np.expm1(k * np.log1p(-tail)))
        out.append({"m": m, "p": min(p, 1.0)})

    return sorted(out, key=lambda x: x["m"], reverse=True)


def expected_hits(k=1):
    """Mean number of matched numbers summed over k sestine (6*6/90 each)."""
    return k * NUMBERS_PER_DRAW * NUMBERS_PER_DRAW / MAX_NUM
