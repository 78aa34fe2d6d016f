"""
Group statistics for generated sestine

Frequency of each number 1-90 across a group, top and missing numbers,
a chi-square uniformity check of the group, and a comparison of the hit
counts from a validation pass against the hypergeometric expectation.

These describe the user's own sestine only; none of it says anything
about future draws.
"""
import numpy as np
import pandas as pd
from scipy import stats

from sestine.constraints import MAX_NUM, MIN_NUM, NUMBERS_PER_DRAW
from sestine.probability import TOTAL_COMBINATIONS

ALL_NUMBERS = list(range(MIN_NUM, MAX_NUM + 1))


def _numbers_of(combo):
    return getattr(combo, "numbers", combo)


def frequency_map(combinations):
    """
    Count appearances of each number.

    Returns
    -------
    np.array of shape (91,); index n holds the count of number n,
    index 0 is always 0.
    """
    flat = [n for combo in combinations for n in _numbers_of(combo)]
    return np.bincount(np.asarray(flat, dtype=np.int64), minlength=MAX_NUM + 1)


def top_numbers(freq, k=10):
    """Most frequent numbers, ties broken by the smaller number."""
    ranked = sorted(ALL_NUMBERS, key=lambda n: (-int(freq[n]), n))
    return [{"n": n, "count": int(freq[n])} for n in ranked[:k]]


def missing_numbers(freq):
    return [n for n in ALL_NUMBERS if freq[n] == 0]


def frequency_frame(combinations):
    """DataFrame with one row per number: count and share of all picks."""
    freq = frequency_map(combinations)
    counts = freq[MIN_NUM:]
    total = counts.sum()
    df = pd.DataFrame({"number": ALL_NUMBERS, "count": counts})
    df["pct"] = 100 * df["count"] / total if total else 0.0
    return df


def uniformity_test(combinations, significance=0.05):
    """
    Chi-square test that the numbers of a group are spread uniformly.

    Each sestina contributes 6 picks; under uniform generation every
    number is expected 6 * len(group) / 90 times.
    """
    freq = frequency_map(combinations)[MIN_NUM:]
    total = int(freq.sum())
    if total == 0:
        return {"chi2": 0.0, "p_value": 1.0, "is_uniform": True, "n_picks": 0}

    expected = np.full(MAX_NUM, total / MAX_NUM)
    chi2, p_value = stats.chisquare(freq, expected)
    return {
        "chi2": float(chi2),
        "p_value": float(p_value),
        "is_uniform": bool(p_value >= significance),
        "n_picks": total,
    }


def hit_count_check(counts):
    """
    Compare observed hit counts from a validation pass with expectation.

    Parameters
    ----------
    counts : dict {hits: n_sestine} for hits 0..6

    Returns
    -------
    pd.DataFrame with columns hits, observed, probability, expected.
    """
    n_tickets = sum(counts.values())
    dist = stats.hypergeom(MAX_NUM, NUMBERS_PER_DRAW, NUMBERS_PER_DRAW)
    hits = np.arange(NUMBERS_PER_DRAW + 1)
    probability = dist.pmf(hits)
    return pd.DataFrame({
        "hits": hits,
        "observed": [int(counts.get(int(h), 0)) for h in hits],
        "probability": probability,
        "expected": probability * n_tickets,
    })


def odds_text():
    return (f"Odds of hitting 6: 1 in {TOTAL_COMBINATIONS:,}. "
            "Generating numbers does not improve your odds.")
