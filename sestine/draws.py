"""
Draw validation and prize estimation for SuperEnalotto

Checks a group of sestine against a drawn outcome: hits per sestina,
which numbers matched, jolly / superstar flags, prize tier and an
average-payout estimate. Free-text parsing helpers sit at the bottom.
"""
import re
from dataclasses import dataclass
from enum import Enum

from sestine.combination import Combination, normalize_numbers, sestina_key
from sestine.constraints import MAX_NUM, MIN_NUM, NUMBERS_PER_DRAW
from sestine.errors import InvalidDrawInput


class PrizeTier(str, Enum):
    SIX = "6"
    FIVE_PLUS_ONE = "5+1"
    FIVE = "5"
    FOUR = "4"
    THREE = "3"
    TWO = "2"
    NONE = "none"


# Long-run average payout per winning sestina (EUR). Tier 6 is the jackpot
# and always comes from the caller.
AVERAGE_PAYOUTS = {
    PrizeTier.FIVE_PLUS_ONE: 620_000.0,
    PrizeTier.FIVE: 32_000.0,
    PrizeTier.FOUR: 330.0,
    PrizeTier.THREE: 27.0,
    PrizeTier.TWO: 5.5,
    PrizeTier.NONE: 0.0,
}
DEFAULT_JACKPOT = 50_000_000.0


@dataclass(frozen=True)
class Draw:
    numbers: tuple
    jolly: int = None
    superstar: int = None

    def __post_init__(self):
        object.__setattr__(self, "numbers", check_draw(self.numbers))
        for label in ("jolly", "superstar"):
            value = getattr(self, label)
            if value is None:
                continue
            value = _as_int(value, label)
            if not MIN_NUM <= value <= MAX_NUM:
                raise InvalidDrawInput(f"{label} {value} is outside {MIN_NUM}-{MAX_NUM}")
            object.__setattr__(self, label, value)
        # the jolly comes out of the same urn as the six
        if self.jolly is not None and self.jolly in self.numbers:
            raise InvalidDrawInput(f"jolly {self.jolly} is already one of the drawn numbers")


def _as_int(value, label):
    try:
        return int(value)
    except (TypeError, ValueError):
        raise InvalidDrawInput(f"{label} is not a number: {value!r}")


def check_draw(numbers):
    """Exactly 6 distinct numbers in 1-90, returned sorted."""
    numbers = [_as_int(n, "draw number") for n in numbers]
    if any(not MIN_NUM <= n <= MAX_NUM for n in numbers):
        raise InvalidDrawInput(f"Draw numbers must be within {MIN_NUM}-{MAX_NUM}: {numbers}")
    unique = normalize_numbers(set(numbers))
    if len(numbers) != NUMBERS_PER_DRAW or len(unique) != NUMBERS_PER_DRAW:
        raise InvalidDrawInput(
            f"A draw needs exactly {NUMBERS_PER_DRAW} distinct numbers, got {len(unique)} "
            f"distinct out of {len(numbers)}"
        )
    return unique


def classify(hits, jolly_hit=False):
    """Prize tier for a sestina with `hits` matches."""
    if hits == 6:
        return PrizeTier.SIX
    elif hits == 5 and jolly_hit:
        return PrizeTier.FIVE_PLUS_ONE
    elif hits == 5:
        return PrizeTier.FIVE
    elif hits == 4:
        return PrizeTier.FOUR
    elif hits == 3:
        return PrizeTier.THREE
    elif hits == 2:
        return PrizeTier.TWO
    return PrizeTier.NONE


def estimate_payout(tier, jackpot=DEFAULT_JACKPOT, payouts=None):
    """Average payout for `tier`; tier 6 pays the supplied jackpot."""
    tier = PrizeTier(tier)
    if tier == PrizeTier.SIX:
        return float(jackpot)
    table = AVERAGE_PAYOUTS if payouts is None else payouts
    return float(table.get(tier, 0.0))


def _row_sort_key(row):
    return (-row["hits"], not row["frozen"], row["key"])


def validate_draw(combinations, draw, jolly=None, superstar=None,
                  jackpot=DEFAULT_JACKPOT, payouts=None):
    """
    Check sestine against a draw.

    Parameters
    ----------
    combinations : iterable of Combination (or plain number sequences)
    draw : Draw or sequence of 6 ints
    jolly, superstar : int, optional
        Ignored when `draw` is already a Draw.
    jackpot : float
        Payout used for tier 6.

    Returns
    -------
    dict with:
        'draw', 'jolly', 'superstar'
        'rows'        : per-sestina dicts sorted by hits desc, frozen first, key asc
        'counts'      : {hits: n} for hits 0..6
        'tier_counts' : {tier value: n}
        'total_payout': float
    """
    if not isinstance(draw, Draw):
        draw = Draw(tuple(draw), jolly, superstar)
    drawn = set(draw.numbers)

    rows = []
    counts = {h: 0 for h in range(NUMBERS_PER_DRAW + 1)}
    tier_counts = {t.value: 0 for t in PrizeTier}
    total_payout = 0.0

    for combo in combinations:
        if not isinstance(combo, Combination):
            combo = Combination(combo)
        numbers = combo.numbers
        hit_nums = [n for n in numbers if n in drawn]
        hits = len(hit_nums)
        jolly_hit = draw.jolly is not None and draw.jolly in numbers
        superstar_hit = draw.superstar is not None and draw.superstar in numbers
        tier = classify(hits, jolly_hit)
        payout = estimate_payout(tier, jackpot, payouts)

        rows.append({
            "key": sestina_key(numbers),
            "nums": list(numbers),
            "hits": hits,
            "hit_nums": hit_nums,
            "frozen": bool(getattr(combo, "frozen", False)),
            "jolly_hit": jolly_hit,
            "superstar_hit": superstar_hit,
            "tier": tier.value,
            "payout": payout,
        })
        counts[hits] += 1
        tier_counts[tier.value] += 1
        total_payout += payout

    rows.sort(key=_row_sort_key)

    return {
        "draw": list(draw.numbers),
        "jolly": draw.jolly,
        "superstar": draw.superstar,
        "rows": rows,
        "counts": counts,
        "tier_counts": tier_counts,
        "total_payout": total_payout,
    }


# ── Free-text input ──────────────────────────────────────────────────────

def parse_numbers(text):
    """All distinct in-range integers found in `text`, sorted."""
    found = (int(tok) for tok in re.split(r"[^0-9]+", text or "") if tok)
    return sorted({n for n in found if MIN_NUM <= n <= MAX_NUM})


def parse_draw(text):
    nums = parse_numbers(text)
    if len(nums) != NUMBERS_PER_DRAW:
        raise InvalidDrawInput(
            f"Enter exactly {NUMBERS_PER_DRAW} distinct numbers ({MIN_NUM}-{MAX_NUM}); found {len(nums)}."
        )
    return tuple(nums)


def parse_optional_one(text):
    nums = parse_numbers(text)
    return nums[0] if nums else None
