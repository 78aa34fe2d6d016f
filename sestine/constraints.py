"""
Constraint Evaluator for SuperEnalotto sestine

Hard rules a generated sestina must satisfy:
    exclude            -- numbers that may never appear
    must_include       -- numbers that must all appear (at most 6)
    must_include_any_of -- at least one must appear (empty = no restriction)

Superstition mode folds lucky/unlucky numbers and a birth date into the
same three rules.
"""
import re
from dataclasses import dataclass, field

from sestine.errors import ImpossibleConstraint

MIN_NUM = 1
MAX_NUM = 90
NUMBERS_PER_DRAW = 6

_BIRTH_DATE_RE = re.compile(r"^(\d{4})-(\d{2})-(\d{2})$")


@dataclass(frozen=True)
class Constraints:
    exclude: frozenset = field(default_factory=frozenset)
    must_include: frozenset = field(default_factory=frozenset)
    must_include_any_of: frozenset = field(default_factory=frozenset)

    @classmethod
    def build(cls, exclude=(), must_include=(), must_include_any_of=()):
        return cls(
            exclude=frozenset(int(n) for n in exclude),
            must_include=frozenset(int(n) for n in must_include),
            must_include_any_of=frozenset(int(n) for n in must_include_any_of),
        )

    def to_dict(self):
        return {
            "exclude": sorted(self.exclude),
            "must_include": sorted(self.must_include),
            "must_include_any_of": sorted(self.must_include_any_of),
        }

    @classmethod
    def from_dict(cls, data):
        return cls.build(
            data.get("exclude", ()),
            data.get("must_include", ()),
            data.get("must_include_any_of", ()),
        )


NO_CONSTRAINTS = Constraints()


def is_valid(numbers, constraints):
    """True when `numbers` honours exclude, must_include and any-of."""
    picked = set(numbers)
    if picked & constraints.exclude:
        return False
    if not constraints.must_include <= picked:
        return False
    if constraints.must_include_any_of and not (picked & constraints.must_include_any_of):
        return False
    return True


def check_constraints(constraints):
    """Reject constraint sets that can never be satisfied, before any sampling."""
    if len(constraints.must_include) > NUMBERS_PER_DRAW:
        raise ImpossibleConstraint(
            f"Too many mandatory numbers: {len(constraints.must_include)} > {NUMBERS_PER_DRAW}"
        )
    out_of_range = sorted(n for n in constraints.must_include if not MIN_NUM <= n <= MAX_NUM)
    if out_of_range:
        raise ImpossibleConstraint(
            f"Mandatory numbers outside {MIN_NUM}-{MAX_NUM}: {out_of_range}"
        )
    overlap = sorted(constraints.must_include & constraints.exclude)
    if overlap:
        raise ImpossibleConstraint(f"Numbers both mandatory and excluded: {overlap}")


# ── Superstition mode ────────────────────────────────────────────────────

def _wrap(n):
    return ((n - 1) % MAX_NUM) + 1


def birth_date_to_lucky(birth_date):
    """
    Derive lucky numbers from a YYYY-MM-DD birth date.

    Day, month, two-digit year, day+month and day+year, each folded
    into 1-90. Malformed or missing dates give no numbers.
    """
    if not birth_date:
        return []
    m = _BIRTH_DATE_RE.match(birth_date)
    if not m:
        return []
    year, month, day = int(m.group(1)), int(m.group(2)), int(m.group(3))
    yy = year % 100
    raw = [
        day,
        month,
        yy,
        (day + month) % MAX_NUM or MAX_NUM,
        (day + yy) % MAX_NUM or MAX_NUM,
    ]
    return sorted({_wrap(n) for n in raw})


def build_constraints(settings):
    """
    Effective constraints for a Settings object.

    With superstition enabled, unlucky numbers join `exclude` and lucky
    numbers (explicit plus birth-date derived) join `must_include_any_of`.
    """
    lucky = set()
    unlucky = set()
    if settings.superstition_enabled:
        lucky = set(settings.lucky_numbers) | set(birth_date_to_lucky(settings.birth_date))
        unlucky = set(settings.unlucky_numbers)

    return Constraints.build(
        exclude=set(settings.exclude) | unlucky,
        must_include=settings.must_include,
        must_include_any_of=set(settings.must_include_any_of) | lucky,
    )
