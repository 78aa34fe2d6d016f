"""A single sestina and its order-independent key."""
from dataclasses import dataclass, field
from datetime import datetime, timezone

from sestine.constraints import MAX_NUM, MIN_NUM, NUMBERS_PER_DRAW
from sestine.errors import InvalidCombination


def normalize_numbers(numbers):
    return tuple(sorted(int(n) for n in numbers))


def sestina_key(numbers):
    """'3-17-22-45-60-88' for any ordering of the same six numbers."""
    return "-".join(str(n) for n in normalize_numbers(numbers))


def _now_iso():
    return datetime.now(timezone.utc).isoformat()


@dataclass(eq=False)
class Combination:
    """
    A stored sestina: sorted numbers plus bookkeeping.

    Two combinations are equal iff their keys match; frozen flag,
    timestamps and provenance do not take part in equality.
    """

    numbers: tuple
    frozen: bool = False
    created_at: str = field(default_factory=_now_iso)
    seed: str = None
    attempt_nonce: int = None
    superstition_mode: bool = False

    def __post_init__(self):
        try:
            numbers = normalize_numbers(self.numbers)
        except (TypeError, ValueError):
            raise InvalidCombination(f"Not a list of numbers: {self.numbers!r}")
        if len(numbers) != NUMBERS_PER_DRAW or len(set(numbers)) != NUMBERS_PER_DRAW:
            raise InvalidCombination(
                f"A sestina needs {NUMBERS_PER_DRAW} distinct numbers, got {list(numbers)}"
            )
        if numbers[0] < MIN_NUM or numbers[-1] > MAX_NUM:
            raise InvalidCombination(f"Sestina numbers must be within {MIN_NUM}-{MAX_NUM}: {list(numbers)}")
        self.numbers = numbers

    @property
    def key(self):
        return sestina_key(self.numbers)

    def __eq__(self, other):
        if not isinstance(other, Combination):
            return NotImplemented
        return self.key == other.key

    def __hash__(self):
        return hash(self.key)

    def to_dict(self):
        return {
            "nums": list(self.numbers),
            "key": self.key,
            "created_at": self.created_at,
            "frozen": self.frozen,
            "meta": {
                "seed": self.seed,
                "attempt_nonce": self.attempt_nonce,
                "superstition_mode": self.superstition_mode,
            },
        }

    @classmethod
    def from_dict(cls, data):
        meta = data.get("meta") or {}
        return cls(
            numbers=data["nums"],
            frozen=bool(data.get("frozen", False)),
            created_at=data.get("created_at") or _now_iso(),
            seed=meta.get("seed"),
            attempt_nonce=meta.get("attempt_nonce"),
            superstition_mode=bool(meta.get("superstition_mode", False)),
        )
