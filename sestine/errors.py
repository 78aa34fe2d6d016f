"""
Error taxonomy for the sestine engine.

Every failure carries an ErrorKind so batch callers can report it as a value
instead of catching a specific class. All kinds are terminal for the
operation that raised them.
"""
from enum import Enum


class ErrorKind(str, Enum):
    IMPOSSIBLE_CONSTRAINT = "impossible_constraint"
    GENERATION_EXHAUSTED = "generation_exhausted"
    UNIQUENESS_EXHAUSTED = "uniqueness_exhausted"
    INVALID_DRAW_INPUT = "invalid_draw_input"
    DUPLICATE_KEY = "duplicate_key"
    INVALID_COMBINATION = "invalid_combination"


class SestineError(Exception):
    """Base class for every engine failure."""

    kind = None

    def __init__(self, message):
        super().__init__(message)
        self.message = message


class ImpossibleConstraint(SestineError):
    """must_include larger than 6, out of range, or overlapping exclude."""

    kind = ErrorKind.IMPOSSIBLE_CONSTRAINT


class GenerationExhausted(SestineError):
    """The fill loop or the any-of resample loop ran past its guard."""

    kind = ErrorKind.GENERATION_EXHAUSTED


class UniquenessExhausted(SestineError):
    """A slot could not find an unused key within the nonce guard."""

    kind = ErrorKind.UNIQUENESS_EXHAUSTED

    def __init__(self, message, slot=None, attempts=None):
        super().__init__(message)
        self.slot = slot
        self.attempts = attempts


class InvalidDrawInput(SestineError):
    """Draw is not exactly 6 distinct numbers in 1-90, or a bonus is out of range."""

    kind = ErrorKind.INVALID_DRAW_INPUT


class InvalidCombination(SestineError):
    """A stored sestina is not exactly 6 distinct numbers in 1-90."""

    kind = ErrorKind.INVALID_COMBINATION


class DuplicateKeyError(SestineError):
    """A key was reserved twice in the same ledger."""

    kind = ErrorKind.DUPLICATE_KEY

    def __init__(self, message, keys=()):
        super().__init__(message)
        self.keys = list(keys)
