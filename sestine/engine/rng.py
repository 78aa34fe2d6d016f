"""
Randomness Provider

Deterministic float streams in [0, 1). A string seed is hashed to 32 bits
(FNV-1a over UTF-16 code units, then one xorshift scramble step) and the
result seeds a Mulberry32 generator. The unseeded mode draws one 32-bit
integer from system entropy and feeds it to the same generator, so the
code downstream never cares which mode is active.
"""
import secrets

MASK32 = 0xFFFFFFFF
TWO_POW_32 = 4294967296

FNV_OFFSET = 2166136261
FNV_PRIME = 16777619
MULBERRY_INCREMENT = 0x6D2B79F5


def _utf16_units(text):
    data = text.encode("utf-16-le")
    for i in range(0, len(data), 2):
        yield data[i] | (data[i + 1] << 8)


def hash_seed(seed):
    """Hash a seed string to an unsigned 32-bit integer."""
    h = FNV_OFFSET
    for unit in _utf16_units(seed):
        h ^= unit
        h = (h * FNV_PRIME) & MASK32

    # first output of the xorshift scrambler seeded by the hash
    h = (h + (h << 13)) & MASK32
    h ^= h >> 7
    h = (h + (h << 3)) & MASK32
    h ^= h >> 17
    h = (h + (h << 5)) & MASK32
    return h


class RandomStream:
    """
    Mulberry32 generator producing floats in [0, 1).

    Calling the stream (or ``random()``) advances it by one draw.
    """

    def __init__(self, seed):
        self.seed = seed & MASK32
        self._state = self.seed
        self.draws = 0

    def random(self):
        self._state = (self._state + MULBERRY_INCREMENT) & MASK32
        a = self._state
        t = ((a ^ (a >> 15)) * (1 | a)) & MASK32
        t ^= (t + (((t ^ (t >> 7)) * (61 | t)) & MASK32)) & MASK32
        self.draws += 1
        return ((t ^ (t >> 14)) & MASK32) / TWO_POW_32

    __call__ = random

    def next_uint32(self):
        return int(self.random() * TWO_POW_32) & MASK32

    def __repr__(self):
        return f"RandomStream(seed={self.seed}, draws={self.draws})"


def mulberry32(seed):
    return RandomStream(seed)


def seeded_stream(seed):
    """Same seed string, same stream, every run."""
    return RandomStream(hash_seed(seed))


def entropy_stream():
    """Stream bootstrapped from one system-entropy integer."""
    return RandomStream(secrets.randbits(32))


def int_in_range(stream, lo, hi):
    """Map one draw to an inclusive integer range [lo, hi]."""
    return int(stream() * (hi - lo + 1)) + lo
