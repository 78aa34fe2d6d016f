"""
Uniqueness Ledger

Holds every sestina key allocated across all groups. Allocation drives
the sampler slot by slot; a key collision bumps the slot's nonce, which
selects a different deterministic stream, until an unused key turns up
or the nonce guard is exceeded.
"""
from datetime import datetime, timedelta, timezone

from sestine.combination import Combination, sestina_key
from sestine.engine.rng import MASK32, entropy_stream, mulberry32, seeded_stream
from sestine.engine.sampler import DEFAULT_LIMITS, sample_one
from sestine.errors import DuplicateKeyError, UniquenessExhausted

SLOT_STRIDE = 0x9E3779B9
NONCE_STRIDE = 1013904223


# ── Stream factories ─────────────────────────────────────────────────────

def seeded_factory(seed, collection_id, batch_serial=0):
    """(slot, nonce) -> stream, a pure function of every argument."""
    def factory(slot, nonce):
        return seeded_stream(f"{seed}::{collection_id}::{batch_serial}::{slot}::{nonce}")
    return factory


def unseeded_factory(base=None):
    """(slot, nonce) -> stream perturbed from one entropy-drawn base value."""
    if base is None:
        base = entropy_stream().next_uint32()

    def factory(slot, nonce):
        return mulberry32((base + slot * SLOT_STRIDE + nonce * NONCE_STRIDE) & MASK32)
    factory.base = base
    return factory


# ── Ledger ───────────────────────────────────────────────────────────────

class Ledger:
    """
    Set of allocated keys shared by every group.

    Mutated only through allocate(), reserve() and release().
    """

    def __init__(self, keys=()):
        self._keys = set()
        self.reserve(keys)

    def __contains__(self, key):
        return key in self._keys

    def __len__(self):
        return len(self._keys)

    def __iter__(self):
        return iter(sorted(self._keys))

    def keys(self):
        return frozenset(self._keys)

    def copy(self):
        clone = Ledger()
        clone._keys = set(self._keys)
        return clone

    def reserve(self, keys):
        """Insert already-known keys; refuses any key that is present or repeated."""
        keys = list(keys)
        seen = set()
        clashes = []
        for key in keys:
            if key in self._keys or key in seen:
                clashes.append(key)
            seen.add(key)
        if clashes:
            raise DuplicateKeyError(
                f"{len(clashes)} key(s) already allocated: {', '.join(clashes[:5])}",
                keys=clashes,
            )
        self._keys.update(seen)

    def release(self, keys):
        """Free keys; unknown keys are ignored."""
        for key in keys:
            self._keys.discard(key)

    def allocate(self, count, stream_factory, constraints, limits=DEFAULT_LIMITS,
                 first_slot=0, seed=None, superstition_mode=False, created_base=None):
        """
        Generate `count` sestine whose keys are not yet in the ledger.

        Parameters
        ----------
        count : int
        stream_factory : callable (slot, nonce) -> RandomStream
        constraints : Constraints
        limits : GenerationLimits
        first_slot : int
            Absolute index of the first slot; slot i uses first_slot + i.
        seed, superstition_mode :
            Provenance copied onto each combination.
        created_base : datetime
            Slot i is stamped created_base + i milliseconds.

        Returns
        -------
        list of Combination in slot order. Each key is inserted as soon as
        its slot is accepted.
        """
        if created_base is None:
            created_base = datetime.now(timezone.utc)

        out = []
        for i in range(count):
            slot = first_slot + i
            nonce = 0
            while True:
                numbers = sample_one(stream_factory(slot, nonce), constraints, limits)
                key = sestina_key(numbers)
                if key not in self._keys:
                    break
                nonce += 1
                if nonce > limits.max_nonce:
                    raise UniquenessExhausted(
                        f"Slot {slot}: no unused sestina after {limits.max_nonce:,} nonces",
                        slot=slot,
                        attempts=nonce,
                    )

            self._keys.add(key)
            out.append(Combination(
                numbers=numbers,
                created_at=(created_base + timedelta(milliseconds=i)).isoformat(),
                seed=seed,
                attempt_nonce=nonce,
                superstition_mode=superstition_mode,
            ))
        return out
