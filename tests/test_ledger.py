"""Tests for the uniqueness ledger: allocation, nonce retry, reserve/release."""

import pytest

from sestine.combination import sestina_key
from sestine.constraints import Constraints
from sestine.engine.ledger import Ledger, seeded_factory, unseeded_factory
from sestine.engine.sampler import GenerationLimits, sample_one
from sestine.errors import DuplicateKeyError, ErrorKind, UniquenessExhausted

NONE = Constraints()


def test_allocate_returns_n_new_distinct_sestine():
    ledger = Ledger(["1-2-3-4-5-6", "7-8-9-10-11-12"])
    before = ledger.keys()
    out = ledger.allocate(300, seeded_factory("s", "g"), NONE)
    keys = [c.key for c in out]
    assert len(out) == 300
    assert len(set(keys)) == 300
    assert not set(keys) & before
    assert len(ledger) == len(before) + 300
    assert all(k in ledger for k in keys)


def test_seeded_allocation_is_reproducible():
    a = Ledger().allocate(50, seeded_factory("PASQUA2026", "g1", 0), NONE)
    b = Ledger().allocate(50, seeded_factory("PASQUA2026", "g1", 0), NONE)
    assert [c.numbers for c in a] == [c.numbers for c in b]


def test_collection_identity_changes_output():
    a = Ledger().allocate(20, seeded_factory("seed", "g1"), NONE)
    b = Ledger().allocate(20, seeded_factory("seed", "g2"), NONE)
    assert [c.key for c in a] != [c.key for c in b]


def test_batch_serial_changes_output():
    a = Ledger().allocate(20, seeded_factory("seed", "g1", 0), NONE)
    b = Ledger().allocate(20, seeded_factory("seed", "g1", 1), NONE)
    assert [c.key for c in a] != [c.key for c in b]


def test_collision_advances_nonce():
    factory = seeded_factory("seed", "g")
    taken = sestina_key(sample_one(factory(0, 0), NONE))
    ledger = Ledger([taken])
    [combo] = ledger.allocate(1, factory, NONE)
    assert combo.key != taken
    assert combo.attempt_nonce == 1
    assert combo.numbers == sample_one(factory(0, 1), NONE)


def test_first_slot_offsets_streams():
    factory = seeded_factory("seed", "g")
    [combo] = Ledger().allocate(1, factory, NONE, first_slot=7)
    assert combo.numbers == sample_one(factory(7, 0), NONE)


def test_provenance_is_recorded():
    [combo] = Ledger().allocate(1, seeded_factory("s", "g"), NONE, seed="s", superstition_mode=True)
    assert combo.seed == "s"
    assert combo.superstition_mode is True
    assert combo.attempt_nonce == 0
    assert combo.frozen is False


def test_exhausted_space_raises_uniqueness_exhausted(only_one_sestina, tight_limits):
    ledger = Ledger(["85-86-87-88-89-90"])
    with pytest.raises(UniquenessExhausted) as exc:
        ledger.allocate(1, seeded_factory("s", "g"), only_one_sestina, tight_limits)
    assert exc.value.kind == ErrorKind.UNIQUENESS_EXHAUSTED
    assert exc.value.slot == 0
    assert len(ledger) == 1


def test_single_possible_sestina_fills_once_then_exhausts(only_one_sestina):
    limits = GenerationLimits(max_nonce=5)
    ledger = Ledger()
    with pytest.raises(UniquenessExhausted):
        ledger.allocate(2, seeded_factory("s", "g"), only_one_sestina, limits)
    # the first slot was accepted before the second failed
    assert "85-86-87-88-89-90" in ledger


def test_reserve_rejects_existing_key():
    ledger = Ledger(["1-2-3-4-5-6"])
    with pytest.raises(DuplicateKeyError) as exc:
        ledger.reserve(["1-2-3-4-5-6", "7-8-9-10-11-12"])
    assert exc.value.keys == ["1-2-3-4-5-6"]
    assert len(ledger) == 1


def test_reserve_rejects_repeated_keys_in_one_call():
    with pytest.raises(DuplicateKeyError):
        Ledger(["1-2-3-4-5-6", "1-2-3-4-5-6"])


def test_release_frees_keys_and_ignores_unknown():
    ledger = Ledger(["1-2-3-4-5-6", "7-8-9-10-11-12"])
    ledger.release(["1-2-3-4-5-6", "not-a-key"])
    assert list(ledger) == ["7-8-9-10-11-12"]


def test_copy_is_independent():
    ledger = Ledger(["1-2-3-4-5-6"])
    staged = ledger.copy()
    staged.release(["1-2-3-4-5-6"])
    staged.reserve(["7-8-9-10-11-12"])
    assert list(ledger) == ["1-2-3-4-5-6"]


def test_unseeded_factory_with_fixed_base_is_deterministic():
    a = Ledger().allocate(10, unseeded_factory(base=123), NONE)
    b = Ledger().allocate(10, unseeded_factory(base=123), NONE)
    assert [c.key for c in a] == [c.key for c in b]


def test_unseeded_factory_draws_a_base():
    factory = unseeded_factory()
    assert 0 <= factory.base < 2**32
    out = Ledger().allocate(25, factory, NONE)
    assert len({c.key for c in out}) == 25
