"""Tests for the batch scheduler: chunking, progress, cancellation, rollback."""

import asyncio

import pytest

from sestine.constraints import Constraints
from sestine.engine.ledger import Ledger
from sestine.engine.sampler import GenerationLimits
from sestine.engine.scheduler import (
    BatchScheduler,
    BatchStatus,
    CancelToken,
    GenerationRequest,
    chunk_size_for,
)
from sestine.errors import ErrorKind


def _request(count, **kwargs):
    kwargs.setdefault("seed", "PASQUA2026")
    return GenerationRequest(count=count, collection_id="g1", **kwargs)


@pytest.mark.parametrize("total,size", [
    (1, 50), (199, 50), (200, 100), (999, 100), (1000, 200), (4999, 200), (5000, 250), (20000, 250),
])
def test_chunk_size_scales_with_batch(total, size):
    assert chunk_size_for(total) == size


def test_run_sync_reports_progress_per_chunk():
    ledger = Ledger()
    seen = []
    outcome = BatchScheduler(ledger).run_sync(_request(120), progress=lambda d, t: seen.append((d, t)))
    assert outcome.status == BatchStatus.COMPLETED
    assert outcome.ok
    assert seen == [(50, 120), (100, 120), (120, 120)]
    assert len(outcome.combinations) == 120
    assert len(ledger) == 120


@pytest.mark.asyncio
async def test_run_commits_all_combinations():
    ledger = Ledger(["1-2-3-4-5-6"])
    outcome = await BatchScheduler(ledger).run(_request(230))
    assert outcome.ok
    assert outcome.done == outcome.total == 230
    keys = [c.key for c in outcome.combinations]
    assert len(set(keys)) == 230
    assert "1-2-3-4-5-6" not in keys
    assert len(ledger) == 231


@pytest.mark.asyncio
async def test_seeded_batches_are_reproducible():
    a = await BatchScheduler(Ledger()).run(_request(260))
    b = await BatchScheduler(Ledger()).run(_request(260))
    assert [c.key for c in a.combinations] == [c.key for c in b.combinations]


@pytest.mark.asyncio
async def test_chunking_does_not_change_seeded_output():
    chunked = await BatchScheduler(Ledger()).run(_request(120))
    first = await BatchScheduler(Ledger()).run(_request(50))
    assert [c.key for c in chunked.combinations[:50]] == [c.key for c in first.combinations]


@pytest.mark.asyncio
async def test_cancel_after_first_chunk_commits_nothing():
    ledger = Ledger(["1-2-3-4-5-6"])
    before = ledger.keys()
    token = CancelToken()
    seen = []

    def progress(done, total):
        seen.append((done, total))
        token.cancel()

    committed = []
    outcome = await BatchScheduler(ledger).run(
        _request(500), progress=progress, cancel=token, on_commit=committed.append,
    )
    assert outcome.status == BatchStatus.CANCELLED
    assert outcome.combinations == []
    assert seen == [(100, 500)]
    assert ledger.keys() == before
    assert committed == []


def test_cancel_before_start_runs_no_chunk():
    token = CancelToken()
    token.cancel()
    seen = []
    outcome = BatchScheduler(Ledger()).run_sync(_request(10), progress=lambda d, t: seen.append(d), cancel=token)
    assert outcome.status == BatchStatus.CANCELLED
    assert seen == []


def test_cancel_in_sync_driver_rolls_back():
    ledger = Ledger()
    token = CancelToken()
    outcome = BatchScheduler(ledger).run_sync(
        _request(150), progress=lambda d, t: token.cancel(), cancel=token,
    )
    assert outcome.status == BatchStatus.CANCELLED
    assert outcome.done == 50
    assert len(ledger) == 0


def test_cancel_after_last_chunk_still_completes():
    token = CancelToken()
    outcome = BatchScheduler(Ledger()).run_sync(_request(30), progress=lambda d, t: token.cancel(), cancel=token)
    assert outcome.status == BatchStatus.COMPLETED


@pytest.mark.asyncio
async def test_impossible_constraint_fails_whole_batch():
    ledger = Ledger(["1-2-3-4-5-6"])
    request = _request(10, constraints=Constraints.build(must_include=range(1, 8)))
    outcome = await BatchScheduler(ledger).run(request)
    assert outcome.status == BatchStatus.FAILED
    assert outcome.error_kind == ErrorKind.IMPOSSIBLE_CONSTRAINT
    assert outcome.message
    assert list(ledger) == ["1-2-3-4-5-6"]


def test_uniqueness_exhausted_mid_batch_leaves_ledger_untouched(only_one_sestina):
    ledger = Ledger()
    scheduler = BatchScheduler(ledger, limits=GenerationLimits(max_nonce=10))
    outcome = scheduler.run_sync(_request(2, constraints=only_one_sestina))
    assert outcome.status == BatchStatus.FAILED
    assert outcome.error_kind == ErrorKind.UNIQUENESS_EXHAUSTED
    assert len(ledger) == 0


def test_generation_exhausted_is_reported(tight_limits):
    scheduler = BatchScheduler(Ledger(), limits=tight_limits)
    request = _request(3, constraints=Constraints.build(exclude=range(1, 86)))
    outcome = scheduler.run_sync(request)
    assert outcome.error_kind == ErrorKind.GENERATION_EXHAUSTED


def test_iter_chunks_never_touches_the_ledger():
    ledger = Ledger()
    progress = list(BatchScheduler(ledger).iter_chunks(_request(75)))
    assert progress == [(50, 75), (75, 75)]
    assert len(ledger) == 0


def test_release_keys_are_freed_on_commit():
    ledger = Ledger(["1-2-3-4-5-6", "7-8-9-10-11-12"])
    outcome = BatchScheduler(ledger).run_sync(_request(5, release_keys=("1-2-3-4-5-6",)))
    assert outcome.ok
    assert "1-2-3-4-5-6" not in ledger
    assert "7-8-9-10-11-12" in ledger
    assert len(ledger) == 6


def test_released_key_may_be_reused(only_one_sestina):
    ledger = Ledger(["85-86-87-88-89-90"])
    request = _request(1, constraints=only_one_sestina, release_keys=("85-86-87-88-89-90",))
    outcome = BatchScheduler(ledger).run_sync(request)
    assert outcome.ok
    assert outcome.combinations[0].key == "85-86-87-88-89-90"
    assert list(ledger) == ["85-86-87-88-89-90"]


def test_empty_batch_completes():
    outcome = BatchScheduler(Ledger()).run_sync(_request(0))
    assert outcome.ok
    assert outcome.total == 0


def test_unseeded_batch_is_unique():
    ledger = Ledger()
    outcome = BatchScheduler(ledger).run_sync(_request(120, seed=None))
    assert outcome.ok
    assert len({c.key for c in outcome.combinations}) == 120
    assert all(c.seed is None for c in outcome.combinations)


def test_verbose_prints_progress(capsys):
    BatchScheduler(Ledger(), verbose=True).run_sync(_request(60))
    out = capsys.readouterr().out
    assert "[Scheduler] chunk 2/2" in out
    assert "committed 60" in out


@pytest.mark.asyncio
async def test_losing_concurrent_batch_never_reports_completion():
    ledger = Ledger()
    scheduler = BatchScheduler(ledger)
    seen = {"a": [], "b": []}
    a, b = await asyncio.gather(
        scheduler.run(_request(120), progress=lambda d, t: seen["a"].append((d, t))),
        scheduler.run(_request(120), progress=lambda d, t: seen["b"].append((d, t))),
    )
    assert a.ok
    assert b.status == BatchStatus.FAILED
    assert b.error_kind == ErrorKind.DUPLICATE_KEY
    assert seen["a"][-1] == (120, 120)
    assert (120, 120) not in seen["b"]
    assert len(ledger) == 120
