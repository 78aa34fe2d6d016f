"""
Batch Generation Scheduler

Turns a requested count into a chunked, cancellable sequence of ledger
allocations. All sampling runs against a staged copy of the ledger; the
real ledger (and the caller's group, through ``on_commit``) is updated in
one synchronous step after the last chunk, so a cancelled or failed batch
leaves no trace.

The chunk loop is a plain generator (``iter_chunks``). ``run`` drives it
from a coroutine and suspends with ``asyncio.sleep(0)`` between chunks;
``run_sync`` drives the same loop without suspending.
"""
import asyncio
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from enum import Enum

from sestine.constraints import NO_CONSTRAINTS, check_constraints
from sestine.engine.ledger import seeded_factory, unseeded_factory
from sestine.engine.sampler import DEFAULT_LIMITS
from sestine.errors import SestineError


def chunk_size_for(total):
    """Larger batches get larger chunks."""
    if total >= 5000:
        return 250
    if total >= 1000:
        return 200
    if total >= 200:
        return 100
    return 50


@dataclass
class GenerationRequest:
    count: int
    collection_id: str
    constraints: object = NO_CONSTRAINTS
    seed: str = None
    batch_serial: int = 0
    first_slot: int = 0
    release_keys: tuple = ()
    superstition_mode: bool = False


class BatchStatus(str, Enum):
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    FAILED = "failed"


@dataclass
class BatchOutcome:
    status: BatchStatus
    total: int
    done: int = 0
    combinations: list = field(default_factory=list)
    error_kind: object = None
    message: str = None

    @property
    def ok(self):
        return self.status == BatchStatus.COMPLETED


class CancelToken:
    """Cooperative cancellation flag, read only at chunk boundaries."""

    def __init__(self):
        self._cancelled = False

    def cancel(self):
        self._cancelled = True

    @property
    def cancelled(self):
        return self._cancelled


class _Batch:
    def __init__(self, scheduler, request):
        self.scheduler = scheduler
        self.request = request
        self.total = max(0, int(request.count))
        self.done = 0
        self.produced = []
        self.staged = scheduler.ledger.copy()
        self.staged.release(request.release_keys)
        self.created_base = datetime.now(timezone.utc)

        if request.seed is not None:
            self.factory = seeded_factory(request.seed, request.collection_id, request.batch_serial)
        else:
            self.factory = unseeded_factory()

    def chunks(self):
        check_constraints(self.request.constraints)
        size = chunk_size_for(self.total)
        limits = self.scheduler.limits
        n_chunks = (self.total + size - 1) // size

        for chunk_idx in range(n_chunks):
            take = min(size, self.total - self.done)
            chunk = self.staged.allocate(
                take,
                self.factory,
                self.request.constraints,
                limits,
                first_slot=self.request.first_slot + self.done,
                seed=self.request.seed,
                superstition_mode=self.request.superstition_mode,
                created_base=self.created_base + timedelta(milliseconds=self.done),
            )
            self.produced.extend(chunk)
            self.done += len(chunk)

            if self.scheduler.verbose:
                print(f"  [Scheduler] chunk {chunk_idx + 1}/{n_chunks}: "
                      f"{self.done:,}/{self.total:,}")
            yield self.done, self.total

    def commit(self, on_commit=None, progress=None):
        """Publish the staged batch; the final (total, total) progress call comes only after it lands."""
        ledger = self.scheduler.ledger
        release = [k for k in self.request.release_keys if k in ledger]
        ledger.release(release)
        try:
            ledger.reserve(c.key for c in self.produced)
        except SestineError:
            ledger.reserve(release)
            raise
        if on_commit is not None:
            on_commit(self.produced)
        if progress is not None and self.total:
            progress(self.done, self.total)
        if self.scheduler.verbose:
            print(f"  [Scheduler] committed {len(self.produced):,} sestine "
                  f"(ledger size {len(ledger):,})")
        return BatchOutcome(BatchStatus.COMPLETED, self.total, self.done, list(self.produced))

    def cancelled(self):
        if self.scheduler.verbose:
            print(f"  [Scheduler] cancelled at {self.done:,}/{self.total:,}; nothing committed")
        return BatchOutcome(BatchStatus.CANCELLED, self.total, self.done)

    def failed(self, err):
        if self.scheduler.verbose:
            print(f"  [Scheduler] failed at {self.done:,}/{self.total:,}: {err.message}")
        return BatchOutcome(BatchStatus.FAILED, self.total, self.done,
                            error_kind=err.kind, message=err.message)


class BatchScheduler:
    """
    Runs generation batches against one shared Ledger.

    Parameters
    ----------
    ledger : Ledger
        The cross-group ledger; only touched at commit time.
    limits : GenerationLimits
    verbose : bool
        Print per-chunk progress.
    """

    def __init__(self, ledger, limits=DEFAULT_LIMITS, verbose=False):
        self.ledger = ledger
        self.limits = limits
        self.verbose = verbose

    def iter_chunks(self, request):
        """Expose the raw chunk loop: yields (done, total) after each chunk."""
        return _Batch(self, request).chunks()

    async def run(self, request, progress=None, cancel=None, on_commit=None):
        """
        Generate a batch, yielding to the event loop between chunks.

        Returns a BatchOutcome; engine errors are reported through
        ``error_kind`` rather than raised.
        """
        batch = _Batch(self, request)
        try:
            if cancel is not None and cancel.cancelled:
                return batch.cancelled()
            for done, total in batch.chunks():
                if done < total:
                    if progress is not None:
                        progress(done, total)
                    await asyncio.sleep(0)
                    if cancel is not None and cancel.cancelled:
                        return batch.cancelled()
            return batch.commit(on_commit, progress)
        except SestineError as err:
            return batch.failed(err)

    def run_sync(self, request, progress=None, cancel=None, on_commit=None):
        """Same contract as run(), for callers without an event loop."""
        batch = _Batch(self, request)
        try:
            if cancel is not None and cancel.cancelled:
                return batch.cancelled()
            for done, total in batch.chunks():
                if done < total:
                    if progress is not None:
                        progress(done, total)
                    if cancel is not None and cancel.cancelled:
                        return batch.cancelled()
            return batch.commit(on_commit, progress)
        except SestineError as err:
            return batch.failed(err)
