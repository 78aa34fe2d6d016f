"""
Sestine generation engine

Modules, leaves first:
- rng: seeded / entropy-bootstrapped Mulberry32 float streams
- sampler: one constraint-satisfying sestina by bounded rejection sampling
- ledger: cross-group key ledger with nonce-driven collision retry
- scheduler: chunked, cancellable, all-or-nothing batches over the ledger
"""

from . import rng
from . import sampler
from . import ledger
from . import scheduler

__all__ = [
    "rng",
    "sampler",
    "ledger",
    "scheduler",
]
