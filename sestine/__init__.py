"""
SuperEnalotto Sestine

Generates globally unique 6-of-90 sestine under user constraints,
reproducibly from a seed, in chunked cancellable batches, and checks
them against a draw with exact hypergeometric odds.

Submodules:
- constraints: constraint rules and superstition mode
- engine: rng, sampler, ledger, scheduler
- probability: exact match odds and best-of-k distribution
- draws: draw validation, prize tiers, payout estimate
- groups: groups and the workspace that owns the ledger
- analysis: frequency and hit-count statistics
- storage, exporters: JSON snapshot, CSV/TXT/JSON export
"""
