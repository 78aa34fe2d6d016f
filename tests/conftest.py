"""Shared fixtures: small workspaces and constraint sets, no IO."""

import pytest

from sestine.constraints import Constraints
from sestine.engine.sampler import GenerationLimits
from sestine.groups import Group, Settings, Workspace


@pytest.fixture
def seeded_workspace():
    """Workspace with one fixed-id group and seeding on, so output is reproducible."""
    settings = Settings(seed_enabled=True, seed_value="PASQUA2026")
    return Workspace(groups=[Group(id="group_fixed", name="Fixed")], settings=settings)


@pytest.fixture
def only_one_sestina():
    """Constraints that leave exactly one possible sestina: 85-90."""
    return Constraints.build(exclude=range(1, 85))


@pytest.fixture
def tight_limits():
    return GenerationLimits(max_fill_draws=2_000, max_resamples=20, max_nonce=25)
