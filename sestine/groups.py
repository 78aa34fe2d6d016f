"""
Groups of sestine and the workspace that owns them

A Workspace holds every group, the user settings and the single Ledger
shared by all groups. Generation and regeneration go through the batch
scheduler; the group is only touched in the scheduler's commit step, so a
cancelled or failed batch leaves groups and ledger exactly as they were.
"""
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone

from sestine.constraints import build_constraints
from sestine.draws import DEFAULT_JACKPOT, validate_draw
from sestine.engine.ledger import Ledger
from sestine.engine.sampler import DEFAULT_LIMITS
from sestine.engine.scheduler import BatchScheduler, GenerationRequest


def _now_iso():
    return datetime.now(timezone.utc).isoformat()


def new_id(prefix="group"):
    return f"{prefix}_{uuid.uuid4()}"


@dataclass
class Settings:
    seed_enabled: bool = False
    seed_value: str = "PASQUA2026"

    exclude: list = field(default_factory=list)
    must_include: list = field(default_factory=list)
    must_include_any_of: list = field(default_factory=list)

    superstition_enabled: bool = False
    lucky_numbers: list = field(default_factory=list)
    unlucky_numbers: list = field(default_factory=list)
    birth_date: str = None

    show_odds_banner: bool = True

    @property
    def seed(self):
        """Active seed string, or None when seeding is off."""
        return self.seed_value.strip() if self.seed_enabled else None


@dataclass
class Group:
    id: str
    name: str
    created_at: str = field(default_factory=_now_iso)
    combinations: list = field(default_factory=list)
    events: list = field(default_factory=list)

    @property
    def keys(self):
        return [c.key for c in self.combinations]

    @property
    def batch_serial(self):
        """Number of generate batches committed so far."""
        return sum(1 for ev in self.events if ev.get("type") == "generate")

    def find(self, key):
        for combo in self.combinations:
            if combo.key == key:
                return combo
        raise KeyError(key)


class Workspace:
    """
    All groups plus settings and the shared ledger.

    Parameters
    ----------
    groups : list of Group, newest first
    settings : Settings
    limits : GenerationLimits
    verbose : bool
        Forwarded to the batch scheduler.
    """

    def __init__(self, groups=None, settings=None, limits=DEFAULT_LIMITS, verbose=False):
        self.groups = list(groups or [])
        self.settings = settings or Settings()
        self.ledger = Ledger(k for g in self.groups for k in g.keys)
        self.scheduler = BatchScheduler(self.ledger, limits=limits, verbose=verbose)

    # ── Lookup ───────────────────────────────────────────────────────────

    def group(self, group_id):
        for g in self.groups:
            if g.id == group_id:
                return g
        raise KeyError(f"Unknown group {group_id!r}")

    @property
    def total_combinations(self):
        return sum(len(g.combinations) for g in self.groups)

    def constraints(self):
        return build_constraints(self.settings)

    # ── Group management ─────────────────────────────────────────────────

    def add_group(self, name=None):
        name = (name or "").strip() or f"Group {len(self.groups) + 1}"
        g = Group(id=new_id("group"), name=name)
        self.groups.insert(0, g)
        return g

    def rename_group(self, group_id, name):
        name = name.strip()
        if name:
            self.group(group_id).name = name

    def delete_group(self, group_id):
        g = self.group(group_id)
        self.ledger.release(g.keys)
        self.groups.remove(g)

    def clear_group(self, group_id):
        g = self.group(group_id)
        self.ledger.release(g.keys)
        g.combinations = []

    def toggle_freeze(self, group_id, key):
        combo = self.group(group_id).find(key)
        combo.frozen = not combo.frozen
        return combo.frozen

    def remove_combination(self, group_id, key):
        g = self.group(group_id)
        combo = g.find(key)
        g.combinations.remove(combo)
        self.ledger.release([key])

    # ── Generation ───────────────────────────────────────────────────────

    def _generate_request(self, g, count):
        return GenerationRequest(
            count=max(1, int(count)),
            collection_id=g.id,
            constraints=self.constraints(),
            seed=self.settings.seed,
            batch_serial=g.batch_serial,
            first_slot=len(g.combinations),
            superstition_mode=self.settings.superstition_enabled,
        )

    def _regenerate_request(self, g):
        unfrozen = [c for c in g.combinations if not c.frozen]
        return GenerationRequest(
            count=len(unfrozen),
            collection_id=f"{g.id}::regen",
            constraints=self.constraints(),
            seed=self.settings.seed,
            batch_serial=g.batch_serial,
            first_slot=0,
            release_keys=tuple(c.key for c in unfrozen),
            superstition_mode=self.settings.superstition_enabled,
        )

    def _generate_event(self, request):
        return {
            "type": "generate",
            "at": _now_iso(),
            "count": request.count,
            "seed": request.seed,
            "constraints_snapshot": request.constraints.to_dict(),
        }

    def _commit_generated(self, g, request):
        def apply(produced):
            g.combinations = list(produced) + g.combinations
            g.events.insert(0, self._generate_event(request))
        return apply

    def _commit_regenerated(self, g, request):
        def apply(produced):
            frozen = [c for c in g.combinations if c.frozen]
            g.combinations = frozen + list(produced)
            g.events.insert(0, self._generate_event(request))
        return apply

    async def generate(self, group_id, count, progress=None, cancel=None):
        """Add `count` new sestine to the front of a group. Returns a BatchOutcome."""
        g = self.group(group_id)
        request = self._generate_request(g, count)
        return await self.scheduler.run(
            request, progress=progress, cancel=cancel,
            on_commit=self._commit_generated(g, request),
        )

    def generate_sync(self, group_id, count, progress=None, cancel=None):
        g = self.group(group_id)
        request = self._generate_request(g, count)
        return self.scheduler.run_sync(
            request, progress=progress, cancel=cancel,
            on_commit=self._commit_generated(g, request),
        )

    async def regenerate_unfrozen(self, group_id, progress=None, cancel=None):
        """
        Replace every unfrozen sestina of a group.

        The keys being replaced are released before sampling, so a
        replacement may legitimately reuse one of them. Returns None when
        the group has nothing to regenerate.
        """
        g = self.group(group_id)
        request = self._regenerate_request(g)
        if request.count <= 0:
            return None
        return await self.scheduler.run(
            request, progress=progress, cancel=cancel,
            on_commit=self._commit_regenerated(g, request),
        )

    def regenerate_unfrozen_sync(self, group_id, progress=None, cancel=None):
        g = self.group(group_id)
        request = self._regenerate_request(g)
        if request.count <= 0:
            return None
        return self.scheduler.run_sync(
            request, progress=progress, cancel=cancel,
            on_commit=self._commit_regenerated(g, request),
        )

    # ── Validation ───────────────────────────────────────────────────────

    def validate(self, group_id, draw, jolly=None, superstar=None, jackpot=DEFAULT_JACKPOT):
        """Check a group against a draw and record a validate event."""
        g = self.group(group_id)
        result = validate_draw(g.combinations, draw, jolly, superstar, jackpot=jackpot)
        result["at"] = _now_iso()
        result["group_id"] = g.id
        result["group_name"] = g.name
        g.events.insert(0, {
            "type": "validate",
            "at": result["at"],
            "draw": result["draw"],
            "jolly": result["jolly"],
            "superstar": result["superstar"],
        })
        return result
