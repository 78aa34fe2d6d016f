"""
Workspace persistence

Round-trips the whole workspace (groups, sestine, events, settings) through
a versioned JSON snapshot. A missing, unreadable, foreign-version or inconsistent
file loads as the default empty workspace.
"""
import json
import os
import warnings
from dataclasses import asdict, fields

from sestine.combination import Combination
from sestine.errors import SestineError
from sestine.groups import Group, Settings, Workspace

DATA_DIR = os.path.join(os.path.dirname(os.path.dirname(__file__)), "data")
STATE_PATH = os.path.join(DATA_DIR, "sestine_state.json")
STATE_VERSION = 2


def default_state(**kwargs):
    return Workspace(**kwargs)


def to_snapshot(workspace):
    """Plain-dict snapshot of a workspace, JSON-serialisable."""
    return {
        "version": STATE_VERSION,
        "groups": [
            {
                "id": g.id,
                "name": g.name,
                "created_at": g.created_at,
                "sestine": [c.to_dict() for c in g.combinations],
                "events": list(g.events),
            }
            for g in workspace.groups
        ],
        "settings": asdict(workspace.settings),
    }


def _settings_from_dict(data):
    known = {f.name for f in fields(Settings)}
    return Settings(**{k: v for k, v in (data or {}).items() if k in known})


def from_snapshot(data, **kwargs):
    """
    Rebuild a workspace from to_snapshot() output.

    Raises DuplicateKeyError if the same sestina appears twice across groups
    and InvalidCombination for a stored entry that is not a valid sestina.
    """
    groups = [
        Group(
            id=g["id"],
            name=g["name"],
            created_at=g["created_at"],
            combinations=[Combination.from_dict(s) for s in g.get("sestine", [])],
            events=list(g.get("events", [])),
        )
        for g in data.get("groups", [])
    ]
    return Workspace(groups, _settings_from_dict(data.get("settings")), **kwargs)


def save_state(workspace, path=STATE_PATH):
    os.makedirs(os.path.dirname(path) or ".", exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(to_snapshot(workspace), f, indent=2)
    print(f"[Storage] Saved {len(workspace.groups)} group(s), "
          f"{workspace.total_combinations:,} sestine to {path}")


def load_state(path=STATE_PATH, **kwargs):
    if not os.path.exists(path):
        return default_state(**kwargs)
    try:
        with open(path, encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        print(f"[Storage] Could not read {path}: {e}")
        return default_state(**kwargs)

    if not isinstance(data, dict) or data.get("version") != STATE_VERSION:
        warnings.warn(f"Ignoring state file {path}: unsupported version.")
        return default_state(**kwargs)

    try:
        workspace = from_snapshot(data, **kwargs)
    except (KeyError, TypeError, ValueError, AttributeError, SestineError) as e:
        warnings.warn(f"Ignoring state file {path}: bad content ({e!r}).")
        return default_state(**kwargs)

    print(f"[Storage] Loaded {len(workspace.groups)} group(s), "
          f"{workspace.total_combinations:,} sestine from {path}")
    return workspace
