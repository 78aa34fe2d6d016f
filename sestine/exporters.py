"""
Export of groups and sestine to CSV, TXT and JSON.

export_rows() is the field contract every format is built from: one row
per sestina, in group order then position order.
"""
import json
from datetime import datetime

import pandas as pd

from sestine.storage import to_snapshot

CSV_COLUMNS = [
    "group_id", "group_name", "group_created_at",
    "index_in_group", "sestina_key",
    "n1", "n2", "n3", "n4", "n5", "n6",
    "frozen", "created_at", "seed", "attempt_nonce", "superstition_mode",
]


def export_rows(workspace):
    """Yield one flat dict per sestina; index_in_group starts at 1."""
    for g in workspace.groups:
        for idx, combo in enumerate(g.combinations, start=1):
            row = {
                "group_id": g.id,
                "group_name": g.name,
                "group_created_at": g.created_at,
                "index_in_group": idx,
                "sestina_key": combo.key,
            }
            for i, n in enumerate(combo.numbers, start=1):
                row[f"n{i}"] = n
            row.update({
                "frozen": combo.frozen,
                "created_at": combo.created_at,
                "seed": combo.seed or "",
                "attempt_nonce": "" if combo.attempt_nonce is None else combo.attempt_nonce,
                "superstition_mode": bool(combo.superstition_mode),
            })
            yield row


def to_frame(workspace):
    return pd.DataFrame(list(export_rows(workspace)), columns=CSV_COLUMNS)


def to_csv(workspace, path=None):
    """CSV text (and file, when `path` is given)."""
    df = to_frame(workspace)
    text = df.to_csv(index=False, lineterminator="\n")
    if path is not None:
        with open(path, "w", encoding="utf-8") as f:
            f.write(text)
    return text


def to_txt(workspace, now=None):
    now = now or datetime.now()
    lines = [
        "SuperEnalotto - Sestine",
        f"Export: {now.strftime('%Y-%m-%d %H:%M:%S')}",
        "",
    ]
    for g in workspace.groups:
        lines.append(f"Group: {g.name} ({len(g.combinations)})")
        for i, combo in enumerate(g.combinations, start=1):
            lines.append(f"{i}) {' '.join(str(n) for n in combo.numbers)}")
        lines.append("")
    return "\n".join(lines)


def to_json(workspace):
    return json.dumps(to_snapshot(workspace), indent=2)
