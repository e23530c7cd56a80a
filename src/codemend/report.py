"""
Run reporting - console summary and the JSON report written to the output directory.
"""
from __future__ import annotations

import json
from pathlib import Path

from .node_types import ProcessResult


def print_summary(result: ProcessResult, show_diffs: bool = False) -> None:
    for change in result.files:
        if change.error is not None:
            print(f"❌ {change.path}: {change.error}")
        elif change.changed:
            print(f"✏️  {change.path}  [{', '.join(change.applied_rules)}]")
            if show_diffs:
                print(change.diff, end="")

    changed = len(result.changed_files)
    verb = "would change" if result.dry_run else "changed"
    print("━" * 50)
    print(f"📊 {len(result.files)} files processed, {changed} {verb}, {len(result.errors)} errors")


def save_report(result: ProcessResult, output_dir: Path) -> Path:
    output_dir.mkdir(parents=True, exist_ok=True)
    out = output_dir / "report.json"
    out.write_text(json.dumps(result.to_dict(), ensure_ascii=False, indent=2), encoding="utf-8")
    return out
