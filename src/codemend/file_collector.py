"""
Collect Python source files under the configured paths.
"""
from __future__ import annotations

import fnmatch
import os
from pathlib import Path
from typing import List


def _matches(rel: str, patterns: List[str]) -> bool:
    # "**/x/**" should also match a top-level "x/..." path
    return any(fnmatch.fnmatch(rel, pat) or fnmatch.fnmatch("./" + rel, pat) for pat in patterns)


def collect_py_files(paths: List[str], include: List[str], exclude: List[str]) -> List[Path]:
    collected: List[Path] = []
    seen = set()
    for root in paths:
        base = Path(root)
        if base.is_file():
            if base.suffix == ".py" and base.resolve() not in seen:
                seen.add(base.resolve())
                collected.append(base)
            continue
        if not base.exists():
            continue
        for dirpath, dirnames, filenames in os.walk(base):
            # prune excluded dirs
            for d in list(dirnames):
                rel = (Path(dirpath) / d).relative_to(base).as_posix()
                if _matches(rel + "/", exclude) or _matches(rel, exclude):
                    dirnames.remove(d)
            dirnames.sort()
            for fn in sorted(filenames):
                if not fn.endswith(".py"):
                    continue
                f_path = Path(dirpath) / fn
                rel = f_path.relative_to(base).as_posix()
                if _matches(rel, exclude):
                    continue
                if include and not _matches(rel, include):
                    continue
                if f_path.resolve() in seen:
                    continue
                seen.add(f_path.resolve())
                collected.append(f_path)
    return collected
