"""
Shared data types - rule definitions, per-file contexts and processing results.
"""

from __future__ import annotations

import difflib
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Any, Dict, List, Optional

if TYPE_CHECKING:
    from .reflection import CallReflectionResolver
    from .syntax_tree import SyntaxTree


@dataclass
class CodeSample:
    before: str
    after: str
    configuration: Dict[str, Any] = field(default_factory=dict)


@dataclass
class RuleDefinition:
    description: str
    samples: List[CodeSample] = field(default_factory=list)


@dataclass
class FileContext:
    """Everything a rule may look at while one file is being traversed."""
    path: str
    tree: "SyntaxTree"
    resolver: "CallReflectionResolver"


@dataclass
class FileChange:
    path: str
    original: str
    refactored: str
    applied_rules: List[str] = field(default_factory=list)
    error: Optional[str] = None

    @property
    def changed(self) -> bool:
        return self.error is None and self.original != self.refactored

    @property
    def diff(self) -> str:
        if not self.changed:
            return ""
        return "".join(
            difflib.unified_diff(
                self.original.splitlines(keepends=True),
                self.refactored.splitlines(keepends=True),
                fromfile=f"a/{self.path}",
                tofile=f"b/{self.path}",
            )
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "path": self.path,
            "changed": self.changed,
            "applied_rules": list(self.applied_rules),
            "error": self.error,
        }


@dataclass
class ProcessResult:
    files: List[FileChange] = field(default_factory=list)
    dry_run: bool = False

    @property
    def changed_files(self) -> List[FileChange]:
        return [f for f in self.files if f.changed]

    @property
    def errors(self) -> List[FileChange]:
        return [f for f in self.files if f.error is not None]

    def to_dict(self) -> Dict[str, Any]:
        rule_counts: Dict[str, int] = {}
        for f in self.changed_files:
            for rule in f.applied_rules:
                rule_counts[rule] = rule_counts.get(rule, 0) + 1
        return {
            "summary": {
                "total_files": len(self.files),
                "changed_files": len(self.changed_files),
                "errors": len(self.errors),
                "dry_run": self.dry_run,
                "rules": rule_counts,
            },
            "files": [f.to_dict() for f in self.files if f.changed or f.error is not None],
        }


def display_path(path: Path, base: Optional[Path] = None) -> str:
    base = base or Path.cwd()
    try:
        return str(path.resolve().relative_to(base.resolve()))
    except ValueError:
        return str(path)
