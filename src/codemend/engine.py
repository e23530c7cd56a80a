"""
Refactoring engine - parse modules, dispatch nodes to rules, apply edits and render.

One file is processed at a time: a fresh SyntaxTree and CallReflectionResolver are
built for it, every rule is bound to that file, and nodes are visited in pre-order.
"""
from __future__ import annotations

from pathlib import Path
from typing import Dict, List, Optional, Tuple, Type

import ast

from .file_collector import collect_py_files
from .node_types import FileChange, FileContext, ProcessResult, display_path
from .reflection import CallReflectionResolver
from .rules.abstract_rule import AbstractRule
from .syntax_tree import SyntaxTree


class RefactorEngine:
    def __init__(self, rules: List[AbstractRule]):
        self.rules = rules
        self._dispatch: Dict[Type[ast.AST], List[AbstractRule]] = {}
        for rule in rules:
            for node_type in rule.get_node_types():
                self._dispatch.setdefault(node_type, []).append(rule)

    def process_source(self, source: str, path: str = "<string>") -> FileChange:
        try:
            tree = SyntaxTree.parse(source, filename=path)
        except SyntaxError as e:
            return FileChange(path=path, original=source, refactored=source, error=f"SyntaxError: {e}")

        context = FileContext(path=path, tree=tree, resolver=CallReflectionResolver(tree))
        for rule in self.rules:
            rule.begin_file(context)

        for node in list(tree.walk()):
            for rule in self._dispatch.get(type(node), []):
                rule.refactor(node)

        applied = [rule.name for rule in self.rules if rule.changes]
        if not applied:
            return FileChange(path=path, original=source, refactored=source)

        tree.apply_pending_edits()
        return FileChange(path=path, original=source, refactored=tree.to_source(), applied_rules=applied)

    def process_file(self, file_path: Path, dry_run: bool = False) -> FileChange:
        shown = display_path(file_path)
        try:
            source = Path(file_path).read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            return FileChange(path=shown, original="", refactored="", error=f"{type(e).__name__}: {e}")

        change = self.process_source(source, shown)
        if change.changed and not dry_run:
            Path(file_path).write_text(change.refactored, encoding="utf-8")
        return change

    def process_paths(
        self,
        paths: List[str],
        include: Optional[List[str]] = None,
        exclude: Optional[List[str]] = None,
        dry_run: bool = False,
    ) -> ProcessResult:
        result = ProcessResult(dry_run=dry_run)
        for file_path in collect_py_files(paths, include or [], exclude or []):
            result.files.append(self.process_file(file_path, dry_run=dry_run))
        return result


def refactor_source(source: str, rules: List[AbstractRule]) -> Tuple[str, List[str]]:
    """Convenience wrapper: return (new_source, applied_rule_names)."""
    change = RefactorEngine(rules).process_source(source)
    if change.error:
        raise SyntaxError(change.error)
    return change.refactored, change.applied_rules
