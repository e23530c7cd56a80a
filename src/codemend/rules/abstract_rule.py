"""
Rule contract - every rewrite rule visits nodes of some types and returns an edit or None.
"""

from __future__ import annotations

import ast
from typing import Any, List, Mapping, Optional, Sequence, Tuple, Type

from ..node_types import FileContext, RuleDefinition


class AbstractRule:
    """Base class for rewrite rules.

    The engine binds a rule to one file with :meth:`begin_file`, then calls
    :meth:`refactor` for every node whose type is listed in :meth:`get_node_types`.
    ``refactor`` returns the (possibly mutated) node to keep it, or ``None`` when the
    rule does not apply. Statement removal and insertion go through the helpers below
    and are applied by the host tree after the traversal.
    """

    name: str = "abstract"

    def __init__(self) -> None:
        self.context: Optional[FileContext] = None
        self.changes: int = 0

    def get_rule_definition(self) -> RuleDefinition:
        raise NotImplementedError("get_rule_definition() must be implemented")

    def get_node_types(self) -> Tuple[Type[ast.AST], ...]:
        raise NotImplementedError("get_node_types() must be implemented")

    def refactor(self, node: ast.AST) -> Optional[ast.AST]:
        raise NotImplementedError("refactor() must be implemented")

    def configure(self, configuration: Mapping[str, Any]) -> None:
        """Accept rule options; rules without options ignore them."""

    def begin_file(self, context: FileContext) -> None:
        self.context = context
        self.changes = 0

    # --- helpers ---
    def is_name(self, node: ast.AST, name: str) -> bool:
        return dotted_name(node) == name

    def remove_node(self, node: ast.stmt) -> None:
        self._require_context().tree.remove_node(node)
        self.changes += 1

    def add_nodes_before_node(self, nodes: Sequence[ast.stmt], anchor: ast.stmt) -> None:
        self._require_context().tree.insert_nodes_before(nodes, anchor)
        self.changes += 1

    def _require_context(self) -> FileContext:
        if self.context is None:
            raise RuntimeError(f"Rule {self.name} used outside of a file traversal")
        return self.context


def dotted_name(node: ast.AST) -> Optional[str]:
    """``foo`` for Name, ``pkg.mod.foo`` for an Attribute chain of Names, else None."""
    parts: List[str] = []
    while isinstance(node, ast.Attribute):
        parts.append(node.attr)
        node = node.value
    if not isinstance(node, ast.Name):
        return None
    parts.append(node.id)
    return ".".join(reversed(parts))
