"""
Host syntax tree - parent lookups and deferred statement edits over a parsed module.

Nodes live in an arena addressed by stable integer indices. The parent relation is a
lookup table (child index -> parent index) rather than an attribute stored on the
child, and removals/insertions requested by rules are queued and applied once the
traversal is over.
"""
from __future__ import annotations

import ast
from typing import Dict, Iterator, List, Optional, Sequence, Set, Tuple, Type, Union

# statement blocks that must hold at least one statement
_NON_EMPTY_BODIES: Tuple[Type[ast.AST], ...] = (
    ast.FunctionDef,
    ast.AsyncFunctionDef,
    ast.ClassDef,
    ast.If,
    ast.For,
    ast.AsyncFor,
    ast.While,
    ast.With,
    ast.AsyncWith,
    ast.Try,
    ast.ExceptHandler,
) + tuple(getattr(ast, name) for name in ("TryStar", "match_case") if hasattr(ast, name))
_TRY_NODES: Tuple[Type[ast.AST], ...] = (ast.Try,) + ((ast.TryStar,) if hasattr(ast, "TryStar") else ())

NodeKinds = Union[Type[ast.AST], Tuple[Type[ast.AST], ...]]


class SyntaxTree:
    """Arena view over one parsed module."""

    def __init__(self, module: ast.Module):
        self.module = module
        self.nodes: List[ast.AST] = []
        self._index: Dict[int, int] = {}
        self._parents: Dict[int, int] = {}
        self._removed: Set[int] = set()
        self._insert_before: Dict[int, List[ast.stmt]] = {}
        self._build()

    @classmethod
    def parse(cls, source: str, filename: str = "<unknown>") -> "SyntaxTree":
        return cls(ast.parse(source, filename=filename))

    def _build(self) -> None:
        self._register(self.module)
        # ast.walk is breadth-first, so every parent is registered before its children
        for node in ast.walk(self.module):
            parent_idx = self._index[id(node)]
            for child in ast.iter_child_nodes(node):
                child_idx = self._register(child)
                self._parents[child_idx] = parent_idx

    def _register(self, node: ast.AST) -> int:
        idx = self._index.get(id(node))
        if idx is None:
            idx = len(self.nodes)
            self.nodes.append(node)
            self._index[id(node)] = idx
        return idx

    # --- lookups ---
    def index_of(self, node: ast.AST) -> Optional[int]:
        return self._index.get(id(node))

    def parent_of(self, node: ast.AST) -> Optional[ast.AST]:
        idx = self.index_of(node)
        if idx is None:
            return None
        parent_idx = self._parents.get(idx)
        return self.nodes[parent_idx] if parent_idx is not None else None

    def find_parent_of_type(self, node: ast.AST, kinds: NodeKinds) -> Optional[ast.AST]:
        """Nearest ancestor of ``node`` that is an instance of ``kinds``."""
        parent = self.parent_of(node)
        while parent is not None:
            if isinstance(parent, kinds):
                return parent
            parent = self.parent_of(parent)
        return None

    def walk(self) -> Iterator[ast.AST]:
        """Pre-order traversal in source order."""
        stack: List[ast.AST] = [self.module]
        while stack:
            node = stack.pop()
            yield node
            stack.extend(reversed(list(ast.iter_child_nodes(node))))

    # --- deferred edits ---
    def remove_node(self, node: ast.stmt) -> None:
        self._ensure_statement(node)
        self._removed.add(id(node))

    def insert_nodes_before(self, nodes: Sequence[ast.stmt], anchor: ast.stmt) -> None:
        self._ensure_statement(anchor)
        self._insert_before.setdefault(id(anchor), []).extend(nodes)

    def is_removed(self, node: ast.AST) -> bool:
        return id(node) in self._removed

    @property
    def has_pending_edits(self) -> bool:
        return bool(self._removed or self._insert_before)

    def _ensure_statement(self, node: ast.AST) -> None:
        if not isinstance(node, ast.stmt):
            raise TypeError(f"Only statements can be removed or used as anchors, got {type(node).__name__}")
        if self.index_of(node) is None:
            raise ValueError("Node does not belong to this tree")

    def apply_pending_edits(self) -> bool:
        """Apply queued edits to the module. Returns True if anything was applied."""
        if not self.has_pending_edits:
            return False
        _EditApplier(self._removed, self._insert_before).visit(self.module)
        _fill_empty_bodies(self.module)
        ast.fix_missing_locations(self.module)
        self._removed = set()
        self._insert_before = {}
        return True

    def to_source(self) -> str:
        return ast.unparse(self.module) + "\n"


class _EditApplier(ast.NodeTransformer):
    def __init__(self, removed: Set[int], insert_before: Dict[int, List[ast.stmt]]):
        self.removed = removed
        self.insert_before = insert_before

    def visit(self, node: ast.AST):  # type: ignore[override]
        inserted: List[ast.AST] = []
        for stmt in self.insert_before.get(id(node), []):
            # hoisted statements may carry pending edits of their own
            result = self.visit(stmt)
            if result is None:
                continue
            if isinstance(result, list):
                inserted.extend(result)
            else:
                inserted.append(result)

        if id(node) in self.removed:
            return inserted or None

        self.generic_visit(node)
        if inserted:
            return [*inserted, node]
        return node


def _fill_empty_bodies(module: ast.Module) -> None:
    for node in ast.walk(module):
        if isinstance(node, _NON_EMPTY_BODIES) and not node.body:
            node.body = [ast.Pass()]
        # a try needs an except or a finally block
        if isinstance(node, _TRY_NODES) and not node.handlers and not node.finalbody:
            node.finalbody = [ast.Pass()]
