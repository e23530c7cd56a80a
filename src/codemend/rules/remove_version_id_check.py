"""
Remove version-id guards that are statically decided by the target version.

    if PY_VERSION_ID < 30800:
        return
    print("do something")

becomes ``print("do something")`` once the project targets 3.8 or newer.
"""

from __future__ import annotations

import ast
from enum import Enum
from typing import Any, Dict, Mapping, Optional, Tuple, Type

from ..node_types import CodeSample, RuleDefinition
from ..version import ProjectVersionProvider, VersionToken, create_int_version
from .abstract_rule import AbstractRule


class GuardAction(Enum):
    REMOVE = "remove"
    HOIST = "hoist"


# (comparison operator, side the constant sits on) -> edit applied when target <= literal
_ACTIONS: Dict[Tuple[Type[ast.cmpop], str], GuardAction] = {
    (ast.Lt, "left"): GuardAction.REMOVE,
    (ast.Lt, "right"): GuardAction.HOIST,
    (ast.GtE, "left"): GuardAction.HOIST,
    (ast.GtE, "right"): GuardAction.REMOVE,
}


class RemoveVersionIdCheckRule(AbstractRule):
    name = "remove_version_id_check"

    TARGET_VERSION = "target_version"
    CONSTANT_NAME = "constant_name"
    DEFAULT_CONSTANT = "PY_VERSION_ID"

    def __init__(self, version_provider: Optional[Any] = None) -> None:
        super().__init__()
        self.version_provider = version_provider or ProjectVersionProvider()
        self.constant_name: str = self.DEFAULT_CONSTANT
        self.target_version: Optional[int] = None
        self._ambient_version: Optional[VersionToken] = None

    def configure(self, configuration: Mapping[str, Any]) -> None:
        self.constant_name = str(configuration.get(self.CONSTANT_NAME) or self.DEFAULT_CONSTANT)
        raw = configuration.get(self.TARGET_VERSION)
        if raw is None:
            raw = self._provide_ambient_version()
        self.target_version = create_int_version(raw)

    def _provide_ambient_version(self) -> VersionToken:
        if self._ambient_version is None:
            self._ambient_version = self.version_provider.provide()
        return self._ambient_version

    def get_rule_definition(self) -> RuleDefinition:
        return RuleDefinition(
            "Remove version id checks made redundant by the target version",
            [
                CodeSample(
                    "def run():\n"
                    "    if PY_VERSION_ID < 30800:\n"
                    "        return\n"
                    "    print('do something')\n",
                    "def run():\n"
                    "    print('do something')\n",
                    {self.TARGET_VERSION: "3.8"},
                )
            ],
        )

    def get_node_types(self) -> Tuple[Type[ast.AST], ...]:
        return (ast.Name, ast.Attribute)

    def refactor(self, node: ast.AST) -> Optional[ast.AST]:
        if not self.is_name(node, self.constant_name):
            return None
        if self.target_version is None:
            self.configure({self.CONSTANT_NAME: self.constant_name})

        tree = self._require_context().tree
        if_node = tree.find_parent_of_type(node, ast.If)
        parent = tree.parent_of(node)
        if self._should_skip(if_node, parent):
            return None

        if parent.left is node:
            side, other = "left", parent.comparators[0]
        elif parent.comparators[0] is node:
            side, other = "right", parent.left
        else:
            return None

        action = _ACTIONS.get((type(parent.ops[0]), side))
        if action is None:
            return None
        if not _is_int_literal(other):
            return None

        if self.target_version <= other.value:
            if action is GuardAction.HOIST:
                self.add_nodes_before_node(if_node.body, if_node)
            self.remove_node(if_node)
        return node

    def _should_skip(self, if_node: Optional[ast.AST], parent: Optional[ast.AST]) -> bool:
        if not isinstance(if_node, ast.If):
            return True
        if not isinstance(parent, ast.Compare) or len(parent.ops) != 1:
            return True
        if if_node.test is not parent:
            return True
        # an else/elif branch would be lost by either edit
        return bool(if_node.orelse)


def _is_int_literal(node: ast.AST) -> bool:
    return isinstance(node, ast.Constant) and type(node.value) is int

