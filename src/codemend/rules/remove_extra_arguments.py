"""
Remove positional call arguments the callee can never accept.

Calling ``len("asdf", 1)`` raises TypeError at runtime; the rule rewrites it to
``len("asdf")``. Only calls whose every signature variant is known are touched.
"""

from __future__ import annotations

import ast
from typing import List, Optional, Tuple, Type

from ..node_types import CodeSample, RuleDefinition
from ..reflection import CallKind, UnionTypeMethodReflection, Variant, is_super_call
from .abstract_rule import AbstractRule


class RemoveExtraArgumentsRule(AbstractRule):
    name = "remove_extra_arguments"

    def get_rule_definition(self) -> RuleDefinition:
        return RuleDefinition(
            "Remove extra positional arguments",
            [CodeSample('len("asdf", 1)\n', 'len("asdf")\n')],
        )

    def get_node_types(self) -> Tuple[Type[ast.AST], ...]:
        return (ast.Call,)

    def refactor(self, node: ast.AST) -> Optional[ast.AST]:
        if not isinstance(node, ast.Call) or self._should_skip(node):
            return None

        resolver = self._require_context().resolver
        reflection = resolver.resolve_call(node)
        # unreliable count of arguments
        if isinstance(reflection, UnionTypeMethodReflection):
            return None
        if reflection is None:
            return None

        maximum = self._resolve_maximum_allowed_parameter_count(reflection.variants)
        if len(node.args) > maximum:
            del node.args[maximum:]
            self.changes += 1
        return node

    def _should_skip(self, call: ast.Call) -> bool:
        if not call.args:
            return True
        if any(isinstance(arg, ast.Starred) for arg in call.args):
            return True

        resolver = self._require_context().resolver
        if resolver.classify(call) is CallKind.STATIC:
            target = call.func.value  # type: ignore[attr-defined]
            if is_super_call(target):
                return True
            if not isinstance(target, ast.Name):
                return True

        reflection = resolver.resolve_call(call)
        if reflection is None or not reflection.variants:
            return True
        return self._has_variadic_parameters(reflection.variants)

    def _resolve_maximum_allowed_parameter_count(self, variants: List[Variant]) -> int:
        counts = [0]
        for variant in variants:
            counts.append(len(variant.parameters))
        return max(counts)

    def _has_variadic_parameters(self, variants: List[Variant]) -> bool:
        # any number of arguments -> nothing to limit here
        return any(variant.is_variadic for variant in variants)

