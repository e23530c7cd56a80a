"""
Rule registry.
"""

from __future__ import annotations

from typing import Any, Dict, List, Mapping, Optional, Type

from .abstract_rule import AbstractRule
from .remove_extra_arguments import RemoveExtraArgumentsRule
from .remove_version_id_check import RemoveVersionIdCheckRule

RULES: Dict[str, Type[AbstractRule]] = {
    RemoveVersionIdCheckRule.name: RemoveVersionIdCheckRule,
    RemoveExtraArgumentsRule.name: RemoveExtraArgumentsRule,
}


def create_rules(
    rule_configs: Mapping[str, Optional[Mapping[str, Any]]],
    version_provider: Optional[Any] = None,
) -> List[AbstractRule]:
    """Instantiate and configure the rules named in ``rule_configs``."""
    unknown = [name for name in rule_configs if name not in RULES]
    if unknown:
        raise ValueError(f"Unknown rule(s): {', '.join(sorted(unknown))}. Available: {', '.join(RULES)}")

    rules: List[AbstractRule] = []
    for name, options in rule_configs.items():
        cls = RULES[name]
        if cls is RemoveVersionIdCheckRule:
            rule: AbstractRule = RemoveVersionIdCheckRule(version_provider)
        else:
            rule = cls()
        rule.configure(options or {})
        rules.append(rule)
    return rules


__all__ = [
    "AbstractRule",
    "RULES",
    "RemoveExtraArgumentsRule",
    "RemoveVersionIdCheckRule",
    "create_rules",
]
