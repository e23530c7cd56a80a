"""
codemend - narrow, conservative rewrite rules for Python sources

Simple API:

    from codemend import refactor_source, create_rules

    rules = create_rules({"remove_version_id_check": {"target_version": "3.8"},
                          "remove_extra_arguments": {}})
    new_source, applied = refactor_source(source, rules)

    # Whole directories (writes files unless dry_run=True)
    result = process_paths(["src"], dry_run=True)
    for change in result.changed_files:
        print(change.diff)
"""


def process_paths(paths, rules=None, include=None, exclude=None, dry_run=False):
    """Run RefactorEngine.process_paths over ``paths``; all rules run when ``rules`` is None."""
    from .engine import RefactorEngine
    from .rules import RULES, create_rules
    from .version import ProjectVersionProvider

    if rules is None:
        provider = ProjectVersionProvider(paths[0] if paths else None)
        rules = create_rules({name: {} for name in RULES}, version_provider=provider)
    return RefactorEngine(rules).process_paths(paths, include or ["**/*.py"], exclude or [], dry_run=dry_run)


from .engine import refactor_source
from .rules import create_rules

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("codemend")
except PackageNotFoundError:
    # Fallback for development/uninstalled package
    __version__ = "unknown"

__all__ = ["create_rules", "process_paths", "refactor_source", "__version__"]
