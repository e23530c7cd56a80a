#!/usr/bin/env python3
"""
CLI entrypoint for codemend

Subcommands:
  - process:      run the configured rules over the source tree
  - list-rules:   describe the available rules
  - init:         generate codemend.yaml
  - show-config:  print the effective configuration
"""
from __future__ import annotations

import sys
import argparse
from pathlib import Path

EXIT_OK = 0
EXIT_CHANGES = 1
EXIT_ERRORS = 2


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(prog="codemend", description="Rewrite Python sources with narrow refactoring rules")
    sub = parser.add_subparsers(dest="cmd")

    p_process = sub.add_parser("process", help="Apply the configured rules")
    p_process.add_argument("paths", nargs="*", help="Files or directories (default from config)")
    p_process.add_argument("--config", default=None, help="Path to config (YAML or pyproject.toml)")
    p_process.add_argument("--dry-run", action="store_true", help="Show diffs without writing files")
    p_process.add_argument("--output", default=None, help="Override report directory (default from config)")
    p_process.add_argument("--no-report", action="store_true", help="Do not write report.json")

    sub.add_parser("list-rules", help="List available rules")

    p_init = sub.add_parser("init", help="Generate configuration (codemend.yaml)")
    p_init.add_argument("--force", action="store_true", help="Overwrite existing codemend.yaml if present")

    p_show = sub.add_parser("show-config", help="Show the effective configuration")
    p_show.add_argument("--config", default=None, help="Path to config (YAML or pyproject.toml)")

    args = parser.parse_args(argv)

    if not args.cmd:
        parser.print_help()
        sys.exit(EXIT_OK)

    if args.cmd == "process":
        sys.exit(run_process(
            paths=args.paths,
            config_path=args.config,
            dry_run=args.dry_run,
            output_override=args.output,
            no_report=args.no_report,
        ))

    if args.cmd == "list-rules":
        list_rules()
        return

    # Lazy import to keep base CLI import time minimal
    if args.cmd == "init":
        from .config_init import init_config
        init_config(force=args.force)
        return

    if args.cmd == "show-config":
        from .config_init import show_config
        show_config(Path(args.config) if args.config else None)
        return


def run_process(
    paths: list[str] | None = None,
    config_path: str | None = None,
    dry_run: bool = False,
    output_override: str | None = None,
    no_report: bool = False,
) -> int:
    from .config_loader import load_config
    from .config_schema import ConfigError
    from .engine import RefactorEngine
    from .report import print_summary, save_report
    from .rules import create_rules
    from .version import ProjectVersionProvider

    try:
        config = load_config(Path(config_path) if config_path else None)
        targets = paths or config.paths
        # requires-python is read from the project being processed
        provider = ProjectVersionProvider(Path(targets[0]) if targets else None)
        rules = create_rules(config.rules, version_provider=provider)
    except (FileNotFoundError, ImportError, ConfigError, ValueError) as e:
        print(f"❌ Configuration error: {e}")
        return EXIT_ERRORS

    engine = RefactorEngine(rules)
    result = engine.process_paths(targets, config.include, config.exclude, dry_run=dry_run)
    print_summary(result, show_diffs=dry_run)

    if config.report and not no_report:
        out = save_report(result, Path(output_override or config.output))
        print(f"📝 Report: {out}")

    if result.errors:
        return EXIT_ERRORS
    if dry_run and result.changed_files:
        return EXIT_CHANGES
    return EXIT_OK


def list_rules() -> None:
    from .rules import RULES

    for name, cls in RULES.items():
        definition = cls().get_rule_definition()
        print(f"🔧 {name}: {definition.description}")
        for sample in definition.samples:
            if sample.configuration:
                print(f"   config: {sample.configuration}")
            print("   before:")
            for line in sample.before.rstrip().splitlines():
                print(f"     {line}")
            print("   after:")
            for line in sample.after.rstrip().splitlines():
                print(f"     {line}")
        print()


if __name__ == "__main__":
    main()
