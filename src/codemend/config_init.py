"""
Config initialization - generate and display configuration files
"""

from __future__ import annotations

import importlib.resources as ir
from pathlib import Path
from typing import Optional

from .config_loader import CodemendConfig, load_config


def _load_packaged_yaml() -> Optional[str]:
    """Read the packaged template (codemend/templates/codemend.yaml); None if unavailable."""
    try:
        resource = ir.files("codemend") / "templates" / "codemend.yaml"
        if resource.is_file():
            return resource.read_text(encoding="utf-8")
    except (ModuleNotFoundError, OSError):
        pass
    return None


def init_config(output_path: Optional[Path] = None, force: bool = False) -> Path:
    """
    Initialize a configuration file.

    Args:
        output_path: target path, codemend.yaml in the current directory by default
        force: overwrite an existing file without asking

    Returns:
        Path: the configuration file path
    """
    if output_path is None:
        output_path = Path("codemend.yaml")

    if output_path.exists() and not force:
        print(f"⚠️  Configuration file already exists: {output_path}")
        response = input("Overwrite? (y/N): ").strip().lower()
        if response not in ["y", "yes"]:
            print("❌ Cancelled")
            return output_path

    config_content = _load_packaged_yaml()
    if not config_content:
        print("❌ Packaged template not found: codemend/templates/codemend.yaml")
        raise FileNotFoundError("codemend.yaml template resource missing")

    output_path.write_text(config_content, encoding="utf-8")

    print(f"✅ Configuration written: {output_path}")
    print("\n💡 Next steps:")
    print("1. Set rules.remove_version_id_check.target_version (or rely on requires-python)")
    print("2. Run 'codemend process --dry-run' to preview the changes")

    return output_path


def format_config_display(config: CodemendConfig) -> str:
    """Format the configuration for display."""
    lines = []

    lines.append("📋 Effective configuration:")
    lines.append("━" * 50)
    if config.source:
        lines.append(f"  📄 Source: {config.source}")
    lines.append(f"  📂 Paths: {', '.join(config.paths)}")
    lines.append(f"  ✅ Include: {', '.join(config.include)}")
    lines.append(
        f"  ❌ Exclude: {', '.join(config.exclude[:3])}{'...' if len(config.exclude) > 3 else ''}"
    )
    lines.append(f"  📁 Output: {config.output} (report {'on' if config.report else 'off'})")

    lines.append("\n🔧 Rules:")
    if not config.rules:
        lines.append("  (none)")
    for name, options in config.rules.items():
        opts = ", ".join(f"{k}={v}" for k, v in options.items())
        lines.append(f"  • {name}{f' ({opts})' if opts else ''}")

    return "\n".join(lines)


def show_config(config_path: Optional[Path] = None) -> None:
    """Print the configuration currently in effect."""
    config = load_config(config_path, quiet=True)
    print(format_config_display(config))
