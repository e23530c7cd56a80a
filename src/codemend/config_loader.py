"""
Configuration loader - supports YAML files and [tool.codemend] in pyproject.toml
"""

from __future__ import annotations
from pathlib import Path
from typing import Dict, Any, Optional, List
from dataclasses import dataclass, field

try:
    import yaml
except ImportError:
    yaml = None

try:  # py3.11+
    import tomllib as tomli
except ImportError:
    try:
        import tomli
    except ImportError:
        tomli = None

from .config_schema import validate_config_data


def _default_rules() -> Dict[str, Dict[str, Any]]:
    return {"remove_version_id_check": {}, "remove_extra_arguments": {}}


@dataclass
class CodemendConfig:
    """Effective configuration of a codemend run."""
    paths: List[str] = field(default_factory=lambda: ["src"])
    include: List[str] = field(default_factory=lambda: ["**/*.py"])
    exclude: List[str] = field(default_factory=lambda: [
        "**/.venv/**", "**/venv/**", "**/__pycache__/**",
        "**/build/**", "**/dist/**"
    ])
    output: str = "codemend_results"
    report: bool = True
    # rule name -> options; only listed rules run
    rules: Dict[str, Dict[str, Any]] = field(default_factory=_default_rules)
    source: Optional[Path] = None


def load_config(config_path: Optional[Path] = None, quiet: bool = False) -> CodemendConfig:
    """
    Load a configuration file.

    Args:
        config_path: explicit config path; searched for when None
        quiet: do not print where the configuration came from

    Returns:
        CodemendConfig: the loaded configuration
    """
    if config_path:
        return _load_config_file(Path(config_path))

    found_config = find_config_file()
    if found_config:
        if not quiet:
            print(f"📋 Using configuration: {found_config}")
        return _load_config_file(found_config)

    if not quiet:
        print("📋 No configuration file found, using defaults (run 'codemend init' to create one)")
    return CodemendConfig()


def find_config_file(start_dir: Optional[Path] = None) -> Optional[Path]:
    """
    Find a configuration file by priority.

    Returns:
        Path: the first candidate found, or None
    """
    base = Path(start_dir) if start_dir else Path(".")
    candidates = [
        base / 'codemend.yaml',
        base / 'codemend.yml',
        base / '.codemend.yaml',
        base / '.codemend.yml',
        base / 'pyproject.toml',  # checks [tool.codemend]
    ]

    for candidate in candidates:
        if candidate.exists():
            if candidate.name == 'pyproject.toml':
                if _has_codemend_config(candidate):
                    return candidate
                continue
            return candidate

    return None


def _load_config_file(config_path: Path) -> CodemendConfig:
    """Load the given configuration file."""
    if not config_path.exists():
        raise FileNotFoundError(f"Configuration file not found: {config_path}")

    suffix = config_path.suffix.lower()

    if suffix in ['.yaml', '.yml']:
        config = _load_yaml_config(config_path)
    elif suffix == '.toml':
        config = _load_toml_config(config_path)
    else:
        raise ValueError(f"Unsupported configuration format: {suffix}")
    config.source = config_path
    return config


def _load_yaml_config(config_path: Path) -> CodemendConfig:
    """Load a YAML configuration file."""
    if yaml is None:
        raise ImportError("PyYAML is required to read YAML configuration: pip install pyyaml")

    with config_path.open('r', encoding='utf-8') as f:
        data = yaml.safe_load(f)

    if not data:
        return CodemendConfig()

    return parse_config_data(data)


def _load_toml_config(config_path: Path) -> CodemendConfig:
    """Load a TOML configuration file."""
    if tomli is None:
        raise ImportError("tomli is required to read TOML configuration: pip install tomli")

    with config_path.open('rb') as f:
        data = tomli.load(f)

    # pyproject.toml keeps the settings under [tool.codemend]
    if 'tool' in data and 'codemend' in data['tool']:
        config_data = data['tool']['codemend']
    else:
        config_data = data

    return parse_config_data(config_data)


def _has_codemend_config(pyproject_path: Path) -> bool:
    """Check whether pyproject.toml has a [tool.codemend] table."""
    if tomli is None:
        return False

    try:
        with pyproject_path.open('rb') as f:
            data = tomli.load(f)
        return 'tool' in data and 'codemend' in data['tool']
    except (OSError, tomli.TOMLDecodeError):
        return False


def parse_config_data(data: Dict[str, Any]) -> CodemendConfig:
    """Validate and convert raw configuration data."""
    validate_config_data(data)
    config = CodemendConfig()

    if 'paths' in data:
        config.paths = [str(p) for p in data['paths']]
    if 'include' in data:
        config.include = [str(p) for p in data['include']]
    if 'exclude' in data:
        config.exclude = [str(p) for p in data['exclude']]
    if 'output' in data:
        config.output = str(data['output'])
    if 'report' in data:
        config.report = bool(data['report'])

    if 'rules' in data:
        rules_data = data['rules']
        rules: Dict[str, Dict[str, Any]] = {}
        if isinstance(rules_data, list):
            # plain list of rule names
            for name in rules_data:
                rules[str(name)] = {}
        elif isinstance(rules_data, dict):
            for name, options in rules_data.items():
                rules[str(name)] = dict(options or {})
        config.rules = rules

    return config

