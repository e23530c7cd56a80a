"""
Version ids - normalize version tokens to integer ids and find the project target version.

A version id packs ``major.minor.patch`` into ``major * 10000 + minor * 100 + patch``,
so ``"3.8"`` becomes ``30800`` and can be compared directly with integer literals
found in source conditionals.
"""

from __future__ import annotations

import re
import sys
from pathlib import Path
from typing import Optional, Union

try:  # py3.11+
    import tomllib as tomli
except ImportError:
    try:
        import tomli
    except ImportError:
        tomli = None


VersionToken = Union[int, str]

# lower bound of a requires-python specifier, e.g. ">=3.8", "~=3.9.1", ">= 3.10, <4"
_LOWER_BOUND_RE = re.compile(r"(?:>=|~=|==|>)\s*(\d+(?:\.\d+){0,2})")


def create_int_version(version: VersionToken) -> int:
    """Convert ``"3.8"``, ``"3.8.1"``, ``"30800"`` or ``30800`` to an integer version id."""
    # cast to str first so "8.0" style values are split rather than truncated
    text = str(version).strip()
    text = text.split("-")[0]

    parts = text.split(".")
    try:
        if len(parts) == 2:
            return int(parts[0]) * 10000 + int(parts[1]) * 100
        if len(parts) >= 3:
            return int(parts[0]) * 10000 + int(parts[1]) * 100 + int(parts[2])
        return int(text)
    except ValueError:
        raise ValueError(f"Invalid version: {version!r}") from None


def lower_bound_of(requires_python: str) -> Optional[str]:
    """Return the lowest version allowed by a ``requires-python`` specifier."""
    found = _LOWER_BOUND_RE.findall(requires_python or "")
    if not found:
        return None
    return min(found, key=create_int_version)


class ProjectVersionProvider:
    """Provide the ambient target version of the project being refactored.

    Reads ``[project].requires-python`` from the nearest ``pyproject.toml`` at or above
    ``start_dir``; falls back to the running interpreter.
    """

    def __init__(self, start_dir: Optional[Path] = None):
        self.start_dir = Path(start_dir) if start_dir else Path.cwd()

    def provide(self) -> str:
        pyproject = self._find_pyproject()
        if pyproject is not None:
            bound = lower_bound_of(self._read_requires_python(pyproject) or "")
            if bound:
                return bound
        return f"{sys.version_info.major}.{sys.version_info.minor}"

    def _find_pyproject(self) -> Optional[Path]:
        base = self.start_dir.resolve()
        for directory in [base, *base.parents]:
            candidate = directory / "pyproject.toml"
            if candidate.is_file():
                return candidate
        return None

    def _read_requires_python(self, pyproject: Path) -> Optional[str]:
        if tomli is None:
            return None
        try:
            with pyproject.open("rb") as f:
                data = tomli.load(f)
        except (OSError, tomli.TOMLDecodeError):
            return None
        value = (data.get("project") or {}).get("requires-python")
        return str(value) if value else None


class StaticVersionProvider:
    """Version provider returning a fixed token; handy for tests and the API."""

    def __init__(self, version: VersionToken):
        self.version = version

    def provide(self) -> VersionToken:
        return self.version
