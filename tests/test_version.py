from __future__ import annotations

import sys
from pathlib import Path

import pytest

from codemend.version import ProjectVersionProvider, create_int_version, lower_bound_of


@pytest.mark.parametrize(
    "token, expected",
    [
        ("8.0", 80000),
        (80000, 80000),
        ("80000", 80000),
        ("3.8", 30800),
        ("3.8.1", 30801),
        ("3.12-dev", 31200),
        (" 3.10 ", 31000),
    ],
)
def test_create_int_version(token, expected):
    assert create_int_version(token) == expected


def test_create_int_version_rejects_garbage():
    with pytest.raises(ValueError):
        create_int_version("three.eight")


def test_lower_bound_of_specifiers():
    assert lower_bound_of(">=3.8") == "3.8"
    assert lower_bound_of(">= 3.10, <4") == "3.10"
    assert lower_bound_of("~=3.9.1") == "3.9.1"
    assert lower_bound_of("<4") is None


def test_provider_reads_requires_python_from_nearest_pyproject(tmp_path: Path):
    (tmp_path / "pyproject.toml").write_text('[project]\nname = "x"\nrequires-python = ">=3.9"\n', encoding="utf-8")
    nested = tmp_path / "src" / "pkg"
    nested.mkdir(parents=True)

    assert ProjectVersionProvider(nested).provide() == "3.9"


def test_provider_falls_back_to_running_interpreter(tmp_path: Path):
    (tmp_path / "pyproject.toml").write_text('[project]\nname = "x"\n', encoding="utf-8")

    expected = f"{sys.version_info.major}.{sys.version_info.minor}"
    assert ProjectVersionProvider(tmp_path).provide() == expected
