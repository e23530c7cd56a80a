from __future__ import annotations

from pathlib import Path

import pytest

from codemend.config_init import format_config_display, init_config
from codemend.config_loader import CodemendConfig, find_config_file, load_config, parse_config_data
from codemend.config_schema import ConfigError
from codemend.rules import create_rules


def _w(p: Path, rel: str, content: str) -> Path:
    f = p / rel
    f.parent.mkdir(parents=True, exist_ok=True)
    f.write_text(content, encoding="utf-8")
    return f


def test_yaml_config_is_loaded(tmp_path: Path) -> None:
    cfg = _w(
        tmp_path,
        "codemend.yaml",
        "paths: ['lib']\n"
        "output: out\n"
        "report: false\n"
        "rules:\n"
        "  remove_version_id_check:\n"
        "    target_version: '3.8'\n",
    )
    config = load_config(cfg)
    assert config.paths == ["lib"]
    assert config.output == "out"
    assert config.report is False
    assert config.rules == {"remove_version_id_check": {"target_version": "3.8"}}
    assert config.source == cfg


def test_pyproject_tool_table_is_found(tmp_path: Path) -> None:
    _w(tmp_path, "pyproject.toml", '[project]\nname = "x"\n')
    assert find_config_file(tmp_path) is None

    _w(
        tmp_path,
        "pyproject.toml",
        '[tool.codemend]\nrules = ["remove_extra_arguments"]\n',
    )
    found = find_config_file(tmp_path)
    assert found == tmp_path / "pyproject.toml"
    assert load_config(found).rules == {"remove_extra_arguments": {}}


def test_yaml_takes_priority_over_pyproject(tmp_path: Path) -> None:
    _w(tmp_path, "pyproject.toml", '[tool.codemend]\nrules = []\n')
    _w(tmp_path, ".codemend.yml", "rules: []\n")
    assert find_config_file(tmp_path) == tmp_path / ".codemend.yml"


def test_defaults_enable_every_rule() -> None:
    config = CodemendConfig()
    rules = create_rules(config.rules, version_provider=_Fixed("3.8"))
    assert [r.name for r in rules] == ["remove_version_id_check", "remove_extra_arguments"]
    assert parse_config_data({}).rules == config.rules


@pytest.mark.parametrize(
    "data",
    [
        {"pathz": ["src"]},
        {"rules": {"no_such_rule": {}}},
        {"rules": {"remove_version_id_check": {"target": "3.8"}}},
        {"rules": {"remove_extra_arguments": {"anything": 1}}},
        {"paths": "src"},
    ],
)
def test_invalid_config_is_rejected(data) -> None:
    with pytest.raises(ConfigError):
        parse_config_data(data)


def test_missing_and_unsupported_files(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        load_config(tmp_path / "nope.yaml")
    ini = _w(tmp_path, "codemend.ini", "[codemend]\n")
    with pytest.raises(ValueError):
        load_config(ini)


def test_unknown_rule_name_is_rejected_by_registry() -> None:
    with pytest.raises(ValueError):
        create_rules({"remove_everything": {}})


def test_init_writes_packaged_template(tmp_path: Path) -> None:
    target = tmp_path / "codemend.yaml"
    init_config(target, force=True)
    config = load_config(target)
    assert set(config.rules) == {"remove_version_id_check", "remove_extra_arguments"}
    assert config.rules["remove_version_id_check"] == {"constant_name": "PY_VERSION_ID"}


def test_format_config_display_lists_rules() -> None:
    text = format_config_display(CodemendConfig(rules={"remove_version_id_check": {"target_version": "3.9"}}))
    assert "remove_version_id_check (target_version=3.9)" in text


class _Fixed:
    def __init__(self, version):
        self.version = version

    def provide(self):
        return self.version
