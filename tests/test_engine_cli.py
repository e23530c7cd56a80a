from __future__ import annotations

import json
import os
from pathlib import Path

import pytest

from codemend.cli import EXIT_CHANGES, EXIT_ERRORS, EXIT_OK, main
from codemend.engine import RefactorEngine
from codemend.rules import create_rules

GUARDED = "def run():\n    if PY_VERSION_ID < 30800:\n        return\n    print('x')\n"
EXTRA = "len('asdf', 1)\n"


def _w(p: Path, rel: str, content: str) -> Path:
    f = p / rel
    f.parent.mkdir(parents=True, exist_ok=True)
    f.write_text(content, encoding="utf-8")
    return f


def _engine() -> RefactorEngine:
    return RefactorEngine(
        create_rules({"remove_version_id_check": {"target_version": "3.8"}, "remove_extra_arguments": {}})
    )


def test_process_source_reports_applied_rules_and_diff():
    change = _engine().process_source(GUARDED + EXTRA, "mod.py")
    assert change.changed
    assert change.applied_rules == ["remove_version_id_check", "remove_extra_arguments"]
    assert change.refactored == "def run():\n    print('x')\nlen('asdf')\n"
    assert "-len('asdf', 1)" in change.diff
    assert change.diff.startswith("--- a/mod.py")


def test_syntax_errors_are_recorded_not_raised():
    change = _engine().process_source("def broken(:\n", "bad.py")
    assert change.error is not None and change.error.startswith("SyntaxError")
    assert not change.changed


def test_process_paths_writes_changed_files_only(tmp_path: Path):
    src = tmp_path / "src"
    changed = _w(src, "pkg/a.py", GUARDED)
    untouched = _w(src, "pkg/b.py", "x = 1  # keep my comment\n")
    _w(src, "pkg/tests/test_a.py", EXTRA)
    _w(src, "notes.txt", EXTRA)

    result = _engine().process_paths([str(src)], ["**/*.py"], ["**/tests/**"])

    assert len(result.files) == 2
    assert [f.applied_rules for f in result.changed_files] == [["remove_version_id_check"]]
    assert changed.read_text(encoding="utf-8") == "def run():\n    print('x')\n"
    assert untouched.read_text(encoding="utf-8") == "x = 1  # keep my comment\n"
    assert (src / "pkg/tests/test_a.py").read_text(encoding="utf-8") == EXTRA


def test_dry_run_leaves_files_alone(tmp_path: Path):
    f = _w(tmp_path, "a.py", EXTRA)
    result = _engine().process_paths([str(tmp_path)], ["**/*.py"], [], dry_run=True)
    assert len(result.changed_files) == 1
    assert f.read_text(encoding="utf-8") == EXTRA
    assert result.to_dict()["summary"]["rules"] == {"remove_extra_arguments": 1}


def _run_cli(argv) -> int:
    with pytest.raises(SystemExit) as exc:
        main(argv)
    return exc.value.code


def test_cli_dry_run_exit_code_and_report(tmp_path: Path, capsys, monkeypatch):
    monkeypatch.chdir(tmp_path)
    _w(tmp_path, "src/a.py", EXTRA)
    _w(tmp_path, "codemend.yaml", "rules:\n  remove_extra_arguments: {}\noutput: results\n")

    assert _run_cli(["process", "--dry-run"]) == EXIT_CHANGES
    out = capsys.readouterr().out
    assert "+len('asdf')" in out
    assert (tmp_path / "src/a.py").read_text(encoding="utf-8") == EXTRA

    report = json.loads((tmp_path / "results" / "report.json").read_text(encoding="utf-8"))
    assert report["summary"]["changed_files"] == 1
    assert report["files"][0]["path"] == os.path.join("src", "a.py")

    assert _run_cli(["process", "--no-report"]) == EXIT_OK
    assert (tmp_path / "src/a.py").read_text(encoding="utf-8") == "len('asdf')\n"


def test_cli_exit_code_for_parse_errors(tmp_path: Path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    _w(tmp_path, "src/bad.py", "def broken(:\n")
    assert _run_cli(["process", "src", "--no-report"]) == EXIT_ERRORS


def test_cli_rejects_invalid_config(tmp_path: Path, capsys):
    cfg = _w(tmp_path, "codemend.yaml", "rules:\n  nope: {}\n")
    assert _run_cli(["process", str(tmp_path), "--config", str(cfg)]) == EXIT_ERRORS
    assert "Configuration error" in capsys.readouterr().out


def test_cli_list_rules(capsys):
    main(["list-rules"])
    out = capsys.readouterr().out
    assert "remove_version_id_check" in out
    assert "remove_extra_arguments" in out
    assert 'len("asdf")' in out


def test_cli_reads_requires_python_from_the_processed_project(tmp_path: Path, monkeypatch):
    project = tmp_path / "project"
    _w(project, "pyproject.toml", '[project]\nname = "p"\nrequires-python = ">=3.8"\n')
    guarded = _w(project, "src/a.py", GUARDED)
    elsewhere = tmp_path / "elsewhere"
    elsewhere.mkdir()
    monkeypatch.chdir(elsewhere)

    assert _run_cli(["process", str(project / "src"), "--no-report"]) == EXIT_OK
    assert guarded.read_text(encoding="utf-8") == "def run():\n    print('x')\n"
