from __future__ import annotations

import json

from typer.testing import CliRunner

from tests.helpers import OLD_MTIME, seed_tree, stdin_for, write_records
from touchdeps import cli
from touchdeps.fingerprint import fingerprint_bytes
from touchdeps.parse.changes import read_change_file

runner = CliRunner()


def _clean_env(monkeypatch) -> None:
    for name in ("TOUCHDEPS_CONFIG", "TOUCHDEPS_DRY_RUN", "TOUCHDEPS_CHUNK_SIZE"):
        monkeypatch.delenv(name, raising=False)


def test_check_touches_changed_files(monkeypatch, tmp_path) -> None:
    _clean_env(monkeypatch)
    paths = seed_tree(tmp_path, {"a.c": b"int a = 2;\n", "b.c": b"int b;\n", "new.h": b"#pragma once\n"})
    change_file = write_records(
        tmp_path / "change.csv",
        {paths["a.c"]: b"int a = 1;\n", paths["b.c"]: b"int b;\n"},
    )

    result = runner.invoke(
        cli.app,
        ["check", str(change_file)],
        input=stdin_for([paths["a.c"], paths["b.c"], paths["new.h"], tmp_path / "gone.c"]),
    )

    assert result.exit_code == 0, result.output
    assert result.stdout.splitlines() == [str(paths["a.c"]), str(paths["new.h"])]
    assert paths["a.c"].stat().st_mtime > OLD_MTIME
    assert paths["new.h"].stat().st_mtime > OLD_MTIME
    assert paths["b.c"].stat().st_mtime == OLD_MTIME
    assert not (tmp_path / "gone.c").exists()


def test_check_dry_run_reports_without_touching(monkeypatch, tmp_path) -> None:
    _clean_env(monkeypatch)
    paths = seed_tree(tmp_path, {"a.c": b"changed\n"})
    change_file = write_records(tmp_path / "change.csv", {paths["a.c"]: b"original\n"})

    result = runner.invoke(cli.app, ["check", str(change_file), "--dry-run"], input=stdin_for([paths["a.c"]]))

    assert result.exit_code == 0, result.output
    assert result.stdout.splitlines() == [str(paths["a.c"])]
    assert paths["a.c"].stat().st_mtime == OLD_MTIME


def test_check_update_rewrites_change_file(monkeypatch, tmp_path) -> None:
    _clean_env(monkeypatch)
    paths = seed_tree(tmp_path, {"a.c": b"v2\n", "b.c": b"b\n"})
    change_file = write_records(tmp_path / "change.csv", {paths["a.c"]: b"v1\n"})

    result = runner.invoke(
        cli.app,
        ["check", str(change_file), "--update", "--dry-run"],
        input=stdin_for([paths["a.c"], paths["b.c"]]),
    )

    assert result.exit_code == 0, result.output
    records = read_change_file(change_file)
    lookup = dict(zip(records["path"], records["fingerprint"]))
    assert lookup == {str(paths["a.c"]): fingerprint_bytes(b"v2\n"), str(paths["b.c"]): fingerprint_bytes(b"b\n")}

    rerun = runner.invoke(cli.app, ["check", str(change_file)], input=stdin_for([paths["a.c"], paths["b.c"]]))
    assert rerun.exit_code == 0, rerun.output
    assert rerun.stdout == ""


def test_check_writes_report_from_config(monkeypatch, tmp_path) -> None:
    _clean_env(monkeypatch)
    paths = seed_tree(tmp_path, {"a.c": b"x\n"})
    change_file = write_records(tmp_path / "change.csv", {paths["a.c"]: b"y\n"})
    report_dir = tmp_path / "reports"
    config = tmp_path / "touchdeps.yaml"
    config.write_text(f"runtime:\n  dry_run: true\n  report_dir: {report_dir}\n", encoding="utf-8")

    result = runner.invoke(
        cli.app,
        ["check", str(change_file), "--config", str(config)],
        input=stdin_for([paths["a.c"]]),
    )

    assert result.exit_code == 0, result.output
    reports = list((report_dir / "run_reports").glob("run_*.json"))
    assert len(reports) == 1
    payload = json.loads(reports[0].read_text(encoding="utf-8"))
    assert payload["changed"] == [str(paths["a.c"])]
    assert payload["dry_run"] is True
    assert payload["status_counts"] == {"changed": 1}
    assert paths["a.c"].stat().st_mtime == OLD_MTIME


def test_check_missing_change_file_fails(monkeypatch, tmp_path) -> None:
    _clean_env(monkeypatch)
    result = runner.invoke(cli.app, ["check", str(tmp_path / "absent.csv")], input="")
    assert result.exit_code == 1


def test_check_malformed_change_file_fails(monkeypatch, tmp_path) -> None:
    _clean_env(monkeypatch)
    change_file = tmp_path / "change.csv"
    change_file.write_text("only-one-field\n", encoding="utf-8")
    result = runner.invoke(cli.app, ["check", str(change_file)], input="")
    assert result.exit_code == 1


def test_bad_config_fails(monkeypatch, tmp_path) -> None:
    _clean_env(monkeypatch)
    change_file = tmp_path / "change.csv"
    change_file.write_text("", encoding="utf-8")
    result = runner.invoke(
        cli.app, ["check", str(change_file), "--config", str(tmp_path / "missing.yaml")], input=""
    )
    assert result.exit_code == 1
