import json
import sys

import pytest

from streamreport import cli


def run_cli(monkeypatch, *args):
    monkeypatch.setattr(sys, "argv", ["streamreport", *args])
    with pytest.raises(SystemExit) as excinfo:
        cli.main()
    return excinfo.value.code


def test_package_names_are_distinct():
    names = cli.package_names(30)
    assert len(set(names)) == 30
    assert names[0] == "left-pad@1.0.0"
    assert names[len(cli.PACKAGE_NAMES)] == "left-pad@2.0.0"


def test_simulate_json(monkeypatch, capsys):
    code = run_cli(monkeypatch, "simulate", "--json", "-n", "6", "--delay", "0", "--seed", "1")
    assert code == 0

    records = [json.loads(line) for line in capsys.readouterr().out.splitlines()]
    assert records[0]["data"] == "┌ Resolution step"
    assert {record["type"] for record in records} <= {"info", "warning"}
    assert records[-1]["data"].startswith("Done")


def test_simulate_failure_sets_exit_code(monkeypatch, capsys):
    code = run_cli(monkeypatch, "--json", "-n", "3", "--delay", "0", "--fail", "--no-timers")
    assert code == 1

    records = [json.loads(line) for line in capsys.readouterr().out.splitlines()]
    errors = [record for record in records if record["type"] == "error"]
    assert errors[0]["name"] == 9
    assert errors[0]["data"] == "left-pad@1.0.0 couldn't be built successfully"
    assert errors[-1]["data"] == "Failed with errors"


def test_simulate_plain_text(monkeypatch, capsys):
    monkeypatch.delenv("FORCE_COLOR", raising=False)
    code = run_cli(monkeypatch, "-n", "4", "--delay", "0", "--no-progress", "--no-timers", "--seed", "2")
    assert code == 0
    out = capsys.readouterr().out
    assert "\x1b[" not in out
    assert "┌ Fetch step" in out
    assert "SR0000: Done" in out.splitlines()[-1]


def test_invalid_arguments(monkeypatch, capsys):
    assert run_cli(monkeypatch, "-n", "-1") == 1
    assert "Error: Number of packages cannot be negative" in capsys.readouterr().err
