from __future__ import annotations

import json
from pathlib import Path

import pytest

from aiderkit import cli
from aiderkit.adapters.base import RunResult
from aiderkit.adapters.mock import ScriptedRunner


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in ("AIDERKIT_EXECUTABLE", "AIDERKIT_LEDGER_PATH", "AIDERKIT_LOG_LEVEL", "AIDERKIT_TIMEOUT_SECONDS"):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def runner(monkeypatch: pytest.MonkeyPatch) -> ScriptedRunner:
    scripted = ScriptedRunner()
    monkeypatch.setattr(cli, "_make_runner", lambda settings: scripted)
    return scripted


def _stdout_json(capsys: pytest.CaptureFixture[str]) -> object:
    return json.loads(capsys.readouterr().out)


def _stderr_json(capsys: pytest.CaptureFixture[str]) -> dict[str, str]:
    return json.loads(capsys.readouterr().err)


def test_args_prints_compiled_argv(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    config = tmp_path / "aider.yml"
    config.write_text("model: gpt-4o\nauto_commits: true\n", encoding="utf-8")
    code = cli.main(["args", "--config", str(config), "--set", "map_tokens=2048", "--file", "app.py", "--read", "docs.md"])
    assert code == 0
    argv = _stdout_json(capsys)
    assert argv[0] == "aider"
    assert argv[1:3] == ["--model", "gpt-4o"]
    assert argv[argv.index("--map-tokens") + 1] == "2048"
    assert "--auto-commits" in argv
    assert argv[-4:] == ["--file", "app.py", "--read", "docs.md"]


def test_args_honours_executable_setting(monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]) -> None:
    monkeypatch.setenv("AIDERKIT_EXECUTABLE", "/opt/bin/aider")
    assert cli.main(["args"]) == 0
    assert _stdout_json(capsys)[0] == "/opt/bin/aider"


def test_unknown_option_is_rejected(capsys: pytest.CaptureFixture[str]) -> None:
    assert cli.main(["args", "--set", "bogus=1"]) == 1
    payload = _stderr_json(capsys)
    assert payload["error_code"] == "VALIDATION"
    assert "bogus" in payload["error_message"]


def test_excluded_option_is_rejected(capsys: pytest.CaptureFixture[str]) -> None:
    assert cli.main(["args", "--set", "use_repo_map=true"]) == 1
    assert _stderr_json(capsys)["error_code"] == "VALIDATION"


def test_validate_ok(capsys: pytest.CaptureFixture[str]) -> None:
    assert cli.main(["validate", "--set", "timeout=60", "--set", "edit_format=diff"]) == 0
    payload = _stdout_json(capsys)
    assert payload["status"] == "ok"
    assert payload["options"]["timeout"] == 60


def test_validate_reports_violation(capsys: pytest.CaptureFixture[str]) -> None:
    assert cli.main(["validate", "--set", "timeout=0"]) == 1
    payload = _stderr_json(capsys)
    assert payload["error_code"] == "VALIDATION"
    assert "timeout" in payload["error_message"]


def test_validate_missing_config_file(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    assert cli.main(["validate", "--config", str(tmp_path / "missing.yml")]) == 1
    assert _stderr_json(capsys)["error_code"] == "CONFIGURATION"


def test_run_history_and_show(tmp_path: Path, runner: ScriptedRunner, capsys: pytest.CaptureFixture[str]) -> None:
    ledger = tmp_path / "ledger.json"
    assert cli.main(["--ledger", str(ledger), "run", "refactoring", "Split", "module", "--file", "a.py"]) == 0
    payload = _stdout_json(capsys)
    task = payload["task"]
    assert task["type"] == "refactoring"
    assert task["status"] == "completed"
    assert task["description"] == "Split module"
    assert task["files"] == ["a.py"]
    assert "--git" in runner.calls[0]
    assert ledger.exists()

    assert cli.main(["--ledger", str(ledger), "history", "--status", "completed"]) == 0
    assert [record["id"] for record in _stdout_json(capsys)] == [task["id"]]

    assert cli.main(["--ledger", str(ledger), "show", task["id"]]) == 0
    assert _stdout_json(capsys) == task

    assert cli.main(["--ledger", str(ledger), "history", "--summary"]) == 0
    assert _stdout_json(capsys) == {
        "tasks": 1,
        "by_status": {"completed": 1},
        "by_type": {"refactoring": 1},
    }


def test_failed_run_is_still_saved(tmp_path: Path, runner: ScriptedRunner, capsys: pytest.CaptureFixture[str]) -> None:
    runner.replies["Fix it"] = RunResult(stdout="", stderr="no model", exit_code=2)
    ledger = tmp_path / "ledger.json"
    assert cli.main(["--ledger", str(ledger), "run", "debugging", "Fix it"]) == 1
    assert _stderr_json(capsys)["error_code"] == "EXECUTION"

    [record] = json.loads(ledger.read_text(encoding="utf-8"))
    assert record["status"] == "failed"
    assert "no model" in record["error"]
    assert record["failed_at"] is not None


def test_multi_step_with_checkpoints(tmp_path: Path, runner: ScriptedRunner, capsys: pytest.CaptureFixture[str]) -> None:
    ledger = tmp_path / "ledger.json"
    argv = ["--ledger", str(ledger), "run", "multi_step", "plan", "build", "--checkpoints"]
    assert cli.main(argv) == 0
    task = _stdout_json(capsys)["task"]
    assert task["description"] == "Multi-step task with 2 steps"
    assert task["result"] == ["ok: plan", "ok: build"]
    assert [step["description"] for step in task["steps"]] == ["plan", "build"]
    assert all(step["completed_at"] for step in task["steps"])


def test_show_unknown_task(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    assert cli.main(["--ledger", str(tmp_path / "ledger.json"), "show", "task_missing"]) == 1
    assert _stderr_json(capsys)["error_code"] == "TASK_NOT_FOUND"


def test_models_by_provider(capsys: pytest.CaptureFixture[str]) -> None:
    assert cli.main(["models", "--provider", "deepseek"]) == 0
    payload = _stdout_json(capsys)
    assert [entry["name"] for entry in payload] == ["deepseek-chat", "deepseek-coder"]
    assert all(entry["provider"] == "deepseek" for entry in payload)
