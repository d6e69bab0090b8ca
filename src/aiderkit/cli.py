from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import Any

from . import models
from .adapters.base import ProcessRunner
from .adapters.process import SubprocessRunner
from .client import AiderClient
from .compiler import compile_args
from .config import Configuration
from .errors import AiderKitError, ErrorKind
from .executor import TaskExecutor
from .fields import EXCLUDED_FIELDS
from .ledger import TaskLedger
from .settings import LOG_LEVELS, Settings
from .store import load_config_file, parse_assignment
from .task import TaskStatus, TaskType
from .validator import validate_config


def _add_config_options(cmd: argparse.ArgumentParser) -> None:
    cmd.add_argument("--config", default=None, help="YAML, JSON or KEY=value file with aider options")
    cmd.add_argument(
        "--set",
        dest="assignments",
        action="append",
        default=[],
        metavar="KEY=VALUE",
        help="override one option (repeatable)",
    )


def _add_file_options(cmd: argparse.ArgumentParser) -> None:
    cmd.add_argument("--file", dest="files", action="append", default=[], help="editable file (repeatable)")
    cmd.add_argument("--read", dest="read_files", action="append", default=[], help="read-only file (repeatable)")


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="aiderkit", description="aider argument compiler and task ledger")
    parser.add_argument("--ledger", default=None, help="ledger JSON path (default: $AIDERKIT_LEDGER_PATH)")
    parser.add_argument("--log-level", default=None, choices=LOG_LEVELS, type=str.upper)

    sub = parser.add_subparsers(dest="command", required=True)

    cmd_args = sub.add_parser("args", help="print the aider argv for a configuration")
    _add_config_options(cmd_args)
    _add_file_options(cmd_args)

    cmd_validate = sub.add_parser("validate", help="validate a configuration")
    _add_config_options(cmd_validate)
    cmd_validate.add_argument("--check-files", action="store_true", help="require referenced files to exist")
    cmd_validate.add_argument("--check-model", action="store_true", help="require a catalogued model name")

    cmd_run = sub.add_parser("run", help="run aider for a task category and record it")
    cmd_run.add_argument("type", choices=[member.value for member in TaskType])
    cmd_run.add_argument("messages", nargs="+", help="task description, or one entry per step for multi_step")
    cmd_run.add_argument("--checkpoints", action="store_true", help="record per-step results (multi_step)")
    _add_config_options(cmd_run)
    _add_file_options(cmd_run)

    cmd_history = sub.add_parser("history", help="list recorded tasks")
    cmd_history.add_argument("--type", default=None, choices=[member.value for member in TaskType])
    cmd_history.add_argument("--status", default=None, choices=[member.value for member in TaskStatus])
    cmd_history.add_argument("--since", default=None, help="ISO-8601 lower bound on created_at")
    cmd_history.add_argument("--summary", action="store_true", help="print counts instead of tasks")

    cmd_show = sub.add_parser("show", help="print one recorded task")
    cmd_show.add_argument("task_id")

    cmd_models = sub.add_parser("models", help="list catalogued models")
    cmd_models.add_argument("--provider", default=None, choices=models.list_providers())
    return parser


def _load_configuration(args: argparse.Namespace) -> Configuration:
    defaults = load_config_file(Path(args.config)) if args.config else None
    overrides: dict[str, Any] = {}
    known = Configuration.field_names() - EXCLUDED_FIELDS
    for raw in args.assignments:
        parsed = parse_assignment(raw)
        if parsed is None:
            raise AiderKitError(ErrorKind.VALIDATION, f"expected KEY=VALUE, got: {raw}")
        key, value = parsed
        if key not in known:
            raise AiderKitError(ErrorKind.VALIDATION, f"unknown configuration option: {key}")
        overrides[key] = value
    return Configuration.from_mapping(overrides, defaults=defaults)


def _make_runner(settings: Settings) -> ProcessRunner:
    return SubprocessRunner(timeout_seconds=settings.timeout_seconds)


def _run_task(args: argparse.Namespace, settings: Settings, ledger_path: Path) -> dict[str, Any]:
    config = _load_configuration(args)
    client = AiderClient(config, runner=_make_runner(settings), executable=settings.executable)
    client.add_read_only_files(args.read_files)
    ledger = TaskLedger.load(ledger_path)
    executor = TaskExecutor(client, ledger)
    try:
        if args.type == TaskType.MULTI_STEP.value:
            steps: list[Any] = [{"description": msg} for msg in args.messages] if args.checkpoints else args.messages
            executor.execute_multi_step_task(steps, files=args.files)
        else:
            executor.execute_task(args.type, " ".join(args.messages), files=args.files)
    finally:
        ledger.save(ledger_path)
    return {"task": ledger.tasks[-1].to_dict(), "ledger": str(ledger_path)}


def main(argv: list[str] | None = None) -> int:
    args = _build_parser().parse_args(argv)

    try:
        settings = Settings.from_env()
        settings.configure_logging(args.log_level)
        ledger_path = Path(args.ledger) if args.ledger else settings.ledger_path

        if args.command == "args":
            config = _load_configuration(args)
            result: Any = compile_args(config, args.files, args.read_files, program=settings.executable)
        elif args.command == "validate":
            config = _load_configuration(args)
            validate_config(config, check_files=args.check_files, check_model=args.check_model)
            result = {"status": "ok", "options": config.to_dict()}
        elif args.command == "run":
            result = _run_task(args, settings, ledger_path)
        elif args.command == "history":
            ledger = TaskLedger.load(ledger_path)
            if args.summary:
                result = ledger.summary()
            else:
                tasks = ledger.query(task_type=args.type, status=args.status, since=args.since)
                result = [task.to_dict() for task in tasks]
        elif args.command == "show":
            result = TaskLedger.load(ledger_path).require(args.task_id).to_dict()
        elif args.command == "models":
            names = models.list_models(args.provider)
            result = [models.model_info(name) for name in names]
        else:
            raise AiderKitError(ErrorKind.VALIDATION, f"unknown command: {args.command}")

        print(json.dumps(result, ensure_ascii=False, indent=2))
        return 0
    except AiderKitError as exc:
        print(
            json.dumps(
                {"error_code": exc.code, "error_message": exc.message},
                ensure_ascii=False,
                indent=2,
            ),
            file=sys.stderr,
        )
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
