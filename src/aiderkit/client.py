from __future__ import annotations

import logging
import shlex
from pathlib import Path
from typing import Any, Iterable, Mapping

from .adapters.base import ProcessRunner
from .adapters.process import SubprocessRunner
from .compiler import INVOCATION_FLAGS, compile_args, invocation_args
from .config import Configuration, select_paths
from .constants import PROGRAM_NAME
from .errors import AiderKitError, ErrorKind

logger = logging.getLogger(__name__)

SECRET_FLAGS = frozenset({"--openai-api-key", "--anthropic-api-key", "--analytics-posthog-project-api-key"})


class AiderClient:
    """Owns one configuration plus editable/read-only file lists and runs aider with them."""

    def __init__(
        self,
        config: Configuration | None = None,
        runner: ProcessRunner | None = None,
        executable: str = PROGRAM_NAME,
    ) -> None:
        self.config = config or Configuration()
        self.runner = runner or SubprocessRunner()
        self.executable = executable
        self.files: list[str] = []
        self.read_only_files: list[str] = []

    def add_files(self, paths: str | Path | Iterable[str | Path]) -> AiderClient:
        self.files.extend(_as_strings(paths))
        return self

    def add_read_only_files(self, paths: str | Path | Iterable[str | Path]) -> AiderClient:
        self.read_only_files.extend(_as_strings(paths))
        return self

    def add_folder(
        self,
        folder: Path,
        extensions: Iterable[str] | None = None,
        exclude: Iterable[str] = (),
        read_only: bool = False,
    ) -> AiderClient:
        found = sorted(str(path) for path in folder.rglob("*") if path.is_file())
        selected = select_paths(found, extensions=extensions, exclude=exclude)
        target = self.read_only_files if read_only else self.files
        target.extend(selected)
        return self

    def build_args(
        self,
        overrides: Mapping[str, Any] | None = None,
        files: Iterable[str | Path] = (),
    ) -> list[str]:
        config = self.config.merged(_config_overrides(overrides))
        args = compile_args(
            config,
            files=[*self.files, *_as_strings(files)],
            read_only_files=self.read_only_files,
            program=self.executable,
        )
        args.extend(invocation_args(overrides))
        return args

    def execute(
        self,
        message: str,
        overrides: Mapping[str, Any] | None = None,
        files: Iterable[str | Path] = (),
    ) -> str:
        args = self.build_args(overrides, files)
        args.extend(["--message", message])
        return self._run(args)

    def execute_from_file(self, message_file: str | Path, overrides: Mapping[str, Any] | None = None) -> str:
        args = self.build_args(overrides)
        args.extend(["--message-file", str(message_file)])
        return self._run(args)

    def apply_changes(self, path: str | Path, overrides: Mapping[str, Any] | None = None) -> str:
        args = self.build_args(overrides)
        args.extend(["--apply", str(path)])
        return self._run(args)

    def show_repo_map(self, overrides: Mapping[str, Any] | None = None) -> str:
        return self._run([*self.build_args(overrides), "--show-repo-map"])

    def show_prompts(self, overrides: Mapping[str, Any] | None = None) -> str:
        return self._run([*self.build_args(overrides), "--show-prompts"])

    def list_models(self, provider: str | None = None) -> str:
        args = [self.executable, "--list-models"]
        if provider:
            args.append(provider)
        return self._run(args)

    def check_update(self) -> str:
        return self._run([self.executable, "--check-update"])

    def upgrade(self) -> str:
        return self._run([self.executable, "--upgrade"])

    def interactive(self, overrides: Mapping[str, Any] | None = None) -> Any:
        """Hand the terminal to a long-lived aider session; the caller owns the handle."""
        args = self.build_args(overrides)
        self._log_invocation(args)
        return self.runner.spawn(args)

    def _run(self, args: list[str]) -> str:
        self._log_invocation(args)
        result = self.runner.run(args)
        if not result.ok:
            raise AiderKitError(
                ErrorKind.EXECUTION,
                f"aider command failed (exit {result.exit_code}): {result.stderr.strip()}",
            )
        return result.stdout

    def _log_invocation(self, args: list[str]) -> None:
        level = logging.INFO if self.config.verbose else logging.DEBUG
        logger.log(level, "executing: %s", shlex.join(_redacted(args)))


def _redacted(args: list[str]) -> list[str]:
    out = list(args)
    for idx, token in enumerate(out[:-1]):
        if token in SECRET_FLAGS:
            out[idx + 1] = "***"
    return out


def _config_overrides(overrides: Mapping[str, Any] | None) -> dict[str, Any]:
    if not overrides:
        return {}
    return {key: value for key, value in overrides.items() if key not in INVOCATION_FLAGS}


def _as_strings(paths: str | Path | Iterable[str | Path]) -> list[str]:
    if isinstance(paths, (str, Path)):
        return [str(paths)]
    return [str(path) for path in paths]
