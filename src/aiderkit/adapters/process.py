from __future__ import annotations

import subprocess
from typing import Sequence

from ..errors import AiderKitError, ErrorKind
from .base import ProcessRunner, RunResult


class SubprocessRunner(ProcessRunner):
    def __init__(self, timeout_seconds: float | None = None) -> None:
        self.timeout_seconds = timeout_seconds

    def run(self, argv: Sequence[str]) -> RunResult:
        try:
            completed = subprocess.run(
                list(argv),
                capture_output=True,
                text=True,
                encoding="utf-8",
                errors="replace",
                timeout=self.timeout_seconds,
                check=False,
            )
        except subprocess.TimeoutExpired as exc:
            raise AiderKitError(
                ErrorKind.EXECUTION,
                f"{argv[0]} timed out after {self.timeout_seconds}s",
            ) from exc
        except OSError as exc:
            raise _launch_error(argv, exc) from exc
        return RunResult(stdout=completed.stdout or "", stderr=completed.stderr or "", exit_code=completed.returncode)

    def spawn(self, argv: Sequence[str]) -> subprocess.Popen[bytes]:
        try:
            return subprocess.Popen(list(argv))
        except OSError as exc:
            raise _launch_error(argv, exc) from exc


def _launch_error(argv: Sequence[str], exc: OSError) -> AiderKitError:
    head = argv[0] if argv else "<empty>"
    if isinstance(exc, FileNotFoundError):
        return AiderKitError(ErrorKind.EXECUTION, f"{head} command not found; install aider first")
    if isinstance(exc, PermissionError):
        return AiderKitError(ErrorKind.EXECUTION, f"permission denied when executing {head}")
    return AiderKitError(ErrorKind.EXECUTION, f"failed to start {head}: {exc}")
