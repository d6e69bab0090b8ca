from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Sequence


@dataclass(frozen=True, slots=True)
class RunResult:
    stdout: str
    stderr: str = ""
    exit_code: int = 0

    @property
    def ok(self) -> bool:
        return self.exit_code == 0


class ProcessRunner(ABC):
    """Runs a compiled argv; captured mode blocks until the process exits."""

    @abstractmethod
    def run(self, argv: Sequence[str]) -> RunResult:
        raise NotImplementedError

    @abstractmethod
    def spawn(self, argv: Sequence[str]) -> Any:
        raise NotImplementedError
