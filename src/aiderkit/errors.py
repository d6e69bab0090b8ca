from __future__ import annotations

from enum import Enum


class ErrorKind(str, Enum):
    CONFIGURATION = "configuration"
    EXECUTION = "execution"
    FILE = "file"
    VALIDATION = "validation"
    TASK_NOT_FOUND = "task_not_found"
    INVALID_TRANSITION = "invalid_transition"
    DUPLICATE_TASK = "duplicate_task"
    STORE = "store"


class AiderKitError(Exception):
    """Domain error tagged with a stable kind."""

    def __init__(self, kind: ErrorKind, message: str) -> None:
        super().__init__(message)
        self.kind = kind
        self.message = message

    @property
    def code(self) -> str:
        return self.kind.value.upper()
