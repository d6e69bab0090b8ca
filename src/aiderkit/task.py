from __future__ import annotations

import itertools
import logging
import secrets
import time
from dataclasses import dataclass, field, replace
from datetime import datetime
from enum import Enum
from typing import Any, Mapping

from .errors import AiderKitError, ErrorKind
from .utils import as_utc, from_iso, to_iso, utc_now

logger = logging.getLogger(__name__)

_SEQUENCE = itertools.count(1)


class TaskType(str, Enum):
    CODING = "coding"
    REFACTORING = "refactoring"
    DEBUGGING = "debugging"
    DOCUMENTATION = "documentation"
    TEST_GENERATION = "test_generation"
    MULTI_STEP = "multi_step"


class TaskStatus(str, Enum):
    PENDING = "pending"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"


TERMINAL_STATUSES = frozenset({TaskStatus.COMPLETED, TaskStatus.FAILED})


def new_task_id() -> str:
    """Epoch milliseconds, a per-process sequence and a random suffix."""
    millis = time.time_ns() // 1_000_000
    return f"task_{millis}_{next(_SEQUENCE)}_{secrets.token_hex(3)}"


@dataclass
class Checkpoint:
    description: str
    result: Any = None
    completed_at: datetime | None = None

    def __post_init__(self) -> None:
        if self.completed_at is not None:
            self.completed_at = as_utc(self.completed_at)

    @property
    def done(self) -> bool:
        return self.completed_at is not None

    def to_dict(self) -> dict[str, Any]:
        return {
            "description": self.description,
            "result": self.result,
            "completed_at": to_iso(self.completed_at),
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Checkpoint:
        return cls(
            description=str(data["description"]),
            result=data.get("result"),
            completed_at=from_iso(data.get("completed_at")),
        )


Step = Checkpoint | str


def coerce_step(step: Any) -> Step:
    if isinstance(step, Checkpoint):
        return replace(step)
    if isinstance(step, str):
        return step
    if isinstance(step, Mapping):
        return Checkpoint.from_dict(step)
    return str(step)


def step_description(step: Step) -> str:
    return step.description if isinstance(step, Checkpoint) else step


@dataclass
class Task:
    type: TaskType
    description: str
    files: list[str] = field(default_factory=list)
    steps: list[Step] = field(default_factory=list)
    id: str = field(default_factory=new_task_id)
    status: TaskStatus = TaskStatus.PENDING
    result: Any = None
    error: str | None = None
    created_at: datetime = field(default_factory=utc_now)
    completed_at: datetime | None = None
    failed_at: datetime | None = None

    def __post_init__(self) -> None:
        self.type = TaskType(self.type)
        self.status = TaskStatus(self.status)
        self.files = [str(path) for path in self.files]
        self.steps = [coerce_step(step) for step in self.steps]
        self.created_at = as_utc(self.created_at)
        if self.completed_at is not None:
            self.completed_at = as_utc(self.completed_at)
        if self.failed_at is not None:
            self.failed_at = as_utc(self.failed_at)

    @property
    def finished(self) -> bool:
        return self.status in TERMINAL_STATUSES

    def start(self) -> None:
        if self.finished:
            raise AiderKitError(
                ErrorKind.INVALID_TRANSITION,
                f"task {self.id} is {self.status.value}; reset it before starting again",
            )
        self.status = TaskStatus.RUNNING
        logger.info("task %s running (%s)", self.id, self.type.value)

    def complete(self, result: Any) -> None:
        self._require_running("complete")
        self.status = TaskStatus.COMPLETED
        self.result = result
        self.completed_at = utc_now()
        logger.info("task %s completed", self.id)

    def fail(self, error: BaseException | str) -> None:
        self._require_running("fail")
        self.status = TaskStatus.FAILED
        if isinstance(error, BaseException):
            self.error = getattr(error, "message", None) or str(error)
        else:
            self.error = str(error)
        self.failed_at = utc_now()
        logger.warning("task %s failed: %s", self.id, self.error)

    def reset(self) -> None:
        """Return the task to ``pending`` and forget any previous outcome."""
        self.status = TaskStatus.PENDING
        self.result = None
        self.error = None
        self.completed_at = None
        self.failed_at = None
        for step in self.steps:
            if isinstance(step, Checkpoint):
                step.result = None
                step.completed_at = None

    def record_checkpoint(self, index: int, result: Any) -> None:
        self._require_running("record a checkpoint for")
        try:
            step = self.steps[index]
        except IndexError as exc:
            raise AiderKitError(ErrorKind.INVALID_TRANSITION, f"task {self.id} has no step {index}") from exc
        if not isinstance(step, Checkpoint):
            raise AiderKitError(ErrorKind.INVALID_TRANSITION, f"step {index} of task {self.id} is not a checkpoint")
        if step.done:
            raise AiderKitError(ErrorKind.INVALID_TRANSITION, f"step {index} of task {self.id} is already recorded")
        for earlier in self.steps[:index]:
            if isinstance(earlier, Checkpoint) and not earlier.done:
                raise AiderKitError(
                    ErrorKind.INVALID_TRANSITION,
                    f"step {index} of task {self.id} recorded before an earlier checkpoint",
                )
        step.result = result
        step.completed_at = utc_now()

    def _require_running(self, verb: str) -> None:
        if self.status != TaskStatus.RUNNING:
            raise AiderKitError(
                ErrorKind.INVALID_TRANSITION,
                f"cannot {verb} task {self.id} with status={self.status.value}",
            )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "type": self.type.value,
            "description": self.description,
            "files": list(self.files),
            "status": self.status.value,
            "steps": [step.to_dict() if isinstance(step, Checkpoint) else step for step in self.steps],
            "result": self.result,
            "error": self.error,
            "created_at": to_iso(self.created_at),
            "completed_at": to_iso(self.completed_at),
            "failed_at": to_iso(self.failed_at),
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Task:
        return cls(
            id=data["id"],
            type=TaskType(data["type"]),
            description=data["description"],
            files=list(data.get("files") or []),
            steps=list(data.get("steps") or []),
            status=TaskStatus(data["status"]),
            result=data.get("result"),
            error=data.get("error"),
            created_at=from_iso(data["created_at"]),
            completed_at=from_iso(data.get("completed_at")),
            failed_at=from_iso(data.get("failed_at")),
        )
