from __future__ import annotations

import logging
from datetime import datetime
from pathlib import Path
from typing import Any, Callable, Iterable, Mapping, TypeVar

from .client import AiderClient
from .constants import TASK_PRESETS
from .errors import AiderKitError, ErrorKind
from .ledger import TaskLedger
from .task import Checkpoint, Step, Task, TaskStatus, TaskType, coerce_step, step_description

logger = logging.getLogger(__name__)

T = TypeVar("T")


def preset_overrides(task_type: TaskType | str, overrides: Mapping[str, Any] | None = None) -> dict[str, Any]:
    """Category preset with caller overrides layered on top."""
    merged = dict(TASK_PRESETS[TaskType(task_type).value])
    if overrides:
        merged.update(overrides)
    return merged


class TaskExecutor:
    def __init__(self, client: AiderClient, ledger: TaskLedger | None = None) -> None:
        self.client = client
        self.ledger = ledger if ledger is not None else TaskLedger()

    def execute_coding_task(
        self, description: str, files: Iterable[str | Path] = (), overrides: Mapping[str, Any] | None = None
    ) -> str:
        return self.execute_task(TaskType.CODING, description, files, overrides)

    def execute_refactoring_task(
        self, description: str, files: Iterable[str | Path] = (), overrides: Mapping[str, Any] | None = None
    ) -> str:
        return self.execute_task(TaskType.REFACTORING, description, files, overrides)

    def execute_debugging_task(
        self, description: str, files: Iterable[str | Path] = (), overrides: Mapping[str, Any] | None = None
    ) -> str:
        return self.execute_task(TaskType.DEBUGGING, description, files, overrides)

    def execute_documentation_task(
        self, description: str, files: Iterable[str | Path] = (), overrides: Mapping[str, Any] | None = None
    ) -> str:
        return self.execute_task(TaskType.DOCUMENTATION, description, files, overrides)

    def execute_test_generation_task(
        self, description: str, files: Iterable[str | Path] = (), overrides: Mapping[str, Any] | None = None
    ) -> str:
        return self.execute_task(TaskType.TEST_GENERATION, description, files, overrides)

    def execute_task(
        self,
        task_type: TaskType | str,
        description: str,
        files: Iterable[str | Path] = (),
        overrides: Mapping[str, Any] | None = None,
    ) -> str:
        task_type = TaskType(task_type)
        if task_type == TaskType.MULTI_STEP:
            raise AiderKitError(ErrorKind.VALIDATION, "use execute_multi_step_task for multi-step tasks")
        paths = [str(path) for path in files]
        merged = preset_overrides(task_type, overrides)
        task = self.ledger.append(Task(type=task_type, description=description, files=paths))
        return self._track(task, lambda: self.client.execute(description, merged, files=paths))

    def execute_multi_step_task(
        self,
        steps: Iterable[Any],
        files: Iterable[str | Path] = (),
        overrides: Mapping[str, Any] | None = None,
    ) -> list[str]:
        """Run each step in order; the first failing step fails the whole task.

        Steps given as :class:`Checkpoint` (or ``{"description": ...}``) get
        their result and completion time recorded before the next step runs.
        """
        plan = [_fresh(coerce_step(step)) for step in steps]
        paths = [str(path) for path in files]
        merged = preset_overrides(TaskType.MULTI_STEP, overrides)
        task = self.ledger.append(
            Task(
                type=TaskType.MULTI_STEP,
                description=f"Multi-step task with {len(plan)} steps",
                files=paths,
                steps=plan,
            )
        )

        def run_steps() -> list[str]:
            results: list[str] = []
            for index, step in enumerate(task.steps):
                output = self.client.execute(step_description(step), merged, files=paths)
                results.append(output)
                if isinstance(step, Checkpoint):
                    task.record_checkpoint(index, output)
                logger.debug("task %s step %d/%d done", task.id, index + 1, len(task.steps))
            return results

        return self._track(task, run_steps)

    def history(
        self,
        task_type: TaskType | str | None = None,
        status: TaskStatus | str | None = None,
        since: datetime | str | None = None,
    ) -> list[Task]:
        return self.ledger.query(task_type=task_type, status=status, since=since)

    def get_task(self, task_id: str) -> Task | None:
        return self.ledger.get(task_id)

    def _track(self, task: Task, action: Callable[[], T]) -> T:
        task.start()
        try:
            result = action()
        except Exception as exc:
            task.fail(exc)
            raise
        task.complete(result)
        return result


def _fresh(step: Step) -> Step:
    return Checkpoint(step.description) if isinstance(step, Checkpoint) else step
