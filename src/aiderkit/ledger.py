from __future__ import annotations

import json
import logging
from datetime import datetime
from pathlib import Path
from typing import Any, Iterable, Iterator

from jsonschema import ValidationError, validate

from .constants import LEDGER_RECORD_KEYS
from .errors import AiderKitError, ErrorKind
from .store import read_text_if_exists, write_text
from .task import Task, TaskStatus, TaskType
from .utils import as_utc

logger = logging.getLogger(__name__)

_NULLABLE_TIMESTAMP = {"type": ["string", "null"], "minLength": 1}

TASK_RECORD_SCHEMA: dict[str, Any] = {
    "type": "object",
    "required": list(LEDGER_RECORD_KEYS),
    "properties": {
        "id": {"type": "string", "minLength": 1},
        "type": {"enum": [member.value for member in TaskType]},
        "description": {"type": "string"},
        "files": {"type": "array", "items": {"type": "string"}},
        "status": {"enum": [member.value for member in TaskStatus]},
        "steps": {
            "type": "array",
            "items": {
                "anyOf": [
                    {"type": "string"},
                    {
                        "type": "object",
                        "required": ["description"],
                        "properties": {
                            "description": {"type": "string"},
                            "completed_at": _NULLABLE_TIMESTAMP,
                        },
                    },
                ]
            },
        },
        "error": {"type": ["string", "null"]},
        "created_at": {"type": "string", "minLength": 1},
        "completed_at": _NULLABLE_TIMESTAMP,
        "failed_at": _NULLABLE_TIMESTAMP,
    },
}

LEDGER_SCHEMA: dict[str, Any] = {"type": "array", "items": TASK_RECORD_SCHEMA}


def _index_counts(tasks: list[Task], key: str) -> dict[str, int]:
    out: dict[str, int] = {}
    for task in tasks:
        value = getattr(task, key).value
        out[value] = out.get(value, 0) + 1
    return dict(sorted(out.items(), key=lambda item: item[0]))


def _since(value: datetime | str) -> datetime:
    if isinstance(value, str):
        try:
            value = datetime.fromisoformat(value)
        except ValueError as exc:
            raise AiderKitError(ErrorKind.VALIDATION, f"invalid timestamp: {value}") from exc
    return as_utc(value)


class TaskLedger:
    """Append-only, insertion-ordered collection of tasks."""

    def __init__(self, tasks: Iterable[Task] = ()) -> None:
        self._tasks: list[Task] = []
        self._ids: set[str] = set()
        for task in tasks:
            self.append(task)

    def __len__(self) -> int:
        return len(self._tasks)

    def __iter__(self) -> Iterator[Task]:
        return iter(list(self._tasks))

    @property
    def tasks(self) -> list[Task]:
        return list(self._tasks)

    def append(self, task: Task) -> Task:
        if task.id in self._ids:
            raise AiderKitError(ErrorKind.DUPLICATE_TASK, f"task already exists: {task.id}")
        self._tasks.append(task)
        self._ids.add(task.id)
        return task

    def get(self, task_id: str) -> Task | None:
        if task_id not in self._ids:
            return None
        for task in self._tasks:
            if task.id == task_id:
                return task
        return None

    def require(self, task_id: str) -> Task:
        task = self.get(task_id)
        if task is None:
            raise AiderKitError(ErrorKind.TASK_NOT_FOUND, f"task_id not found: {task_id}")
        return task

    def query(
        self,
        task_type: TaskType | str | None = None,
        status: TaskStatus | str | None = None,
        since: datetime | str | None = None,
    ) -> list[Task]:
        """Tasks matching every supplied filter, in ledger order."""
        wanted_type = TaskType(task_type) if task_type is not None else None
        wanted_status = TaskStatus(status) if status is not None else None
        threshold = _since(since) if since is not None else None

        selected: list[Task] = []
        for task in self._tasks:
            if wanted_type is not None and task.type != wanted_type:
                continue
            if wanted_status is not None and task.status != wanted_status:
                continue
            if threshold is not None and task.created_at < threshold:
                continue
            selected.append(task)
        return selected

    def summary(self) -> dict[str, Any]:
        return {
            "tasks": len(self._tasks),
            "by_status": _index_counts(self._tasks, "status"),
            "by_type": _index_counts(self._tasks, "type"),
        }

    def export_records(self) -> list[dict[str, Any]]:
        return [task.to_dict() for task in self._tasks]

    def export_json(self) -> str:
        return json.dumps(self.export_records(), ensure_ascii=False, indent=2)

    def import_json(self, text: str) -> list[Task]:
        """Append every task in ``text``; nothing is appended if any record is bad."""
        try:
            records = json.loads(text)
        except json.JSONDecodeError as exc:
            raise AiderKitError(ErrorKind.STORE, f"invalid ledger JSON: {exc}") from exc
        return self.import_records(records)

    def import_records(self, records: Any) -> list[Task]:
        try:
            validate(records, LEDGER_SCHEMA)
        except ValidationError as exc:
            raise AiderKitError(ErrorKind.STORE, f"invalid ledger record: {exc.message}") from exc

        batch: list[Task] = []
        seen = set(self._ids)
        for idx, record in enumerate(records):
            try:
                task = Task.from_dict(record)
            except ValueError as exc:
                raise AiderKitError(ErrorKind.STORE, f"invalid ledger record {idx}: {exc}") from exc
            if task.id in seen:
                raise AiderKitError(ErrorKind.DUPLICATE_TASK, f"task already exists: {task.id}")
            seen.add(task.id)
            batch.append(task)

        for task in batch:
            self.append(task)
        logger.info("imported %d tasks into ledger", len(batch))
        return batch

    def save(self, path: Path) -> None:
        write_text(path, self.export_json() + "\n")

    @classmethod
    def load(cls, path: Path) -> TaskLedger:
        ledger = cls()
        text = read_text_if_exists(path)
        if text is not None and text.strip():
            ledger.import_json(text)
        return ledger
