# src/taskchat/tasks/task_store.py

from __future__ import annotations

import logging
import time
from datetime import UTC, datetime
from typing import Any

from ..core.ports import KeyValueStore
from .task_models import MUTABLE_FIELDS, Task, TaskAction, TaskPriority, TaskStatus

logger = logging.getLogger(__name__)

TASKS_KEY = "tasks"


def _utc_now_iso() -> str:
    # 2024-05-01T12:00:00.000Z
    return datetime.now(UTC).isoformat(timespec="milliseconds").replace("+00:00", "Z")


class TaskStore:
    """
    Ordered task collection for one user, persisted under the "tasks" key.

    Every mutation is read-modify-write of the whole list; the full collection
    is written back before apply() returns, so later reads never see a partial
    state. Callers are expected to serialize access per user (see core/state.py).
    """

    def __init__(self, store: KeyValueStore) -> None:
        self._store = store

    # ---- low-level helpers ----

    def _load(self) -> list[Task]:
        raw = self._store.get(TASKS_KEY) or []
        if not isinstance(raw, list):
            logger.warning("Stored tasks are not a list (%s); treating as empty.", type(raw).__name__)
            return []
        return [Task.from_dict(item) for item in raw if isinstance(item, dict)]

    def _save(self, tasks: list[Task]) -> None:
        self._store.put(TASKS_KEY, [t.to_dict() for t in tasks])

    @staticmethod
    def _next_id(tasks: list[Task]) -> str:
        """
        Millisecond timestamp id, bumped past the highest numeric id in use
        so two adds within the same millisecond never collide.
        """
        candidate = int(time.time() * 1000)
        for t in tasks:
            if t.id.isdigit():
                candidate = max(candidate, int(t.id) + 1)
        taken = {t.id for t in tasks}
        while str(candidate) in taken:
            candidate += 1
        return str(candidate)

    @staticmethod
    def _find_index(tasks: list[Task], task_id: Any) -> int:
        if task_id is None:
            return -1
        wanted = str(task_id)
        for i, t in enumerate(tasks):
            if t.id == wanted:
                return i
        return -1

    # ---- public API ----

    def list(self) -> list[Task]:
        return self._load()

    def list_dicts(self) -> list[dict[str, Any]]:
        return [t.to_dict() for t in self._load()]

    def add(self, payload: dict[str, Any]) -> Task:
        tasks = self._load()
        task = Task(
            id=self._next_id(tasks),
            title=str(payload.get("title") or "Untitled Task"),
            description=str(payload.get("description") or ""),
            priority=TaskPriority.from_raw(payload.get("priority")),
            status=str(payload.get("status") or TaskStatus.PENDING),
            created_at=_utc_now_iso(),
        )
        tasks.append(task)
        self._save(tasks)
        logger.info("Task added id=%s priority=%s", task.id, task.priority)
        return task

    def update(self, task_id: Any, fields: dict[str, Any]) -> Task | None:
        tasks = self._load()
        idx = self._find_index(tasks, task_id)
        if idx == -1:
            logger.info("Update ignored: no task with id=%s", task_id)
            return None

        task = tasks[idx]
        for name in MUTABLE_FIELDS:
            if name not in fields or fields[name] is None:
                continue
            value = fields[name]
            if name == "priority":
                priority = TaskPriority.parse(value)
                if priority is None:
                    logger.info("Ignoring unknown priority %r for task id=%s", value, task.id)
                    continue
                task.priority = priority
            else:
                setattr(task, name, str(value))

        self._save(tasks)
        logger.info("Task updated id=%s fields=%s", task.id, sorted(k for k in fields if k in MUTABLE_FIELDS))
        return task

    def delete(self, task_id: Any) -> bool:
        tasks = self._load()
        idx = self._find_index(tasks, task_id)
        if idx == -1:
            logger.info("Delete ignored: no task with id=%s", task_id)
            return False

        removed = tasks.pop(idx)
        self._save(tasks)
        logger.info("Task deleted id=%s", removed.id)
        return True

    def apply(self, action: TaskAction | str, payload: dict[str, Any] | None) -> list[Task]:
        """
        Apply one add/update/delete and return the post-mutation collection.

        update/delete against an unknown (or missing) id leave the collection
        unchanged. "none" is accepted and is a no-op.
        """
        act = TaskAction.from_raw(action)
        data = dict(payload or {})

        if act is TaskAction.ADD:
            self.add(data)
        elif act is TaskAction.UPDATE:
            # Wire format may nest the fields under "updates".
            updates = data.get("updates")
            fields = dict(updates) if isinstance(updates, dict) else {}
            fields.update({k: v for k, v in data.items() if k != "updates"})
            self.update(data.get("id"), fields)
        elif act is TaskAction.DELETE:
            self.delete(data.get("id"))

        return self._load()
