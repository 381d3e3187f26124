# src/taskchat/tasks/task_models.py

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import Any


class TaskStatus(StrEnum):
    """
    Well-known task statuses.

    Status is stored as a plain string on Task so values written by other
    clients (e.g. "in_progress") survive a round-trip untouched.
    """

    PENDING = "pending"
    COMPLETED = "completed"


class TaskPriority(StrEnum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"

    @classmethod
    def parse(cls, raw: Any) -> TaskPriority | None:
        """Known priority, or None for empty or unrecognised input."""
        if not raw:
            return None
        try:
            return cls(str(raw).strip().lower())
        except ValueError:
            return None

    @classmethod
    def from_raw(cls, raw: Any) -> TaskPriority:
        return cls.parse(raw) or cls.MEDIUM


class TaskAction(StrEnum):
    ADD = "add"
    UPDATE = "update"
    DELETE = "delete"
    NONE = "none"

    @classmethod
    def from_raw(cls, raw: Any) -> TaskAction:
        s = str(raw or "").strip().lower()
        aliases = {
            "create": "add",
            "new": "add",
            "remove": "delete",
            "complete": "update",
            "edit": "update",
            "modify": "update",
        }
        s = aliases.get(s, s)
        try:
            return cls(s)
        except ValueError:
            return cls.NONE


# Fields a payload may overwrite on update; id and createdAt are immutable.
MUTABLE_FIELDS = ("title", "description", "priority", "status")


@dataclass(slots=True)
class Task:
    id: str
    title: str
    description: str
    priority: TaskPriority
    status: str
    created_at: str  # ISO-8601, UTC

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "priority": str(self.priority),
            "status": self.status,
            "createdAt": self.created_at,
        }

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> Task:
        return cls(
            id=str(raw.get("id", "")),
            title=str(raw.get("title") or ""),
            description=str(raw.get("description") or ""),
            priority=TaskPriority.from_raw(raw.get("priority")),
            status=str(raw.get("status") or TaskStatus.PENDING),
            created_at=str(raw.get("createdAt") or ""),
        )
