from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from functools import total_ordering
from typing import Iterable, Optional

from clarity_planner.core.errors import InvalidTransition, SelfDependency, ValidationError
from clarity_planner.core.status import TaskStatus, can_transition, valid_transitions


@total_ordering
class Priority(Enum):
    """Task priority, P0 most severe. Used for display ordering only."""

    P0 = "P0"
    P1 = "P1"
    P2 = "P2"
    P3 = "P3"

    @property
    def severity(self) -> int:
        return 3 - int(self.value[1])

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, Priority):
            return NotImplemented
        return self.severity < other.severity

    def __str__(self) -> str:
        return self.value


ALLOWED_PRIORITIES: tuple[str, ...] = tuple(p.value for p in Priority)


@dataclass(frozen=True)
class TaskDependency:
    """Edge meaning ``task_id`` cannot be ready until ``depends_on`` is done."""

    task_id: str
    depends_on: str

    def __post_init__(self) -> None:
        if self.task_id == self.depends_on:
            raise SelfDependency(task_id=self.task_id)


@dataclass
class Task:
    id: str
    title: str
    description: str = ""
    status: TaskStatus = TaskStatus.TODO
    priority: Priority = Priority.P2
    due_date: Optional[str] = None  # ISO-8601
    estimate_hours: Optional[float] = None
    tags: list[str] = field(default_factory=list)

    def __post_init__(self) -> None:
        title = self.title.strip()
        if not title:
            raise ValidationError(field="title", reason="title cannot be empty")
        try:
            self.status = TaskStatus(self.status)
        except ValueError:
            raise ValidationError(field="status", reason=f"unknown status: {self.status!r}") from None
        try:
            self.priority = Priority(self.priority)
        except ValueError:
            raise ValidationError(field="priority", reason=f"unknown priority: {self.priority!r}") from None
        if self.estimate_hours is not None:
            if math.isnan(self.estimate_hours):
                raise ValidationError(field="estimate_hours", reason="estimate must be a number")
            if self.estimate_hours < 0:
                raise ValidationError(field="estimate_hours", reason="estimate cannot be negative")
        self.title = title
        self.tags = list(self.tags)

    def transition_to(self, new_status: TaskStatus) -> "Task":
        """Move to ``new_status`` or raise InvalidTransition.

        Nothing is touched on the error path; on success only ``status``
        changes.
        """
        if not can_transition(self.status, new_status):
            raise InvalidTransition(
                from_status=self.status,
                to_status=new_status,
                valid_transitions=valid_transitions(self.status),
            )
        self.status = new_status
        return self

    def is_overdue(self, now: Optional[datetime] = None) -> bool:
        if self.status is TaskStatus.DONE or not self.due_date:
            return False
        due = parse_timestamp(self.due_date)
        if due is None:
            return False
        current = now or datetime.now(timezone.utc)
        if current.tzinfo is None:
            current = current.replace(tzinfo=timezone.utc)
        return due < current


def transition(task: Task, new_status: TaskStatus) -> Task:
    return task.transition_to(new_status)


def parse_timestamp(raw: str) -> Optional[datetime]:
    """Parse an ISO-8601 date or datetime; naive values are taken as UTC."""
    text = raw.strip()
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def sort_by_priority(tasks: Iterable[Task]) -> list[Task]:
    """Most severe first; ties keep their incoming order."""
    return sorted(tasks, key=lambda t: t.priority, reverse=True)
