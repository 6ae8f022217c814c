from __future__ import annotations

from enum import Enum


class TaskStatus(str, Enum):
    TODO = "todo"
    IN_PROGRESS = "in_progress"
    DONE = "done"
    BLOCKED = "blocked"

    @property
    def is_terminal(self) -> bool:
        return not TRANSITIONS[self]

    def __str__(self) -> str:
        return self.value


# Exhaustive: every status is a key, successors listed in a fixed order.
TRANSITIONS: dict[TaskStatus, tuple[TaskStatus, ...]] = {
    TaskStatus.TODO: (TaskStatus.IN_PROGRESS, TaskStatus.BLOCKED),
    TaskStatus.IN_PROGRESS: (TaskStatus.DONE, TaskStatus.BLOCKED),
    TaskStatus.BLOCKED: (TaskStatus.TODO, TaskStatus.IN_PROGRESS),
    TaskStatus.DONE: (),
}

ALLOWED_STATUSES: tuple[str, ...] = tuple(s.value for s in TaskStatus)


def valid_transitions(status: TaskStatus) -> tuple[TaskStatus, ...]:
    return TRANSITIONS[status]


def can_transition(from_status: TaskStatus, to_status: TaskStatus) -> bool:
    """Pure and total over the two enum values; Done has no successors."""
    return to_status in TRANSITIONS[from_status]


def parse_status(raw: str) -> TaskStatus:
    """Map a persisted status code (``in_progress``) onto TaskStatus.

    Raises ValueError for unknown codes; callers turn that into a
    field-level validation error.
    """
    return TaskStatus(raw.strip().lower())
