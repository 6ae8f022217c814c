from __future__ import annotations

import logging
from dataclasses import replace
from datetime import datetime
from typing import Any, Iterable, Iterator, Optional

from clarity_planner.core.errors import (
    CyclicDependency,
    DuplicateId,
    MissingDependency,
    UnknownTask,
    ValidationError,
)
from clarity_planner.core.graph.cycles import detect_cycle
from clarity_planner.core.graph.order import topological_order
from clarity_planner.core.model import Task, TaskDependency
from clarity_planner.core.progress import progress
from clarity_planner.core.status import TaskStatus

logger = logging.getLogger(__name__)


class Plan:
    """Validated aggregate of tasks and dependency edges.

    Construction checks, in order: non-empty title, unique task ids, edge
    endpoints present, no dependency cycle. The first failing check is
    raised and no Plan is built. Tasks and edges cannot be added or removed
    afterwards; the only mutation is ``transition``. Build a new Plan to
    change the task set.
    """

    def __init__(
        self,
        title: str,
        description: str = "",
        tasks: Iterable[Task] = (),
        dependencies: Iterable[TaskDependency] = (),
    ) -> None:
        # The plan owns its tasks; callers keep their own objects.
        tasks = [replace(t) for t in tasks]
        dependencies = list(dependencies)

        trimmed = title.strip()
        if not trimmed:
            raise ValidationError(field="title", reason="title cannot be empty")

        index: dict[str, int] = {}
        for i, task in enumerate(tasks):
            if task.id in index:
                raise DuplicateId(id=task.id)
            index[task.id] = i

        for dep in dependencies:
            if dep.depends_on not in index:
                raise MissingDependency(task_id=dep.task_id, dependency_id=dep.depends_on)
            if dep.task_id not in index:
                raise MissingDependency(task_id=dep.task_id, dependency_id=dep.task_id)

        cycle = detect_cycle(index.keys(), dependencies)
        if cycle is not None:
            raise CyclicDependency(cycle=tuple(cycle))

        self.title = trimmed
        self.description = description
        self._tasks = tasks
        self._dependencies = dependencies
        self._index = index
        logger.debug(
            "plan %r built: %d tasks, %d dependencies", trimmed, len(tasks), len(dependencies)
        )

    @classmethod
    def from_serialized(cls, data: Any) -> "Plan":
        """Rebuild from the persisted mapping shape, re-running every check."""
        from clarity_planner.core.io.serialize import plan_from_dict

        return plan_from_dict(data)

    @property
    def tasks(self) -> tuple[Task, ...]:
        return tuple(replace(t) for t in self._tasks)

    @property
    def dependencies(self) -> tuple[TaskDependency, ...]:
        return tuple(self._dependencies)

    @property
    def task_ids(self) -> list[str]:
        return [t.id for t in self._tasks]

    def __len__(self) -> int:
        return len(self._tasks)

    def __iter__(self) -> Iterator[Task]:
        return (replace(t) for t in self._tasks)

    def __contains__(self, task_id: object) -> bool:
        return task_id in self._index

    def __repr__(self) -> str:
        return f"Plan(title={self.title!r}, tasks={len(self._tasks)}, dependencies={len(self._dependencies)})"

    def get(self, task_id: str) -> Task:
        """A copy of the task; change status through ``transition``."""
        return replace(self._task(task_id))

    def _task(self, task_id: str) -> Task:
        try:
            return self._tasks[self._index[task_id]]
        except KeyError:
            raise UnknownTask(task_id=task_id) from None

    def dependencies_of(self, task_id: str) -> list[str]:
        """Prerequisite ids of ``task_id``."""
        self._task(task_id)
        return [d.depends_on for d in self._dependencies if d.task_id == task_id]

    def dependents_of(self, task_id: str) -> list[str]:
        """Ids of tasks waiting on ``task_id``."""
        self._task(task_id)
        return [d.task_id for d in self._dependencies if d.depends_on == task_id]

    def transition(self, task_id: str, new_status: TaskStatus) -> Task:
        """Single mutation entry point. Callers serialize writers per plan."""
        task = self._task(task_id)
        old = task.status
        task.transition_to(new_status)
        logger.debug("task %s: %s -> %s", task_id, old.value, new_status.value)
        return replace(task)

    def topological_order(self) -> list[Task]:
        return [replace(t) for t in topological_order(self._tasks, self._dependencies)]

    def ready_tasks(self) -> list[Task]:
        return progress.ready_tasks(self)

    def blocked_tasks(self) -> list[Task]:
        return progress.blocked_tasks(self)

    def overdue_tasks(self, now: Optional[datetime] = None) -> list[Task]:
        return progress.overdue_tasks(self, now=now)

    def completion_percentage(self) -> float:
        return progress.completion_percentage(self)

    def total_estimate(self) -> float:
        return progress.total_estimate(self)
