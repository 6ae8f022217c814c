from __future__ import annotations

import logging
from collections import deque
from typing import Sequence

from clarity_planner.core.errors import CyclicDependency
from clarity_planner.core.graph.cycles import detect_cycle
from clarity_planner.core.model import Task, TaskDependency

logger = logging.getLogger(__name__)


def topological_order(tasks: Sequence[Task], dependencies: Sequence[TaskDependency]) -> list[Task]:
    """Order tasks so every prerequisite comes strictly before its dependents.

    Kahn's algorithm. Ties are broken by task insertion order, so the result
    is deterministic for a given plan. A plan is acyclic by construction; if
    a cycle still shows up here it is reported as CyclicDependency instead of
    returning a truncated order.
    """
    if not tasks:
        return []

    by_id: dict[str, Task] = {t.id: t for t in tasks}
    # prerequisite -> dependents
    dependents: dict[str, list[str]] = {t.id: [] for t in tasks}
    in_degree: dict[str, int] = {t.id: 0 for t in tasks}

    for dep in dependencies:
        if dep.task_id not in by_id or dep.depends_on not in by_id:
            continue
        dependents[dep.depends_on].append(dep.task_id)
        in_degree[dep.task_id] += 1

    queue: deque[str] = deque(t.id for t in tasks if in_degree[t.id] == 0)
    result: list[Task] = []

    while queue:
        cur = queue.popleft()
        result.append(by_id[cur])
        for nxt in dependents[cur]:
            in_degree[nxt] -= 1
            if in_degree[nxt] == 0:
                queue.append(nxt)

    if len(result) != len(tasks):
        cycle = detect_cycle([t.id for t in tasks], dependencies) or []
        logger.warning(
            "topological sort emitted %d of %d tasks; cycle: %s",
            len(result),
            len(tasks),
            " -> ".join(cycle),
        )
        raise CyclicDependency(cycle=tuple(cycle))

    return result
