from __future__ import annotations

from typing import Iterable, Iterator, Optional

from clarity_planner.core.model import TaskDependency


def build_prerequisites(
    task_ids: Iterable[str], dependencies: Iterable[TaskDependency]
) -> dict[str, list[str]]:
    """task_id -> prerequisite ids, in edge order. Unknown endpoints are skipped."""
    graph: dict[str, list[str]] = {tid: [] for tid in task_ids}
    for dep in dependencies:
        if dep.task_id in graph and dep.depends_on in graph:
            graph[dep.task_id].append(dep.depends_on)
    return graph


def detect_cycle(
    task_ids: Iterable[str], dependencies: Iterable[TaskDependency]
) -> Optional[list[str]]:
    """Return a closed walk (first id == last id) if the edges form a cycle.

    Depth-first over task_id -> depends_on, rooted at every not-yet-visited
    task in the given order so disconnected components are all checked. The
    walk is explicit (no recursion), visiting neighbours in edge order.
    """
    graph = build_prerequisites(task_ids, dependencies)

    visited: set[str] = set()
    on_stack: set[str] = set()
    path: list[str] = []

    for root in graph:
        if root in visited:
            continue

        stack: list[tuple[str, Iterator[str]]] = [(root, iter(graph[root]))]
        visited.add(root)
        on_stack.add(root)
        path.append(root)

        while stack:
            node, neighbours = stack[-1]
            advanced = False
            for nxt in neighbours:
                if nxt in on_stack:
                    start = path.index(nxt)
                    return path[start:] + [nxt]
                if nxt not in visited:
                    visited.add(nxt)
                    on_stack.add(nxt)
                    path.append(nxt)
                    stack.append((nxt, iter(graph[nxt])))
                    advanced = True
                    break
            if not advanced:
                stack.pop()
                path.pop()
                on_stack.discard(node)

    return None
