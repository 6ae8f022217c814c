from __future__ import annotations

from datetime import date, datetime
from typing import Any, Iterable, Optional

from clarity_planner.core.errors import PlanningError, ValidationError
from clarity_planner.core.model import ALLOWED_PRIORITIES, Priority, Task, TaskDependency
from clarity_planner.core.plan import Plan
from clarity_planner.core.status import ALLOWED_STATUSES, parse_status


def _is_list_of_str(v: Any) -> bool:
    return isinstance(v, list) and all(isinstance(x, str) for x in v)


def _is_number(v: Any) -> bool:
    return isinstance(v, (int, float)) and not isinstance(v, bool)


def validate_plan(data: Any) -> tuple[Optional[Plan], list[PlanningError]]:
    """Validate an untrusted plan mapping (``title``, ``description``, ``tasks``, ``dependencies``).

    Returns (plan, errors). Plan is None when errors exist. Shape problems
    are all collected first; only a well-shaped document reaches Plan
    construction, whose first failing check is returned on its own.
    """

    if not isinstance(data, dict):
        return None, [ValidationError(field="plan", reason="plan must be an object")]

    errors: list[PlanningError] = []

    title = data.get("title")
    if not isinstance(title, str):
        errors.append(ValidationError(field="title", reason="title is required and must be a string"))

    description = data.get("description", "")
    if description is None:
        description = ""
    if not isinstance(description, str):
        errors.append(ValidationError(field="description", reason="description must be a string"))

    raw_tasks = data.get("tasks")
    if not isinstance(raw_tasks, list):
        errors.append(ValidationError(field="tasks", reason="tasks is required and must be an array"))
        raw_tasks = []

    raw_deps = data.get("dependencies", [])
    if raw_deps is None:
        raw_deps = []
    if not isinstance(raw_deps, list):
        errors.append(ValidationError(field="dependencies", reason="dependencies must be an array"))
        raw_deps = []

    tasks: list[Task] = []
    for i, raw in enumerate(raw_tasks):
        task = _parse_task(raw, f"tasks[{i}]", errors)
        if task is not None:
            tasks.append(task)

    dependencies: list[TaskDependency] = []
    for i, raw in enumerate(raw_deps):
        dep = _parse_dependency(raw, f"dependencies[{i}]", errors)
        if dep is not None:
            dependencies.append(dep)

    if errors:
        return None, _sorted(errors)

    try:
        plan = Plan(title=title, description=description, tasks=tasks, dependencies=dependencies)
    except PlanningError as e:
        return None, [e]
    return plan, []


def _parse_task(raw: Any, path: str, errors: list[PlanningError]) -> Optional[Task]:
    if not isinstance(raw, dict):
        errors.append(ValidationError(field=path, reason="task must be an object"))
        return None

    before = len(errors)

    tid = raw.get("id")
    if not isinstance(tid, str) or not tid.strip():
        errors.append(
            ValidationError(field=f"{path}.id", reason="id is required and must be a non-empty string")
        )

    title = raw.get("title")
    if not isinstance(title, str):
        errors.append(ValidationError(field=f"{path}.title", reason="title is required and must be a string"))

    description = raw.get("description", "")
    if description is None:
        description = ""
    if not isinstance(description, str):
        errors.append(ValidationError(field=f"{path}.description", reason="description must be a string"))

    status_raw = raw.get("status", "todo")
    status = None
    if isinstance(status_raw, str):
        try:
            status = parse_status(status_raw)
        except ValueError:
            pass
    if status is None:
        errors.append(
            ValidationError(field=f"{path}.status", reason=f"status must be one of {list(ALLOWED_STATUSES)}")
        )

    priority_raw = raw.get("priority", "P2")
    priority = None
    if isinstance(priority_raw, str) and priority_raw.strip().upper() in ALLOWED_PRIORITIES:
        priority = Priority(priority_raw.strip().upper())
    else:
        errors.append(
            ValidationError(
                field=f"{path}.priority", reason=f"priority must be one of {list(ALLOWED_PRIORITIES)}"
            )
        )

    due_date = raw.get("due_date")
    if isinstance(due_date, (date, datetime)):
        # YAML resolves unquoted timestamps itself
        due_date = due_date.isoformat()
    if due_date is not None and not isinstance(due_date, str):
        errors.append(ValidationError(field=f"{path}.due_date", reason="due_date must be an ISO-8601 string"))

    estimate = raw.get("estimate_hours")
    if estimate is not None and not _is_number(estimate):
        errors.append(ValidationError(field=f"{path}.estimate_hours", reason="estimate_hours must be a number"))

    tags = raw.get("tags", [])
    if tags is None:
        tags = []
    if not _is_list_of_str(tags):
        errors.append(ValidationError(field=f"{path}.tags", reason="tags must be an array of strings"))

    if len(errors) > before:
        return None

    try:
        return Task(
            id=tid,
            title=title,
            description=description,
            status=status,
            priority=priority,
            due_date=due_date,
            estimate_hours=float(estimate) if estimate is not None else None,
            tags=list(tags),
        )
    except ValidationError as e:
        errors.append(ValidationError(field=f"{path}.{e.field}", reason=e.reason))
        return None


def _parse_dependency(raw: Any, path: str, errors: list[PlanningError]) -> Optional[TaskDependency]:
    if not isinstance(raw, dict):
        errors.append(ValidationError(field=path, reason="dependency must be an object"))
        return None

    task_id = raw.get("task_id")
    depends_on = raw.get("depends_on")
    ok = True
    if not isinstance(task_id, str) or not task_id:
        errors.append(ValidationError(field=f"{path}.task_id", reason="task_id must be a non-empty string"))
        ok = False
    if not isinstance(depends_on, str) or not depends_on:
        errors.append(
            ValidationError(field=f"{path}.depends_on", reason="depends_on must be a non-empty string")
        )
        ok = False
    if not ok:
        return None

    try:
        return TaskDependency(task_id=task_id, depends_on=depends_on)
    except PlanningError as e:
        errors.append(e)
        return None


def summarize_plan(plan: Plan) -> str:
    counts = {s: 0 for s in ALLOWED_STATUSES}
    for t in plan:
        counts[t.status.value] += 1
    parts = [f"{s}={counts[s]}" for s in ALLOWED_STATUSES]
    return f"OK: {len(plan)} tasks (" + ", ".join(parts) + f")\nDependencies: {len(plan.dependencies)}"


def _sorted(errors: Iterable[PlanningError]) -> list[PlanningError]:
    return sorted(
        list(errors),
        key=lambda e: (getattr(e, "field", "") or getattr(e, "task_id", ""), e.code),
    )
