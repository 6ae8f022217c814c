from __future__ import annotations

import json
import os
import stat
import tempfile
from pathlib import Path
from typing import IO, Any, Callable, cast

import yaml

from clarity_planner.core.errors import ValidationError
from clarity_planner.core.model import Task
from clarity_planner.core.plan import Plan
from clarity_planner.core.validate.validate_plan import validate_plan


def task_to_dict(task: Task) -> dict[str, Any]:
    return {
        "id": task.id,
        "title": task.title,
        "description": task.description,
        "status": task.status.value,
        "priority": task.priority.value,
        "due_date": task.due_date,
        "estimate_hours": task.estimate_hours,
        "tags": list(task.tags),
    }


def plan_to_dict(plan: Plan) -> dict[str, Any]:
    return {
        "title": plan.title,
        "description": plan.description,
        "tasks": [task_to_dict(t) for t in plan],
        "dependencies": [
            {"task_id": d.task_id, "depends_on": d.depends_on} for d in plan.dependencies
        ],
    }


def plan_from_dict(data: Any) -> Plan:
    """Build a Plan from persisted data; raises the first validation error.

    Stored data is untrusted: it goes through the same checks as a freshly
    built plan.
    """
    plan, errors = validate_plan(data)
    if errors:
        raise errors[0]
    return cast(Plan, plan)


def plan_to_json(plan: Plan) -> str:
    return json.dumps(plan_to_dict(plan), indent=2)


def plan_from_json(text: str) -> Plan:
    try:
        data = json.loads(text)
    except ValueError as e:
        raise ValidationError(
            field="deserialization", reason=f"JSON deserialization failed: {e}"
        ) from e
    if not isinstance(data, dict):
        raise ValidationError(field="deserialization", reason="top-level JSON value must be an object")
    return plan_from_dict(data)


def _atomic_write(path: str, write: Callable[[IO[str]], None]) -> None:
    """Write to a temp file beside ``path``, then swap it in. A failed dump leaves the old file as it was."""
    target = Path(path)
    fd, tmp = tempfile.mkstemp(prefix=f".{target.name}.", suffix=".tmp", dir=str(target.parent))
    try:
        if target.exists():
            os.chmod(tmp, stat.S_IMODE(target.stat().st_mode))
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            write(f)
        os.replace(tmp, target)
    except BaseException:
        if os.path.exists(tmp):
            os.unlink(tmp)
        raise


def dump_plan_yaml(plan: dict[str, Any], path: str) -> None:
    _atomic_write(
        path,
        lambda f: yaml.safe_dump(plan, f, sort_keys=False, default_flow_style=False, allow_unicode=True),
    )


def dump_plan_json(plan: dict[str, Any], path: str) -> None:
    def _write(f: IO[str]) -> None:
        json.dump(plan, f, indent=2)
        f.write("\n")

    _atomic_write(path, _write)


def write_plan(plan: Plan, path: str) -> None:
    p = Path(path)
    if str(p.parent) not in (".", ""):
        p.parent.mkdir(parents=True, exist_ok=True)
    if p.suffix.lower() == ".json":
        dump_plan_json(plan_to_dict(plan), str(p))
    else:
        dump_plan_yaml(plan_to_dict(plan), str(p))
