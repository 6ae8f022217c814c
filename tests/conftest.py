import json
from pathlib import Path

import pytest
import yaml


def _task(tid, status="todo", **extra):
    t = {"id": tid, "title": f"Task {tid}", "status": status}
    t.update(extra)
    return t


def _chain_plan():
    # A depends on B, B depends on C
    return {
        "title": "Chain",
        "description": "three tasks in a line",
        "tasks": [_task("A"), _task("B"), _task("C")],
        "dependencies": [
            {"task_id": "A", "depends_on": "B"},
            {"task_id": "B", "depends_on": "C"},
        ],
    }


@pytest.fixture
def chain_plan():
    return _chain_plan()


@pytest.fixture
def write_plan_file(tmp_path: Path):
    def _write(data, name="plan.yaml"):
        p = tmp_path / name
        if p.suffix == ".json":
            p.write_text(json.dumps(data), encoding="utf-8")
        else:
            p.write_text(yaml.safe_dump(data, sort_keys=False), encoding="utf-8")
        return p

    return _write
