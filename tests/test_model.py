from datetime import datetime, timezone

from clarity_planner.core.errors import SelfDependency, ValidationError
from clarity_planner.core.model import Priority, Task, TaskDependency, parse_timestamp, sort_by_priority
from clarity_planner.core.status import TaskStatus


def test_task_defaults_and_trimmed_title():
    t = Task(id="t1", title="  Write docs  ")
    assert t.title == "Write docs"
    assert t.status is TaskStatus.TODO
    assert t.priority is Priority.P2
    assert t.tags == []
    assert t.estimate_hours is None


def test_task_rejects_blank_title():
    try:
        Task(id="t1", title="   ")
        assert False, "expected ValidationError"
    except ValidationError as e:
        assert e.field == "title"


def test_task_rejects_negative_estimate():
    try:
        Task(id="t1", title="x", estimate_hours=-1.0)
        assert False, "expected ValidationError"
    except ValidationError as e:
        assert e.field == "estimate_hours"


def test_task_accepts_zero_estimate():
    assert Task(id="t1", title="x", estimate_hours=0.0).estimate_hours == 0.0


def test_self_dependency_rejected():
    try:
        TaskDependency(task_id="a", depends_on="a")
        assert False, "expected SelfDependency"
    except SelfDependency as e:
        assert e.task_id == "a"
        assert e.message == "Task a cannot depend on itself"


def test_priority_ordering_by_severity():
    assert Priority.P0 > Priority.P1 > Priority.P2 > Priority.P3
    assert max(Priority) is Priority.P0
    assert str(Priority.P1) == "P1"


def test_sort_by_priority_is_stable():
    tasks = [
        Task(id="a", title="a", priority=Priority.P2),
        Task(id="b", title="b", priority=Priority.P0),
        Task(id="c", title="c", priority=Priority.P2),
        Task(id="d", title="d", priority=Priority.P3),
    ]
    assert [t.id for t in sort_by_priority(tasks)] == ["b", "a", "c", "d"]


def test_is_overdue():
    now = datetime(2025, 6, 1, tzinfo=timezone.utc)
    assert Task(id="a", title="a", due_date="2025-01-01T00:00:00Z").is_overdue(now)
    assert not Task(id="a", title="a", due_date="2026-01-01").is_overdue(now)
    assert not Task(id="a", title="a").is_overdue(now)
    assert not Task(id="a", title="a", due_date="not a date").is_overdue(now)
    done = Task(id="a", title="a", status=TaskStatus.DONE, due_date="2025-01-01")
    assert not done.is_overdue(now)


def test_parse_timestamp_naive_is_utc():
    ts = parse_timestamp("2025-03-04T05:06:07")
    assert ts == datetime(2025, 3, 4, 5, 6, 7, tzinfo=timezone.utc)
    assert parse_timestamp("garbage") is None


def test_task_converts_status_and_priority_codes():
    t = Task(id="a", title="a", status="done", priority="P0")
    assert t.status is TaskStatus.DONE
    assert t.priority is Priority.P0


def test_task_rejects_unknown_status_and_priority():
    try:
        Task(id="a", title="a", status="finished")
        assert False, "expected ValidationError"
    except ValidationError as e:
        assert e.field == "status"
    try:
        Task(id="a", title="a", priority="P9")
        assert False, "expected ValidationError"
    except ValidationError as e:
        assert e.field == "priority"


def test_task_rejects_nan_estimate():
    try:
        Task(id="a", title="a", estimate_hours=float("nan"))
        assert False, "expected ValidationError"
    except ValidationError as e:
        assert e.field == "estimate_hours"
        assert e.reason == "estimate must be a number"
