from dataclasses import asdict

from clarity_planner.core.errors import InvalidTransition
from clarity_planner.core.model import Task, transition
from clarity_planner.core.status import TRANSITIONS, TaskStatus, can_transition, valid_transitions


def test_transition_table_covers_every_status():
    assert set(TRANSITIONS) == set(TaskStatus)


def test_valid_transitions_table():
    assert valid_transitions(TaskStatus.TODO) == (TaskStatus.IN_PROGRESS, TaskStatus.BLOCKED)
    assert valid_transitions(TaskStatus.IN_PROGRESS) == (TaskStatus.DONE, TaskStatus.BLOCKED)
    assert valid_transitions(TaskStatus.BLOCKED) == (TaskStatus.TODO, TaskStatus.IN_PROGRESS)
    assert valid_transitions(TaskStatus.DONE) == ()


def test_can_transition_is_total():
    for a in TaskStatus:
        for b in TaskStatus:
            assert can_transition(a, b) == (b in TRANSITIONS[a])


def test_done_is_terminal():
    assert TaskStatus.DONE.is_terminal
    assert not TaskStatus.TODO.is_terminal
    for target in TaskStatus:
        assert not can_transition(TaskStatus.DONE, target)


def test_task_transition_todo_to_in_progress():
    task = Task(id="t1", title="Task")
    task.transition_to(TaskStatus.IN_PROGRESS)
    assert task.status is TaskStatus.IN_PROGRESS


def test_task_full_lifecycle():
    task = Task(id="t1", title="Task")
    for s in (TaskStatus.BLOCKED, TaskStatus.TODO, TaskStatus.IN_PROGRESS, TaskStatus.DONE):
        transition(task, s)
    assert task.status is TaskStatus.DONE


def test_invalid_transition_leaves_task_unchanged():
    task = Task(id="t1", title="Task", tags=["x"], estimate_hours=2.0)
    before = asdict(task)
    try:
        task.transition_to(TaskStatus.DONE)
        assert False, "expected InvalidTransition"
    except InvalidTransition as e:
        assert e.from_status is TaskStatus.TODO
        assert e.to_status is TaskStatus.DONE
        assert e.valid_transitions == (TaskStatus.IN_PROGRESS, TaskStatus.BLOCKED)
    assert asdict(task) == before


def test_done_task_cannot_move():
    for target in TaskStatus:
        task = Task(id="t1", title="Task", status=TaskStatus.DONE)
        try:
            task.transition_to(target)
            assert False, "expected InvalidTransition"
        except InvalidTransition as e:
            assert e.valid_transitions == ()
            assert "Valid transitions: none" in str(e)
        assert task.status is TaskStatus.DONE


def test_invalid_transition_error_payload():
    e = InvalidTransition(
        from_status=TaskStatus.TODO,
        to_status=TaskStatus.DONE,
        valid_transitions=(TaskStatus.IN_PROGRESS, TaskStatus.BLOCKED),
    )
    d = e.to_dict()
    assert d["code"] == "E_INVALID_TRANSITION"
    assert d["from_status"] == "todo"
    assert d["valid_transitions"] == ["in_progress", "blocked"]
    assert str(e) == (
        "E_INVALID_TRANSITION: Invalid transition from todo to done. "
        "Valid transitions: in_progress, blocked"
    )
