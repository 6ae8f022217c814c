from __future__ import annotations

from collections import Counter
from dataclasses import dataclass
from datetime import datetime
from typing import TYPE_CHECKING, Any, Optional

from clarity_planner.core.model import Task
from clarity_planner.core.status import TaskStatus

if TYPE_CHECKING:
    from clarity_planner.core.plan import Plan


def ready_tasks(plan: "Plan") -> list[Task]:
    """Todo/InProgress tasks whose prerequisites are all Done.

    A task with no prerequisites is ready. Done and Blocked tasks never are,
    whatever their prerequisites look like.
    """
    status_by_id = {t.id: t.status for t in plan}
    pending: dict[str, list[str]] = {t.id: [] for t in plan}
    for dep in plan.dependencies:
        pending[dep.task_id].append(dep.depends_on)

    out: list[Task] = []
    for task in plan:
        if task.status not in (TaskStatus.TODO, TaskStatus.IN_PROGRESS):
            continue
        if all(status_by_id.get(d) is TaskStatus.DONE for d in pending[task.id]):
            out.append(task)
    return out


def blocked_tasks(plan: "Plan") -> list[Task]:
    """Tasks explicitly marked Blocked (not the same as having unmet prerequisites)."""
    return [t for t in plan if t.status is TaskStatus.BLOCKED]


def overdue_tasks(plan: "Plan", now: Optional[datetime] = None) -> list[Task]:
    return [t for t in plan if t.is_overdue(now)]


def completion_percentage(plan: "Plan") -> float:
    total = len(plan)
    if total == 0:
        return 0.0
    done = sum(1 for t in plan if t.status is TaskStatus.DONE)
    return done / total * 100.0


def total_estimate(plan: "Plan") -> float:
    return float(sum(t.estimate_hours for t in plan if t.estimate_hours is not None))


@dataclass(frozen=True)
class ProgressReport:
    title: str
    total: int
    status_counts: dict[str, int]
    completion_percentage: float
    total_estimate: float
    remaining_estimate: float
    ready: list[str]
    blocked: list[str]
    overdue: list[str]

    @property
    def is_complete(self) -> bool:
        return self.total > 0 and self.status_counts.get(TaskStatus.DONE.value, 0) == self.total

    @property
    def remaining(self) -> int:
        return self.total - self.status_counts.get(TaskStatus.DONE.value, 0)

    def to_dict(self) -> dict[str, Any]:
        return {
            "title": self.title,
            "total": self.total,
            "status_counts": dict(self.status_counts),
            "completion_percentage": self.completion_percentage,
            "total_estimate": self.total_estimate,
            "remaining_estimate": self.remaining_estimate,
            "remaining": self.remaining,
            "is_complete": self.is_complete,
            "ready": list(self.ready),
            "blocked": list(self.blocked),
            "overdue": list(self.overdue),
        }


def summarize_progress(plan: "Plan", now: Optional[datetime] = None) -> ProgressReport:
    counts = Counter(t.status.value for t in plan)
    remaining_estimate = sum(
        t.estimate_hours
        for t in plan
        if t.estimate_hours is not None and t.status is not TaskStatus.DONE
    )
    return ProgressReport(
        title=plan.title,
        total=len(plan),
        status_counts={s.value: int(counts.get(s.value, 0)) for s in TaskStatus},
        completion_percentage=completion_percentage(plan),
        total_estimate=total_estimate(plan),
        remaining_estimate=float(remaining_estimate),
        ready=[t.id for t in ready_tasks(plan)],
        blocked=[t.id for t in blocked_tasks(plan)],
        overdue=[t.id for t in overdue_tasks(plan, now)],
    )


def format_progress_text(report: ProgressReport) -> str:
    counts = ", ".join(f"{k}={v}" for k, v in report.status_counts.items())
    lines = [
        f"{report.title}: {report.completion_percentage:.1f}% complete ({report.total} tasks: {counts})",
        f"Estimate: {report.total_estimate:g}h total, {report.remaining_estimate:g}h remaining",
        "Ready: " + (", ".join(report.ready) or "-"),
        "Blocked: " + (", ".join(report.blocked) or "-"),
        "Overdue: " + (", ".join(report.overdue) or "-"),
    ]
    return "\n".join(lines)


def format_progress_markdown(report: ProgressReport) -> str:
    lines = [
        f"# {report.title}",
        "",
        f"**Completion:** {report.completion_percentage:.1f}%",
        "",
        "| Status | Count |",
        "|---|---|",
    ]
    lines += [f"| {k} | {v} |" for k, v in report.status_counts.items()]
    lines += [
        "",
        f"- Estimate: {report.total_estimate:g}h total, {report.remaining_estimate:g}h remaining",
        "- Ready: " + (", ".join(report.ready) or "none"),
        "- Blocked: " + (", ".join(report.blocked) or "none"),
        "- Overdue: " + (", ".join(report.overdue) or "none"),
    ]
    return "\n".join(lines)
