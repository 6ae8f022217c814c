from __future__ import annotations

import json
from typing import Any, Optional, Union

import typer

from clarity_planner.config import load_settings
from clarity_planner.core.errors import PlanLoadError, PlanningError, UnknownFormat, ValidationError
from clarity_planner.core.io.load_plan import load_plan
from clarity_planner.core.io.serialize import task_to_dict, write_plan
from clarity_planner.core.model import sort_by_priority
from clarity_planner.core.plan import Plan
from clarity_planner.core.progress.progress import (
    format_progress_markdown,
    format_progress_text,
    summarize_progress,
)
from clarity_planner.core.status import ALLOWED_STATUSES, parse_status
from clarity_planner.core.validate.validate_plan import summarize_plan, validate_plan
from clarity_planner.logging_setup import setup_logging

TOOL = "clarity-plan"

AnyError = Union[PlanLoadError, PlanningError]

app = typer.Typer(add_completion=False, no_args_is_help=True)


@app.callback()
def _callback() -> None:
    """Plan dependency graph CLI."""
    settings = load_settings()
    setup_logging(settings.log_level, settings.log_file)


def _resolve_format(fmt: Optional[str], allowed: tuple[str, ...]) -> str:
    chosen = fmt or load_settings().output_format
    if chosen not in allowed:
        err = UnknownFormat(format=chosen, allowed=allowed)
        _print_errors([err])
        raise typer.Exit(code=2)
    return chosen


def _to_item(e: AnyError) -> dict[str, Any]:
    item = e.to_dict()
    item["source"] = "load" if isinstance(e, PlanLoadError) else "plan"
    return item


def _emit_json(command: str, ok: bool, *, exit_code: int, errors: list[AnyError], **extra: Any) -> None:
    payload: dict[str, Any] = {
        "tool": TOOL,
        "command": command,
        "ok": ok,
        "error_count": len(errors),
        "errors": [_to_item(e) for e in errors],
    }
    payload.update(extra)
    typer.echo(json.dumps(payload, indent=2, sort_keys=True))
    raise typer.Exit(code=exit_code)


def _load_valid_plan(command: str, path: str, fmt: str) -> tuple[Plan, str]:
    """Load + validate ``path`` or exit (1 on load errors, 2 on plan errors)."""
    try:
        raw = load_plan(path)
    except PlanLoadError as e:
        if fmt == "json":
            _emit_json(command, False, exit_code=1, errors=[e])
        _print_errors([e])
        raise typer.Exit(code=1)

    plan, errors = validate_plan(raw)
    if errors or plan is None:
        if fmt == "json":
            _emit_json(command, False, exit_code=2, errors=list(errors))
        _print_errors(list(errors), file=raw.get("__file__"))
        raise typer.Exit(code=2)
    return plan, raw["__file__"]


@app.command("validate")
def validate(
    path: str = typer.Argument(..., help="Path to a plan file (.yaml/.yml/.json)"),
    format: Optional[str] = typer.Option(None, "--format", help="Output format: text|json"),
) -> None:
    """Validate a plan file: ids, dependency endpoints and acyclicity."""
    fmt = _resolve_format(format, ("text", "json"))
    plan, _ = _load_valid_plan("validate", path, fmt)

    if fmt == "text":
        typer.echo(summarize_plan(plan))
        return

    report = summarize_progress(plan)
    _emit_json(
        "validate",
        True,
        exit_code=0,
        errors=[],
        summary={
            "title": plan.title,
            "task_count": len(plan),
            "dependency_count": len(plan.dependencies),
            "status_counts": report.status_counts,
        },
    )


@app.command("order")
def order(
    path: str = typer.Argument(..., help="Path to a plan file (.yaml/.yml/.json)"),
    format: Optional[str] = typer.Option(None, "--format", help="Output format: text|json"),
) -> None:
    """Print tasks in dependency order (prerequisites first)."""
    fmt = _resolve_format(format, ("text", "json"))
    plan, file = _load_valid_plan("order", path, fmt)

    try:
        ordered = plan.topological_order()
    except PlanningError as e:
        if fmt == "json":
            _emit_json("order", False, exit_code=2, errors=[e])
        _print_errors([e], file=file)
        raise typer.Exit(code=2)

    if fmt == "json":
        _emit_json("order", True, exit_code=0, errors=[], order=[t.id for t in ordered])
    for t in ordered:
        typer.echo(f"{t.id}\t{t.status.value}\t{t.title}")


@app.command("ready")
def ready(
    path: str = typer.Argument(..., help="Path to a plan file (.yaml/.yml/.json)"),
    format: Optional[str] = typer.Option(None, "--format", help="Output format: text|json"),
) -> None:
    """List tasks that can be worked on now, most severe priority first."""
    fmt = _resolve_format(format, ("text", "json"))
    plan, _ = _load_valid_plan("ready", path, fmt)

    tasks = sort_by_priority(plan.ready_tasks())
    if fmt == "json":
        _emit_json("ready", True, exit_code=0, errors=[], tasks=[task_to_dict(t) for t in tasks])
    if not tasks:
        typer.echo("No ready tasks")
        return
    for t in tasks:
        typer.echo(f"{t.id}\t{t.priority.value}\t{t.status.value}\t{t.title}")


@app.command("progress")
def progress(
    path: str = typer.Argument(..., help="Path to a plan file (.yaml/.yml/.json)"),
    format: Optional[str] = typer.Option(None, "--format", help="Output format: text|json|markdown"),
) -> None:
    """Show completion, estimates, ready/blocked/overdue tasks."""
    fmt = _resolve_format(format, ("text", "json", "markdown"))
    plan, _ = _load_valid_plan("progress", path, fmt)

    report = summarize_progress(plan)
    if fmt == "json":
        _emit_json("progress", True, exit_code=0, errors=[], progress=report.to_dict())
    if fmt == "markdown":
        typer.echo(format_progress_markdown(report))
        return
    typer.echo(format_progress_text(report))


@app.command("transition")
def transition(
    path: str = typer.Argument(..., help="Path to a plan file (.yaml/.yml/.json)"),
    task_id: str = typer.Argument(..., help="Task to move"),
    status: str = typer.Argument(..., help=f"Target status: {'|'.join(ALLOWED_STATUSES)}"),
    out: Optional[str] = typer.Option(None, "--out", help="Write the updated plan here instead of PATH"),
    format: Optional[str] = typer.Option(None, "--format", help="Output format: text|json"),
) -> None:
    """Change one task's status and write the plan back."""
    fmt = _resolve_format(format, ("text", "json"))
    plan, file = _load_valid_plan("transition", path, fmt)

    try:
        target = parse_status(status)
    except ValueError:
        target = None

    try:
        if target is None:
            raise ValidationError(
                field="status", reason=f"status must be one of {list(ALLOWED_STATUSES)}"
            )
        before = plan.get(task_id).status
        task = plan.transition(task_id, target)
    except PlanningError as e:
        if fmt == "json":
            _emit_json("transition", False, exit_code=2, errors=[e])
        _print_errors([e], file=file)
        raise typer.Exit(code=2)

    dest = out or file
    write_plan(plan, dest)

    if fmt == "json":
        _emit_json(
            "transition",
            True,
            exit_code=0,
            errors=[],
            task=task_to_dict(task),
            previous_status=before.value,
            written_to=dest,
        )
    typer.echo(f"OK: {task.id} {before.value} -> {task.status.value}")


def _print_errors(errors: list[AnyError], file: Optional[str] = None) -> None:
    for e in errors:
        if file and not isinstance(e, PlanLoadError):
            typer.echo(f"{file}: {e}", err=True)
        else:
            typer.echo(str(e), err=True)


def main() -> None:
    app(prog_name=TOOL)


cli = typer.main.get_command(app)

if __name__ == "__main__":
    main()
