from __future__ import annotations

from dataclasses import asdict, dataclass, fields
from typing import TYPE_CHECKING, Any, ClassVar, Optional

if TYPE_CHECKING:
    from clarity_planner.core.status import TaskStatus


@dataclass(frozen=True)
class PlanningError(Exception):
    """Base error for plan construction, queries and status changes.

    Every subclass carries the structured context a caller needs to render
    its own message (ids, states) plus a stable machine-readable ``code``.
    """

    code: ClassVar[str] = "E_PLANNING"

    @property
    def message(self) -> str:
        return "planning error"

    def __str__(self) -> str:
        return f"{self.code}: {self.message}"

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {"code": self.code, "message": self.message}
        for f in fields(self):
            out[f.name] = _plain(getattr(self, f.name))
        return out


@dataclass(frozen=True)
class CyclicDependency(PlanningError):
    cycle: tuple[str, ...]

    code: ClassVar[str] = "E_CYCLIC_DEPENDENCY"

    @property
    def message(self) -> str:
        return "Cyclic dependency detected: " + " -> ".join(self.cycle)


@dataclass(frozen=True)
class InvalidTransition(PlanningError):
    from_status: "TaskStatus"
    to_status: "TaskStatus"
    valid_transitions: tuple["TaskStatus", ...]

    code: ClassVar[str] = "E_INVALID_TRANSITION"

    @property
    def message(self) -> str:
        valid = ", ".join(s.value for s in self.valid_transitions) or "none"
        return (
            f"Invalid transition from {self.from_status.value} to {self.to_status.value}. "
            f"Valid transitions: {valid}"
        )


@dataclass(frozen=True)
class DuplicateId(PlanningError):
    id: str

    code: ClassVar[str] = "E_DUPLICATE_ID"

    @property
    def message(self) -> str:
        return f"Duplicate task ID: {self.id}"


@dataclass(frozen=True)
class MissingDependency(PlanningError):
    task_id: str
    dependency_id: str

    code: ClassVar[str] = "E_MISSING_DEPENDENCY"

    @property
    def message(self) -> str:
        if self.task_id == self.dependency_id:
            return f"Dependency edge references non-existent task {self.task_id}"
        return f"Task {self.task_id} depends on non-existent task {self.dependency_id}"


@dataclass(frozen=True)
class SelfDependency(PlanningError):
    task_id: str

    code: ClassVar[str] = "E_SELF_DEPENDENCY"

    @property
    def message(self) -> str:
        return f"Task {self.task_id} cannot depend on itself"


@dataclass(frozen=True)
class ValidationError(PlanningError):
    field: str
    reason: str

    code: ClassVar[str] = "E_VALIDATION"

    @property
    def message(self) -> str:
        return f"Validation failed for field '{self.field}': {self.reason}"


@dataclass(frozen=True)
class UnknownTask(PlanningError):
    task_id: str

    code: ClassVar[str] = "E_UNKNOWN_TASK"

    @property
    def message(self) -> str:
        return f"Task {self.task_id} is not part of this plan"


@dataclass(frozen=True)
class UnknownFormat(PlanningError):
    format: str
    allowed: tuple[str, ...]

    code: ClassVar[str] = "E_UNKNOWN_FORMAT"

    @property
    def message(self) -> str:
        return f"unknown format: {self.format} (choose one of: {', '.join(self.allowed)})"


@dataclass(frozen=True)
class PlanLoadError(Exception):
    """File-level failure while reading a plan document."""

    code: str
    message: str
    file: Optional[str] = None

    def __str__(self) -> str:
        loc = self.file or "<plan>"
        return f"{loc}: {self.code}: {self.message}"

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


def _plain(v: Any) -> Any:
    if isinstance(v, (list, tuple)):
        return [_plain(x) for x in v]
    return getattr(v, "value", v)
