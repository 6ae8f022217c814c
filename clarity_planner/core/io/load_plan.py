from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import yaml

from clarity_planner.core.errors import PlanLoadError

PERSISTED_KEYS: tuple[str, ...] = ("title", "description", "tasks", "dependencies")


def load_plan(path: str) -> dict[str, Any]:
    """Load a YAML/JSON plan file.

    Returns a dict with the persisted keys (title, description, tasks,
    dependencies) that are present, plus ``__file__``. Does not coerce types;
    the validator owns shape checking.
    """

    p = Path(path)
    if not p.exists():
        raise PlanLoadError(
            code="E_FILE_NOT_FOUND",
            message="file does not exist",
            file=str(p),
        )

    suffix = p.suffix.lower()
    if suffix not in {".yaml", ".yml", ".json"}:
        raise PlanLoadError(
            code="E_UNSUPPORTED_FORMAT",
            message="supported formats are .yaml/.yml and .json",
            file=str(p),
        )

    try:
        raw_text = p.read_text(encoding="utf-8")
    except OSError as e:  # pragma: no cover
        raise PlanLoadError(code="E_FILE_READ", message=str(e), file=str(p)) from e

    try:
        if suffix == ".json":
            data = json.loads(raw_text)
        else:
            data = yaml.safe_load(raw_text)
    except (yaml.YAMLError, ValueError) as e:
        code = "E_JSON_PARSE" if suffix == ".json" else "E_YAML_PARSE"
        raise PlanLoadError(code=code, message=str(e), file=str(p)) from e

    if not isinstance(data, dict):
        raise PlanLoadError(
            code="E_INVALID_TOP_LEVEL",
            message="top-level document must be a mapping/object",
            file=str(p),
        )

    normalized: dict[str, Any] = {k: data[k] for k in PERSISTED_KEYS if k in data}
    normalized["__file__"] = str(p)
    return normalized
