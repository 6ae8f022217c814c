import json

import yaml
from typer.testing import CliRunner

from clarity_planner.cli import app

runner = CliRunner()


def test_cli_transition_in_place(write_plan_file, chain_plan):
    p = write_plan_file(chain_plan)
    r = runner.invoke(app, ["transition", str(p), "C", "in_progress"])
    assert r.exit_code == 0, r.stdout + r.stderr
    assert "OK: C todo -> in_progress" in r.stdout

    saved = yaml.safe_load(p.read_text(encoding="utf-8"))
    statuses = {t["id"]: t["status"] for t in saved["tasks"]}
    assert statuses == {"A": "todo", "B": "todo", "C": "in_progress"}
    assert len(saved["dependencies"]) == 2


def test_cli_transition_to_out_file(tmp_path, write_plan_file, chain_plan):
    p = write_plan_file(chain_plan)
    out = tmp_path / "next.json"
    r = runner.invoke(app, ["transition", str(p), "A", "blocked", "--out", str(out), "--format", "json"])
    assert r.exit_code == 0
    payload = json.loads(r.stdout)
    assert payload["previous_status"] == "todo"
    assert payload["task"]["status"] == "blocked"

    written = json.loads(out.read_text(encoding="utf-8"))
    assert written["tasks"][0]["status"] == "blocked"
    original = yaml.safe_load(p.read_text(encoding="utf-8"))
    assert original["tasks"][0]["status"] == "todo"


def test_cli_transition_invalid_leaves_file_alone(write_plan_file, chain_plan):
    p = write_plan_file(chain_plan)
    before = p.read_text(encoding="utf-8")
    r = runner.invoke(app, ["transition", str(p), "C", "done"])
    assert r.exit_code == 2
    assert "E_INVALID_TRANSITION" in (r.stdout + r.stderr)
    assert p.read_text(encoding="utf-8") == before


def test_cli_transition_unknown_task(write_plan_file, chain_plan):
    p = write_plan_file(chain_plan)
    r = runner.invoke(app, ["transition", str(p), "Z", "done", "--format", "json"])
    assert r.exit_code == 2
    payload = json.loads(r.stdout)
    assert payload["errors"][0]["code"] == "E_UNKNOWN_TASK"


def test_cli_transition_unknown_status(write_plan_file, chain_plan):
    p = write_plan_file(chain_plan)
    r = runner.invoke(app, ["transition", str(p), "C", "finished"])
    assert r.exit_code == 2
    assert "E_VALIDATION" in (r.stdout + r.stderr)
