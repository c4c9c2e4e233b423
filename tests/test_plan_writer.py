import json

from videoscript.core.plan_writer import project_summary, resolve_plan_frames, write_plan


def test_project_summary(package):
    summary = project_summary(package)
    assert summary["name"] == "Demo Short"
    assert summary["duration_seconds"] == 4.0
    assert summary["prototypes"] == 5
    assert summary["media_files"] == 3
    assert summary["compositions"] == [[0, 30], [30, 120]]


def test_resolve_plan_frames_batches_preserve_order(package):
    states = resolve_plan_frames(package, [40, 0, 35], workers=2, batch_size=2)
    assert [s.frame for s in states] == [40, 0, 35]


def test_write_plan(tmp_path, package):
    output = tmp_path / "plans" / "demo.json"
    outcome = write_plan(package, [0, 45], output)

    assert outcome.plan_path == output
    assert outcome.frame_count == 2
    plan = json.loads(output.read_text(encoding="utf-8"))
    assert plan["meta"]["frame_count"] == 2
    assert plan["meta"]["package_version"] == "1.0.0"
    assert [f["frame"] for f in plan["frames"]] == [0, 45]
    kinds = [e["kind"] for e in plan["frames"][0]["elements"]]
    assert kinds == ["scenery", "prop", "character"]


def test_serial_and_threaded_plans_match(package):
    frames = [0, 15, 30, 75]
    assert resolve_plan_frames(package, frames) == resolve_plan_frames(package, frames, workers=3, batch_size=2)
