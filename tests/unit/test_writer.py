"""Tests for writing run output."""

from __future__ import annotations

import os
from typing import TYPE_CHECKING, Any

import pytest
from ruamel.yaml import YAML

from painflow.artifacts import RunWriteError, RunWriter
from painflow.pipeline import Stage, StageStatus, WorkflowContext

if TYPE_CHECKING:
    from pathlib import Path


def _completed(stage_id: str, result: Any) -> Stage:
    return Stage(id=stage_id, name=stage_id, status=StageStatus.COMPLETED, result=result)


def test_writes_input_and_completed_stages(
    tmp_path: Path, pain_analysis: dict[str, Any]
) -> None:
    stages = (
        _completed("pain-analysis", pain_analysis),
        Stage(id="solution-design", name="Solution Design", status=StageStatus.ERROR, error="x"),
        Stage(id="agent-generation", name="Agent Generation"),
    )
    context = WorkflowContext(user_input="slow hiring", pain_analysis=pain_analysis)

    written = RunWriter(tmp_path / "out").write(stages, context)

    out = tmp_path / "out"
    assert written == [out / "input.txt", out / "pain-analysis.yaml"]
    assert (out / "input.txt").read_text() == "slow hiring\n"
    assert YAML(typ="safe").load(out / "pain-analysis.yaml") == pain_analysis


def test_writes_manifests_and_deploy_script(
    tmp_path: Path, manifest: dict[str, Any]
) -> None:
    script = "#!/bin/bash\nset -e\n"
    stages = (
        _completed("manifest-generation", manifest),
        _completed("deployment-prep", {"deploymentScript": script, "status": "ready"}),
    )
    context = WorkflowContext(user_input="x", manifest=manifest)

    written = RunWriter(tmp_path).write(stages, context)

    manifest_path = tmp_path / "manifests" / "resume-parser.yaml"
    assert manifest_path in written
    assert YAML(typ="safe").load(manifest_path)["kind"] == "Service"
    assert (tmp_path / "deploy.sh").read_text() == script
    if os.name == "posix":
        assert os.access(tmp_path / "deploy.sh", os.X_OK)


def test_manifest_names_are_sanitized(tmp_path: Path, manifest: dict[str, Any]) -> None:
    manifest["agents"][0]["name"] = "../evil name"
    context = WorkflowContext(manifest=manifest)

    RunWriter(tmp_path).write((), context)

    assert [p.name for p in (tmp_path / "manifests").iterdir()] == ["..-evil-name.yaml"]


def test_unwritable_output_raises(tmp_path: Path) -> None:
    blocker = tmp_path / "file"
    blocker.write_text("not a directory")

    with pytest.raises(RunWriteError, match="Failed to write run output"):
        RunWriter(blocker / "out").write((), WorkflowContext())
