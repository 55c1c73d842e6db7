"""Tests for deployment preparation."""

from __future__ import annotations

from typing import Any

import pytest

from painflow.collaborators import CollaboratorError, DeploymentPrep, prepare_deployment
from painflow.collaborators.deployment import (
    build_command,
    deploy_command,
    render_deployment_script,
)
from tests.fixtures.stage_results import make_agent_manifest


def test_deploy_command() -> None:
    assert deploy_command("resume-parser", "gcr.io/p/resume-parser:latest", "asia-northeast1") == (
        "gcloud run deploy resume-parser --image gcr.io/p/resume-parser:latest "
        "--region asia-northeast1 --platform managed --allow-unauthenticated"
    )


def test_build_command() -> None:
    assert build_command("gcr.io/p/a:latest") == (
        "docker build -t gcr.io/p/a:latest . && docker push gcr.io/p/a:latest"
    )


def test_prepare_deployment_one_service_per_agent() -> None:
    manifest = {"agents": [make_agent_manifest("parser"), make_agent_manifest("ranker")]}

    plan = prepare_deployment(manifest, project_id="hiring", region="europe-west1")

    assert [s.name for s in plan.services] == ["parser", "ranker"]
    assert plan.project_id == "hiring"
    assert plan.status == "ready"
    assert plan.services[0].image == "gcr.io/project-id/parser:latest"
    assert "--region europe-west1" in plan.services[1].deploy_command
    assert plan.services[0].manifest == manifest["agents"][0]["manifest"]


def test_deployment_script_layout() -> None:
    plan = prepare_deployment({"agents": [make_agent_manifest("parser")]})

    script = plan.deployment_script

    assert script.startswith("#!/bin/bash\nset -e\n\n")
    assert 'echo "Deploying parser..."\ngcloud run deploy parser ' in script
    assert script.endswith('echo "All agents deployed successfully!"\n')


def test_script_separates_services_with_blank_line() -> None:
    plan = prepare_deployment(
        {"agents": [make_agent_manifest("a"), make_agent_manifest("b")]}
    )

    assert render_deployment_script(plan.services).count("\n\necho \"Deploying") == 2


def test_no_agents_gives_empty_plan() -> None:
    plan = prepare_deployment({"agents": []})

    assert plan.services == []
    assert plan.deployment_script.startswith("#!/bin/bash")


@pytest.mark.parametrize("broken", [{"manifest": {}}, {"name": "x", "manifest": {"spec": {}}}])
def test_incomplete_entry_raises(broken: dict[str, Any]) -> None:
    with pytest.raises(CollaboratorError, match="Manifest entry is missing"):
        prepare_deployment({"agents": [broken]})


@pytest.mark.asyncio
async def test_collaborator_returns_wire_plan(manifest: dict[str, Any]) -> None:
    prep = DeploymentPrep(project_id="hiring", region="asia-northeast1")

    result = await prep({"manifest": manifest})

    assert result["projectId"] == "hiring"
    assert result["status"] == "ready"
    assert result["services"][0]["deployCommand"].startswith("gcloud run deploy resume-parser")
    assert result["services"][0]["buildCommand"].startswith("docker build")
    assert result["deploymentScript"].startswith("#!/bin/bash")


@pytest.mark.asyncio
async def test_collaborator_requires_manifest() -> None:
    with pytest.raises(CollaboratorError, match="Manifest data is required"):
        await DeploymentPrep()({"manifest": None})
