"""Deployment preparation: Cloud Run services and a deployment script."""

from __future__ import annotations

from typing import Any

from painflow.collaborators.base import CollaboratorError, require_fields
from painflow.models import DeploymentPlan, DeploymentService
from painflow.pipeline.config import DEFAULT_PROJECT_ID, DEFAULT_REGION
from painflow.pipeline.stages import DEPLOYMENT_PREP


def deploy_command(name: str, image: str, region: str) -> str:
    return (
        f"gcloud run deploy {name} --image {image} --region {region} "
        "--platform managed --allow-unauthenticated"
    )


def build_command(image: str) -> str:
    return f"docker build -t {image} . && docker push {image}"


def render_deployment_script(services: list[DeploymentService]) -> str:
    """Render a bash script deploying every service in order."""
    commands = "\n\n".join(
        f'echo "Deploying {service.name}..."\n{service.deploy_command}' for service in services
    )
    return (
        "#!/bin/bash\n"
        "set -e\n"
        "\n"
        'echo "Starting deployment of AI agents..."\n'
        "\n"
        f"{commands}\n"
        "\n"
        'echo "All agents deployed successfully!"\n'
    )


def prepare_deployment(
    manifest: dict[str, Any],
    *,
    project_id: str = DEFAULT_PROJECT_ID,
    region: str = DEFAULT_REGION,
) -> DeploymentPlan:
    """Turn generated manifests into a deployment plan.

    Args:
        manifest: manifest-generation output (``{"agents": [{name, manifest}]}``).
        project_id: Cloud project the services deploy to.
        region: Cloud Run region.

    Raises:
        CollaboratorError: If an agent entry lacks a name or container image.
    """
    services: list[DeploymentService] = []
    for agent in manifest.get("agents") or []:
        try:
            name = agent["name"]
            agent_manifest = agent["manifest"]
            image = agent_manifest["spec"]["image"]
        except (KeyError, TypeError) as e:
            raise CollaboratorError(
                DEPLOYMENT_PREP, f"Manifest entry is missing {e}"
            ) from e
        services.append(
            DeploymentService(
                name=name,
                image=image,
                manifest=agent_manifest,
                deploy_command=deploy_command(name, image, region),
                build_command=build_command(image),
            )
        )

    return DeploymentPlan(
        project_id=project_id,
        region=region,
        services=services,
        deployment_script=render_deployment_script(services),
    )


class DeploymentPrep:
    """deployment-prep collaborator computed locally."""

    def __init__(self, project_id: str = DEFAULT_PROJECT_ID, region: str = DEFAULT_REGION) -> None:
        self.project_id = project_id
        self.region = region

    async def __call__(self, payload: dict[str, Any]) -> dict[str, Any]:
        require_fields(DEPLOYMENT_PREP, payload, "manifest", message="Manifest data is required")
        plan = prepare_deployment(payload["manifest"], project_id=self.project_id, region=self.region)
        return plan.to_wire()
