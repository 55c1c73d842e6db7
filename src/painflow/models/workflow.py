"""Pydantic models for stage outputs.

These are the structured outputs the LLM backend asks the model for. Field
names are snake_case in Python and camelCase on the wire (``by_alias``),
matching what the web backend returns.
"""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

Severity = Literal["high", "medium", "low"]


class WireModel(BaseModel):
    """Base model using camelCase aliases on the wire."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_wire(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, mode="json")


class Pain(WireModel):
    """One identified business pain."""

    id: str = Field(description='Pain id in "P-001" form')
    title: str
    description: str
    severity: Severity
    category: str
    impact: str
    frequency: str
    background: str = Field(description="Why the problem arises: history and environment")
    root_cause: str = Field(description="Underlying cause rather than the symptom")


class PainStructure(WireModel):
    problem_domain: str
    stakeholders: list[str] = Field(default_factory=list)
    constraints: list[str] = Field(default_factory=list)
    dependencies: list[str] = Field(default_factory=list)


class PainAnalysis(WireModel):
    """pain-analysis stage output."""

    pains: list[Pain] = Field(default_factory=list)
    structural_analysis: PainStructure


class Solution(WireModel):
    """One designed solution, covering one or more pains."""

    id: str = Field(description='Solution id in "S-001" form')
    title: str
    description: str
    pain_ids: list[str] = Field(default_factory=list)
    approach: str
    technology: str
    priority: Severity
    effort: str
    impact: str
    background: str
    architecture: str
    feasibility: str


class SolutionStructure(WireModel):
    design_principles: list[str] = Field(default_factory=list)
    technical_approach: str
    risk_assessment: list[str] = Field(default_factory=list)
    success_metrics: list[str] = Field(default_factory=list)


class SolutionDesign(WireModel):
    """solution-design stage output."""

    solutions: list[Solution] = Field(default_factory=list)
    structural_analysis: SolutionStructure


class Agent(WireModel):
    """One AI agent specification."""

    id: str
    name: str = Field(description="kebab-case agent name, e.g. resume-parser")
    description: str
    capabilities: list[str] = Field(default_factory=list)
    solution_ids: list[str] = Field(default_factory=list)
    input_format: str
    output_format: str
    dependencies: list[str] = Field(default_factory=list)
    scalability: str


class AgentGeneration(WireModel):
    """agent-generation stage output."""

    agents: list[Agent] = Field(default_factory=list)


class ContainerPort(WireModel):
    container_port: int
    protocol: str = "TCP"


class EnvVar(WireModel):
    name: str
    value: str


class ResourceQuantities(WireModel):
    memory: str
    cpu: str


class Resources(WireModel):
    requests: ResourceQuantities
    limits: ResourceQuantities


class ManifestMetadata(WireModel):
    name: str
    labels: dict[str, str] = Field(default_factory=dict)


class ManifestSpec(WireModel):
    image: str = Field(description="Container image, gcr.io/<project>/<agent>:latest")
    ports: list[ContainerPort] = Field(default_factory=list)
    env: list[EnvVar] = Field(default_factory=list)
    resources: Resources


class Manifest(WireModel):
    api_version: str
    kind: str
    metadata: ManifestMetadata
    spec: ManifestSpec


class AgentManifest(WireModel):
    name: str
    manifest: Manifest


class ManifestGeneration(WireModel):
    """manifest-generation stage output."""

    agents: list[AgentManifest] = Field(default_factory=list)


class DeploymentService(WireModel):
    name: str
    image: str
    manifest: dict[str, Any]
    deploy_command: str
    build_command: str


class DeploymentPlan(WireModel):
    """deployment-prep stage output."""

    project_id: str
    region: str
    services: list[DeploymentService] = Field(default_factory=list)
    deployment_script: str
    status: Literal["ready"] = "ready"
