"""Pydantic models for stage outputs."""

from painflow.models.workflow import (
    Agent,
    AgentGeneration,
    AgentManifest,
    DeploymentPlan,
    DeploymentService,
    Manifest,
    ManifestGeneration,
    Pain,
    PainAnalysis,
    PainStructure,
    Solution,
    SolutionDesign,
    SolutionStructure,
    WireModel,
)

__all__ = [
    "Agent",
    "AgentGeneration",
    "AgentManifest",
    "DeploymentPlan",
    "DeploymentService",
    "Manifest",
    "ManifestGeneration",
    "Pain",
    "PainAnalysis",
    "PainStructure",
    "Solution",
    "SolutionDesign",
    "SolutionStructure",
    "WireModel",
]
