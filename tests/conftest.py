"""Pytest configuration and shared fixtures."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import pytest

from tests.fixtures.stage_results import make_agent_manifest


@pytest.fixture(autouse=True)
def clear_painflow_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep developer environment overrides out of the tests."""
    for name in ("PAINFLOW_BACKEND", "PAINFLOW_BACKEND_URL", "PAINFLOW_PROVIDER"):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def project_root() -> Path:
    """Return the project root directory."""
    return Path(__file__).parent.parent


@pytest.fixture
def pain_analysis() -> dict[str, Any]:
    return {
        "pains": [
            {
                "id": "P-001",
                "title": "Candidate profiles are not comparable",
                "description": "Resumes arrive in many formats.",
                "severity": "high",
                "category": "quality",
                "impact": "Slow shortlisting",
                "frequency": "daily",
                "background": "No shared template",
                "rootCause": "Unstructured intake",
            }
        ],
        "structuralAnalysis": {
            "problemDomain": "recruiting",
            "stakeholders": ["recruiters"],
            "constraints": ["privacy"],
            "dependencies": [],
        },
    }


@pytest.fixture
def solution_design() -> dict[str, Any]:
    return {
        "solutions": [
            {
                "id": "S-001",
                "title": "Normalize resumes",
                "description": "Parse resumes into a common schema.",
                "painIds": ["P-001"],
                "approach": "LLM extraction",
                "technology": "Python",
                "priority": "high",
                "effort": "2 weeks",
                "impact": "Faster shortlisting",
                "background": "Formats vary",
                "architecture": "parser -> normalizer -> store",
                "feasibility": "high",
            }
        ],
        "structuralAnalysis": {
            "designPrinciples": ["simple"],
            "technicalApproach": "pipeline",
            "riskAssessment": [],
            "successMetrics": ["time to shortlist"],
        },
    }


@pytest.fixture
def agent_generation() -> dict[str, Any]:
    return {
        "agents": [
            {
                "id": "A-001",
                "name": "resume-parser",
                "description": "Parses resumes",
                "capabilities": ["parse"],
                "solutionIds": ["S-001"],
                "inputFormat": "pdf",
                "outputFormat": "json",
                "dependencies": [],
                "scalability": "horizontal",
            }
        ]
    }


@pytest.fixture
def manifest() -> dict[str, Any]:
    return {"agents": [make_agent_manifest("resume-parser")]}
