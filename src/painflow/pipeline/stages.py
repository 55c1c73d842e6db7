"""Stage types and the fixed generation pipeline."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from enum import StrEnum
from typing import Any

# Predicate deciding whether a stage result is worth handing to the next stage
OutputPredicate = Callable[[Any], bool]


class StageStatus(StrEnum):
    """Lifecycle of a stage within one run."""

    PENDING = "pending"
    RUNNING = "running"
    COMPLETED = "completed"
    ERROR = "error"


@dataclass(frozen=True)
class Stage:
    """Published state of one pipeline step.

    ``result`` is only set when completed, ``error`` only when failed.
    """

    id: str
    name: str
    status: StageStatus = StageStatus.PENDING
    result: Any = None
    error: str | None = None


def has_items(key: str) -> OutputPredicate:
    """Build a predicate that holds when ``result[key]`` is a non-empty list.

    Anything that is not a mapping with a list under ``key`` counts as empty.
    """

    def predicate(result: Any) -> bool:
        if not isinstance(result, dict):
            return False
        items = result.get(key)
        return isinstance(items, list) and len(items) > 0

    predicate.__name__ = f"has_items_{key}"
    return predicate


@dataclass(frozen=True)
class StageDefinition:
    """Static description of one pipeline step.

    Attributes:
        id: Stable identifier, also the collaborator key.
        name: Human label.
        consumes: Context fields forwarded to the collaborator.
        produces: Context field the result is merged into, or None when the
            result only lives on the stage.
        has_output: Predicate that must hold for the run to advance past
            this stage. None marks a terminal stage.
        phase: Progress label shown while the stage runs.
    """

    id: str
    name: str
    consumes: tuple[str, ...]
    produces: str | None
    has_output: OutputPredicate | None
    phase: str

    def initial_stage(self) -> Stage:
        return Stage(id=self.id, name=self.name)


PAIN_ANALYSIS = "pain-analysis"
SOLUTION_DESIGN = "solution-design"
AGENT_GENERATION = "agent-generation"
MANIFEST_GENERATION = "manifest-generation"
DEPLOYMENT_PREP = "deployment-prep"

DEFAULT_STAGES: tuple[StageDefinition, ...] = (
    StageDefinition(
        id=PAIN_ANALYSIS,
        name="Pain Analysis",
        consumes=("user_input",),
        produces="pain_analysis",
        has_output=has_items("pains"),
        phase="pain thinking",
    ),
    StageDefinition(
        id=SOLUTION_DESIGN,
        name="Solution Design",
        consumes=("user_input", "pain_analysis"),
        produces="solution_design",
        has_output=has_items("solutions"),
        phase="solution thinking",
    ),
    StageDefinition(
        id=AGENT_GENERATION,
        name="Agent Generation",
        consumes=("user_input", "pain_analysis", "solution_design"),
        produces="agent_generation",
        has_output=has_items("agents"),
        phase="agent thinking",
    ),
    StageDefinition(
        id=MANIFEST_GENERATION,
        name="Manifest Generation",
        consumes=("agent_generation",),
        produces="manifest",
        has_output=has_items("agents"),
        phase="manifest thinking",
    ),
    StageDefinition(
        id=DEPLOYMENT_PREP,
        name="Deployment Preparation",
        consumes=("manifest",),
        produces=None,
        has_output=None,
        phase="deployment thinking",
    ),
)

STAGE_IDS: tuple[str, ...] = tuple(d.id for d in DEFAULT_STAGES)
