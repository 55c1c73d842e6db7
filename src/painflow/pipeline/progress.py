"""Progress view and short human-readable summaries of stage results."""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from painflow.pipeline.stages import (
    AGENT_GENERATION,
    DEFAULT_STAGES,
    DEPLOYMENT_PREP,
    MANIFEST_GENERATION,
    PAIN_ANALYSIS,
    SOLUTION_DESIGN,
    StageStatus,
)

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

    from painflow.pipeline.stages import Stage, StageDefinition

_MAX_LINES = 6
_MAX_NAMES = 4


@dataclass(frozen=True)
class WorkflowProgress:
    """What a presentation layer needs to draw spinners and badges.

    Attributes:
        is_running: A stage is currently running.
        current_phase: Phase label of the running stage, "" when idle.
        halted_at: Id of the last stage that finished when the run stopped
            early (error or empty output), else None.
    """

    is_running: bool
    current_phase: str
    halted_at: str | None


def describe_progress(
    stages: Sequence[Stage],
    definitions: Sequence[StageDefinition] = DEFAULT_STAGES,
    *,
    run_active: bool | None = None,
) -> WorkflowProgress:
    """Derive the progress view from a stage snapshot.

    Args:
        stages: Published stage snapshot.
        definitions: Stage definitions providing the phase labels.
        run_active: Whether the engine still runs. When omitted, a run
            counts as active only while a stage is running.
    """
    phases = {d.id: d.phase for d in definitions}
    running = next((s for s in stages if s.status == StageStatus.RUNNING), None)
    is_running = running is not None if run_active is None else run_active

    halted_at: str | None = None
    if not is_running:
        finished = [s for s in stages if s.status in (StageStatus.COMPLETED, StageStatus.ERROR)]
        if finished and finished[-1] is not stages[-1]:
            halted_at = finished[-1].id

    return WorkflowProgress(
        is_running=is_running,
        current_phase=phases.get(running.id, "thinking") if running else "",
        halted_at=halted_at,
    )


def build_stage_summary(stage_id: str, result: Any) -> list[str]:
    """Build a concise summary of a stage result for CLI display.

    Args:
        stage_id: Stage identifier.
        result: Result recorded on the completed stage.

    Returns:
        Summary lines, empty when nothing useful can be said.
    """
    if not isinstance(result, dict):
        return []

    if stage_id == PAIN_ANALYSIS:
        pains = _list_of_dicts(result.get("pains"))
        lines = [f"Pains: {len(pains)}"]
        severities = Counter(_as_str(p.get("severity")) for p in pains if p.get("severity"))
        if severities:
            lines[0] += f" ({_format_counts(severities)})"
        lines.extend(f"- {_as_str(p.get('id'))} {_as_str(p.get('title'))}".rstrip() for p in pains)
        structural = result.get("structuralAnalysis")
        if isinstance(structural, dict) and _as_str(structural.get("problemDomain")):
            lines.append(f"Domain: {_as_str(structural.get('problemDomain'))}")
        return _limit_lines(lines)

    if stage_id == SOLUTION_DESIGN:
        solutions = _list_of_dicts(result.get("solutions"))
        lines = [f"Solutions: {len(solutions)}"]
        for solution in solutions:
            covers = ", ".join(str(p) for p in solution.get("painIds") or [])
            line = f"- {_as_str(solution.get('id'))} {_as_str(solution.get('title'))}".rstrip()
            lines.append(f"{line} [{covers}]" if covers else line)
        return _limit_lines(lines)

    if stage_id == AGENT_GENERATION:
        agents = _list_of_dicts(result.get("agents"))
        names = [name for name in (_as_str(a.get("name")) for a in agents) if name]
        lines = [f"Agents: {len(agents)}"]
        if names:
            lines.append(f"Names: {_format_truncated(names)}")
        return lines

    if stage_id == MANIFEST_GENERATION:
        agents = _list_of_dicts(result.get("agents"))
        images = [
            _as_str(((a.get("manifest") or {}).get("spec") or {}).get("image"))
            for a in agents
        ]
        lines = [f"Manifests: {len(agents)}"]
        images = [i for i in images if i]
        if images:
            lines.append(f"Images: {_format_truncated(images)}")
        return lines

    if stage_id == DEPLOYMENT_PREP:
        services = _list_of_dicts(result.get("services"))
        lines = [f"Services: {len(services)}"]
        region = _as_str(result.get("region"))
        if region:
            lines.append(f"Region: {region}")
        status = _as_str(result.get("status"))
        if status:
            lines.append(f"Status: {status}")
        return lines

    return []


def _as_str(value: Any) -> str:
    return value.strip() if isinstance(value, str) else ""


def _list_of_dicts(value: Any) -> list[dict[str, Any]]:
    if not isinstance(value, list):
        return []
    return [item for item in value if isinstance(item, dict)]


def _format_counts(counts: Counter[str]) -> str:
    return ", ".join(f"{key} {count}" for key, count in counts.most_common())


def _format_truncated(items: Iterable[str]) -> str:
    items = list(items)
    if len(items) <= _MAX_NAMES:
        return ", ".join(items)
    return ", ".join(items[:_MAX_NAMES]) + f" (+{len(items) - _MAX_NAMES} more)"


def _limit_lines(lines: list[str]) -> list[str]:
    if len(lines) <= _MAX_LINES:
        return lines
    return [*lines[: _MAX_LINES - 1], f"... ({len(lines) - _MAX_LINES + 1} more)"]
