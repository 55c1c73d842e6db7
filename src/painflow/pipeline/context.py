"""Workflow context carried through a pipeline run."""

from __future__ import annotations

import copy
from dataclasses import dataclass, fields, replace
from typing import Any

# Context field -> key used in collaborator request bodies
WIRE_NAMES: dict[str, str] = {
    "user_input": "userInput",
    "pain_analysis": "painAnalysis",
    "solution_design": "solutionDesign",
    "agent_generation": "agentGeneration",
    "manifest": "manifest",
}


@dataclass(frozen=True)
class WorkflowContext:
    """Accumulated output of one run.

    A run starts from a context holding only ``user_input``. Every
    completed producing stage adds its field through ``with_result``,
    which returns a new context; fields are never cleared mid-run.
    """

    user_input: str = ""
    pain_analysis: dict[str, Any] | None = None
    solution_design: dict[str, Any] | None = None
    agent_generation: dict[str, Any] | None = None
    manifest: dict[str, Any] | None = None

    def with_result(self, field_name: str, value: Any) -> WorkflowContext:
        """Return a new context with ``field_name`` set.

        Raises:
            KeyError: If the field is not part of the context.
        """
        if field_name not in WIRE_NAMES or field_name == "user_input":
            raise KeyError(f"Unknown context field: {field_name}")
        return replace(self, **{field_name: value})

    def payload_for(self, field_names: tuple[str, ...]) -> dict[str, Any]:
        """Build a collaborator request body holding only ``field_names``.

        Values are deep-copied so a collaborator cannot mutate the context.
        """
        return {
            WIRE_NAMES[name]: copy.deepcopy(getattr(self, name)) for name in field_names
        }

    def to_dict(self) -> dict[str, Any]:
        """Serialize using wire names, skipping fields not produced yet."""
        data: dict[str, Any] = {}
        for f in fields(self):
            value = getattr(self, f.name)
            if value is not None:
                data[WIRE_NAMES[f.name]] = copy.deepcopy(value)
        return data
