"""Shared collaborator types."""

from __future__ import annotations

from collections.abc import AsyncIterator, Awaitable, Callable, Mapping
from typing import Any, Literal, Protocol

from painflow.pipeline.stages import (
    AGENT_GENERATION,
    DEPLOYMENT_PREP,
    MANIFEST_GENERATION,
    PAIN_ANALYSIS,
    SOLUTION_DESIGN,
)

Collaborator = Callable[[dict[str, Any]], Awaitable[Any]]

ChatMode = Literal["general", "pain-analysis", "solution-design", "agent-generation"]
CHAT_MODES: tuple[str, ...] = ("general", "pain-analysis", "solution-design", "agent-generation")

# Stage id -> message recorded on the stage when its call fails
FAILURE_MESSAGES: dict[str, str] = {
    PAIN_ANALYSIS: "Pain analysis failed",
    SOLUTION_DESIGN: "Solution design failed",
    AGENT_GENERATION: "Agent generation failed",
    MANIFEST_GENERATION: "Manifest generation failed",
    DEPLOYMENT_PREP: "Deployment preparation failed",
}


class CollaboratorError(Exception):
    """Raised when a generation call fails.

    The message is what the workflow engine records on the stage, so it is
    kept human-readable and free of the stage prefix.
    """

    def __init__(self, stage_id: str, message: str) -> None:
        self.stage_id = stage_id
        self.message = message
        super().__init__(message)


class ChatBackend(Protocol):
    """Source of a streamed chat reply."""

    def stream_chat(
        self,
        messages: list[dict[str, str]],
        mode: ChatMode = "general",
    ) -> AsyncIterator[str]:
        """Yield reply fragments for ``messages``."""
        ...


def require_fields(stage_id: str, payload: Mapping[str, Any], *keys: str, message: str) -> None:
    """Raise CollaboratorError(message) unless every key holds a truthy value."""
    if not all(payload.get(key) for key in keys):
        raise CollaboratorError(stage_id, message)
