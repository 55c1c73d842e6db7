"""Collaborators that call a LangChain chat model directly."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from pydantic import ValidationError

from painflow.collaborators.base import (
    FAILURE_MESSAGES,
    ChatMode,
    Collaborator,
    CollaboratorError,
    require_fields,
)
from painflow.collaborators.deployment import DeploymentPrep
from painflow.collaborators.prompts import (
    AGENT_GENERATION_PROMPT,
    MANIFEST_GENERATION_PROMPT,
    PAIN_ANALYSIS_PROMPT,
    SOLUTION_DESIGN_PROMPT,
    as_json,
    chat_system_prompt,
)
from painflow.models import AgentGeneration, ManifestGeneration, PainAnalysis, SolutionDesign
from painflow.observability.logging import get_logger
from painflow.pipeline.stages import (
    AGENT_GENERATION,
    DEPLOYMENT_PREP,
    MANIFEST_GENERATION,
    PAIN_ANALYSIS,
    SOLUTION_DESIGN,
)

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

    from langchain_core.language_models import BaseChatModel

    from painflow.models import WireModel

log = get_logger(__name__)


class LLMCollaborators:
    """Generate each stage's output with structured LLM calls.

    deployment-prep needs no model and is computed locally.
    """

    def __init__(
        self,
        model: BaseChatModel,
        deployment: DeploymentPrep | None = None,
    ) -> None:
        self._model = model
        self._deployment = deployment or DeploymentPrep()

    async def pain_analysis(self, payload: dict[str, Any]) -> dict[str, Any]:
        require_fields(PAIN_ANALYSIS, payload, "userInput", message="User input is required")
        prompt = PAIN_ANALYSIS_PROMPT.format(user_input=payload["userInput"])
        return await self._generate(PAIN_ANALYSIS, PainAnalysis, prompt)

    async def solution_design(self, payload: dict[str, Any]) -> dict[str, Any]:
        require_fields(
            SOLUTION_DESIGN,
            payload,
            "userInput",
            "painAnalysis",
            message="User input and pain analysis are required",
        )
        prompt = SOLUTION_DESIGN_PROMPT.format(
            user_input=payload["userInput"],
            pain_analysis=as_json(payload["painAnalysis"]),
        )
        return await self._generate(SOLUTION_DESIGN, SolutionDesign, prompt)

    async def agent_generation(self, payload: dict[str, Any]) -> dict[str, Any]:
        require_fields(
            AGENT_GENERATION,
            payload,
            "userInput",
            "painAnalysis",
            "solutionDesign",
            message="All workflow data is required",
        )
        prompt = AGENT_GENERATION_PROMPT.format(
            user_input=payload["userInput"],
            pain_analysis=as_json(payload["painAnalysis"]),
            solution_design=as_json(payload["solutionDesign"]),
        )
        return await self._generate(AGENT_GENERATION, AgentGeneration, prompt)

    async def manifest_generation(self, payload: dict[str, Any]) -> dict[str, Any]:
        require_fields(
            MANIFEST_GENERATION,
            payload,
            "agentGeneration",
            message="Agent generation data is required",
        )
        prompt = MANIFEST_GENERATION_PROMPT.format(
            agent_generation=as_json(payload["agentGeneration"])
        )
        return await self._generate(MANIFEST_GENERATION, ManifestGeneration, prompt)

    def collaborators(self) -> dict[str, Collaborator]:
        return {
            PAIN_ANALYSIS: self.pain_analysis,
            SOLUTION_DESIGN: self.solution_design,
            AGENT_GENERATION: self.agent_generation,
            MANIFEST_GENERATION: self.manifest_generation,
            DEPLOYMENT_PREP: self._deployment,
        }

    async def stream_chat(
        self,
        messages: list[dict[str, str]],
        mode: ChatMode = "general",
    ) -> AsyncIterator[str]:
        """Stream a chat reply with the system prompt for ``mode``."""
        conversation: list[tuple[str, str]] = [("system", chat_system_prompt(mode))]
        conversation.extend((m["role"], m["content"]) for m in messages)
        async for chunk in self._model.astream(conversation):
            text = _chunk_text(chunk.content)
            if text:
                yield text

    async def aclose(self) -> None:
        """Close the chat model if it holds resources."""
        close_method = getattr(self._model, "aclose", None) or getattr(self._model, "close", None)
        if callable(close_method):
            result = close_method()
            if hasattr(result, "__await__"):
                await result

    async def _generate(
        self,
        stage_id: str,
        schema: type[WireModel],
        prompt: str,
    ) -> dict[str, Any]:
        structured = self._model.with_structured_output(schema)
        try:
            result = await structured.ainvoke(prompt)
        except Exception as e:
            log.warning("llm_generation_failed", stage=stage_id, error=str(e))
            raise CollaboratorError(stage_id, FAILURE_MESSAGES[stage_id]) from e

        if isinstance(result, dict):
            try:
                result = schema.model_validate(result)
            except ValidationError as e:
                log.warning("llm_output_invalid", stage=stage_id, errors=e.error_count())
                raise CollaboratorError(stage_id, FAILURE_MESSAGES[stage_id]) from e
        if not isinstance(result, schema):
            log.warning("llm_unexpected_output", stage=stage_id, type=type(result).__name__)
            raise CollaboratorError(stage_id, FAILURE_MESSAGES[stage_id])

        log.debug("llm_generation_complete", stage=stage_id)
        return result.to_wire()


def _chunk_text(content: Any) -> str:
    """Text of a streamed message chunk; content blocks are concatenated."""
    if isinstance(content, str):
        return content
    if isinstance(content, list):
        return "".join(
            block.get("text", "") if isinstance(block, dict) else str(block) for block in content
        )
    return ""
