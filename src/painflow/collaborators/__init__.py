"""Generation back-ends consumed by the workflow engine."""

from __future__ import annotations

from typing import TYPE_CHECKING

from painflow.collaborators.base import (
    CHAT_MODES,
    FAILURE_MESSAGES,
    ChatBackend,
    ChatMode,
    Collaborator,
    CollaboratorError,
)
from painflow.collaborators.deployment import DeploymentPrep, prepare_deployment
from painflow.collaborators.http import ChatStreamError, HttpCollaborators
from painflow.collaborators.llm import LLMCollaborators
from painflow.observability.logging import get_logger

if TYPE_CHECKING:
    import httpx
    from langchain_core.language_models import BaseChatModel

    from painflow.pipeline.config import WorkflowConfig

log = get_logger(__name__)


def build_backend(
    config: WorkflowConfig,
    *,
    client: httpx.AsyncClient | None = None,
    model: BaseChatModel | None = None,
) -> HttpCollaborators | LLMCollaborators:
    """Create the collaborator backend selected by ``config.backend.mode``.

    Args:
        config: Loaded workflow configuration.
        client: Optional HTTP client for the http backend.
        model: Optional chat model for the llm backend; created from
            ``config.provider`` when omitted.

    Raises:
        ProviderError: If the llm backend's chat model cannot be created.
    """
    if config.backend.mode == "llm":
        if model is None:
            from painflow.providers import create_chat_model, parse_provider_string

            provider, model_name = parse_provider_string(config.provider.get_provider())
            model = create_chat_model(provider, model_name)
        deployment = DeploymentPrep(
            project_id=config.deployment.project_id,
            region=config.deployment.region,
        )
        log.debug("backend_selected", mode="llm")
        return LLMCollaborators(model, deployment=deployment)

    log.debug("backend_selected", mode="http", base_url=config.backend.base_url)
    return HttpCollaborators(
        base_url=config.backend.base_url,
        timeout=config.backend.timeout,
        client=client,
    )


__all__ = [
    "CHAT_MODES",
    "FAILURE_MESSAGES",
    "ChatBackend",
    "ChatMode",
    "ChatStreamError",
    "Collaborator",
    "CollaboratorError",
    "DeploymentPrep",
    "HttpCollaborators",
    "LLMCollaborators",
    "build_backend",
    "prepare_deployment",
]
