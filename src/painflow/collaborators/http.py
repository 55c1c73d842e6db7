"""Collaborators backed by the painflow web backend over HTTP."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import httpx

from painflow.collaborators.base import FAILURE_MESSAGES, ChatMode, Collaborator, CollaboratorError
from painflow.live.stream import iter_text_deltas
from painflow.observability.logging import get_logger
from painflow.pipeline.config import DEFAULT_BACKEND_URL, DEFAULT_TIMEOUT
from painflow.pipeline.stages import STAGE_IDS

if TYPE_CHECKING:
    from collections.abc import AsyncIterator
    from types import TracebackType

log = get_logger(__name__)

WORKFLOW_PATH = "/api/workflow/{stage_id}"
CHAT_PATH = "/api/chat"


class ChatStreamError(Exception):
    """Raised when the chat endpoint cannot be streamed."""


class HttpCollaborators:
    """POST each stage's payload to ``{base_url}/api/workflow/{stage_id}``.

    A non-2xx status, a transport failure or a non-JSON body raises
    CollaboratorError carrying the stage's failure message.
    """

    def __init__(
        self,
        base_url: str = DEFAULT_BACKEND_URL,
        timeout: float = DEFAULT_TIMEOUT,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialize the HTTP backend.

        Args:
            base_url: Root URL of the web backend.
            timeout: Per-request timeout in seconds.
            client: Optional preconfigured client (used as-is, not closed
                by ``aclose``).
        """
        self.base_url = base_url.rstrip("/")
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(timeout=timeout)

    async def call(self, stage_id: str, payload: dict[str, Any]) -> Any:
        """Run one stage remotely and return its decoded JSON body."""
        url = self.base_url + WORKFLOW_PATH.format(stage_id=stage_id)
        message = FAILURE_MESSAGES.get(stage_id, f"{stage_id} failed")

        try:
            response = await self._client.post(url, json=payload)
        except httpx.HTTPError as e:
            log.warning("collaborator_request_failed", stage=stage_id, url=url, error=str(e))
            raise CollaboratorError(stage_id, message) from e

        if not response.is_success:
            log.warning(
                "collaborator_bad_status",
                stage=stage_id,
                status=response.status_code,
                body=response.text[:200],
            )
            raise CollaboratorError(stage_id, message)

        try:
            return response.json()
        except ValueError as e:
            log.warning("collaborator_bad_body", stage=stage_id, error=str(e))
            raise CollaboratorError(stage_id, message) from e

    def for_stage(self, stage_id: str) -> Collaborator:
        async def collaborator(payload: dict[str, Any]) -> Any:
            return await self.call(stage_id, payload)

        collaborator.__qualname__ = f"HttpCollaborators[{stage_id}]"
        return collaborator

    def collaborators(self, stage_ids: tuple[str, ...] = STAGE_IDS) -> dict[str, Collaborator]:
        return {stage_id: self.for_stage(stage_id) for stage_id in stage_ids}

    async def stream_chat(
        self,
        messages: list[dict[str, str]],
        mode: ChatMode = "general",
    ) -> AsyncIterator[str]:
        """Stream a chat reply from ``/api/chat`` as text fragments.

        Raises:
            ChatStreamError: If the endpoint answers with a non-2xx status.
        """
        url = self.base_url + CHAT_PATH
        async with self._client.stream(
            "POST", url, json={"messages": messages, "mode": mode}
        ) as response:
            if not response.is_success:
                log.warning("chat_bad_status", status=response.status_code)
                raise ChatStreamError(f"Chat request failed with status {response.status_code}")
            async for fragment in iter_text_deltas(response.aiter_lines()):
                yield fragment

    async def aclose(self) -> None:
        """Close the underlying HTTP client if this instance created it."""
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self) -> HttpCollaborators:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()
