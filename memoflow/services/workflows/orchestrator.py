"""Front the summarize workflow: start instances and report their status."""

from __future__ import annotations

from typing import Any, Mapping, Optional, Protocol

from ...errors import BadRequest
from ...logging_config import logger
from ...models.workflow import SummarizeStartResponse, WorkflowStatus


class InstanceHandle(Protocol):
    id: str

    async def status(self) -> WorkflowStatus:  # pragma: no cover - typing protocol
        ...


class WorkflowClient(Protocol):
    async def create(self, params: Mapping[str, Any]) -> InstanceHandle:  # pragma: no cover - typing protocol
        ...

    async def get(self, instance_id: str) -> InstanceHandle:  # pragma: no cover - typing protocol
        ...


class SummarizationOrchestrator:
    def __init__(self, workflows: WorkflowClient) -> None:
        self._workflows = workflows

    async def start(self, url: Optional[str]) -> SummarizeStartResponse:
        if not isinstance(url, str) or not url.strip():
            raise BadRequest("url must be a non-empty string")

        instance = await self._workflows.create({"url": url.strip()})
        status = await instance.status()
        logger.info(
            "summarization started",
            extra={"instance_id": instance.id, "state": status.status.value},
        )
        return SummarizeStartResponse(id=instance.id, status=status)

    async def poll(self, instance_id: Optional[str]) -> WorkflowStatus:
        """Return the latest status; raises ``NotFound`` for unknown ids."""

        if not instance_id or not instance_id.strip():
            raise BadRequest("missing id")
        instance = await self._workflows.get(instance_id.strip())
        return await instance.status()


__all__ = ["InstanceHandle", "SummarizationOrchestrator", "WorkflowClient"]
