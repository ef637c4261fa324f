from typing import Optional

from fastapi import APIRouter, Depends, Query

from ..models import SummarizeRequest, SummarizeStartResponse, WorkflowStatus
from ..services import SummarizationOrchestrator, get_summarization_orchestrator

router = APIRouter(prefix="/summarize", tags=["summarize"])


@router.post(
    "",
    response_model=SummarizeStartResponse,
    response_model_exclude_none=True,
    summary="Start a summarization workflow for a URL",
)
async def start_summary(
    payload: SummarizeRequest,
    orchestrator: SummarizationOrchestrator = Depends(get_summarization_orchestrator),
) -> SummarizeStartResponse:
    return await orchestrator.start(payload.url)


@router.get("/status", response_model=WorkflowStatus, response_model_exclude_none=True)
# Report the latest known status of a summarization instance
async def summary_status(
    instance_id: Optional[str] = Query(default=None, alias="id"),
    orchestrator: SummarizationOrchestrator = Depends(get_summarization_orchestrator),
) -> WorkflowStatus:
    return await orchestrator.poll(instance_id)


__all__ = ["router"]
