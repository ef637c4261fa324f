from fastapi import APIRouter, Depends

from ..models import ChatRequest, ChatResponse
from ..services import MemoryNamespace, converse, get_memory_namespace

router = APIRouter(tags=["chat"])


@router.post(
    "/chat",
    response_model=ChatResponse,
    response_model_exclude_none=True,
    summary="Answer a message using the user's stored memory",
)
# Read the user's memory, ask the model, then record the new turn
async def chat(
    payload: ChatRequest,
    namespace: MemoryNamespace = Depends(get_memory_namespace),
) -> ChatResponse:
    result = await converse(payload.user_id, payload.user_msg, namespace=namespace)
    return ChatResponse(answer=result.answer, warning=result.warning)


__all__ = ["router"]
