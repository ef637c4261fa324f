from fastapi import APIRouter, Depends

from ..models import MemoryAck, SetProfileRequest
from ..services import MemoryNamespace, get_memory_namespace

router = APIRouter(prefix="/memory", tags=["memory"])


@router.get("/{user_id}", summary="Inspect a user's memory record")
async def read_memory(
    user_id: str,
    namespace: MemoryNamespace = Depends(get_memory_namespace),
) -> dict:
    snapshot = await namespace.get(user_id).get()
    return snapshot.to_wire()


@router.put("/{user_id}/profile", response_model=MemoryAck, response_model_exclude_none=True)
# Replace the profile rendered at the top of every chat prompt
async def set_profile(
    user_id: str,
    payload: SetProfileRequest,
    namespace: MemoryNamespace = Depends(get_memory_namespace),
) -> MemoryAck:
    return await namespace.get(user_id).set_profile(payload.profile)


__all__ = ["router"]
