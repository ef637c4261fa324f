from __future__ import annotations

from fastapi import APIRouter

from .chat import router as chat_router
from .memory import router as memory_router
from .meta import router as meta_router
from .summarize import router as summarize_router

api_router = APIRouter()
api_router.include_router(meta_router)
api_router.include_router(chat_router)
api_router.include_router(summarize_router)
api_router.include_router(memory_router)

__all__ = ["api_router"]
