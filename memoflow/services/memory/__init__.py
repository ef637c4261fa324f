"""Durable per-user conversational memory."""

from __future__ import annotations

import threading
from typing import Optional

from ...config import get_settings
from .actor import MemoryActor, MemoryActorStub, MemoryNamespace
from .store import ActorStore

_memory_namespace: Optional[MemoryNamespace] = None
_factory_lock = threading.Lock()


def get_memory_namespace() -> MemoryNamespace:
    global _memory_namespace
    if _memory_namespace is None:
        with _factory_lock:
            if _memory_namespace is None:
                settings = get_settings()
                _memory_namespace = MemoryNamespace(
                    ActorStore(settings.memory_db_path),
                    store_timeout=settings.store_timeout_seconds,
                )
    return _memory_namespace


__all__ = [
    "ActorStore",
    "MemoryActor",
    "MemoryActorStub",
    "MemoryNamespace",
    "get_memory_namespace",
]
