"""Per-user memory actors and the namespace that addresses them."""

from __future__ import annotations

import asyncio
import hashlib
import sqlite3
import threading
from typing import Any, Callable, Dict, Mapping, Optional, TypeVar, Union, cast

from pydantic import ValidationError

from ...errors import BadRequest, StorageUnavailable
from ...logging_config import logger
from ...models.memory import MemoryAck, MemoryMessage, MemorySnapshot
from .store import ActorStore

T = TypeVar("T")

_STORAGE_ERRORS = (sqlite3.Error, OSError, ValueError)


def _discard_result(future: "asyncio.Future[Any]") -> None:
    if not future.cancelled():
        future.exception()


class MemoryActor:
    """Owns one user's memory record and serializes every access to it.

    All operations pass through ``handle`` and run under the actor's lock, so
    reads never observe a half-applied append and concurrent appends are
    applied one at a time in arrival order.
    """

    def __init__(self, user_id: str, actor_id: str, store: ActorStore, *, timeout: float = 5.0) -> None:
        self.user_id = user_id
        self.actor_id = actor_id
        self._store = store
        self._timeout = timeout
        self._lock = asyncio.Lock()

    async def handle(self, message: Union[MemoryMessage, Mapping[str, Any]]) -> Union[MemorySnapshot, MemoryAck]:
        request = self._parse(message)
        if request.user_id != self.user_id:
            raise BadRequest(
                "memory message addressed to a different user",
                context={"actor_user": self.user_id, "message_user": request.user_id},
            )

        async with self._lock:
            if request.op == "get":
                return await self._get()
            if request.op == "append":
                if request.item is None:
                    raise BadRequest("append requires an item", context={"user_id": self.user_id})
                return await self._append(request.item)
            return await self._set_profile(request.profile)

    def _parse(self, message: Union[MemoryMessage, Mapping[str, Any]]) -> MemoryMessage:
        if isinstance(message, MemoryMessage):
            return message
        try:
            return MemoryMessage.model_validate(dict(message))
        except ValidationError as exc:
            raise BadRequest(
                "invalid memory message",
                context={"user_id": self.user_id, "errors": exc.errors()},
            ) from exc

    async def _get(self) -> MemorySnapshot:
        row = await self._call("get", self._store.load, self.actor_id, settle=False)
        if row is None:
            return MemorySnapshot.empty()
        profile, history = row
        return MemorySnapshot(profile=profile, history=history)

    async def _append(self, item: str) -> MemoryAck:
        length = await self._call("append", self._store.append, self.actor_id, item)
        logger.debug("memory appended", extra={"user_id": self.user_id, "length": length})
        return MemoryAck(length=length)

    async def _set_profile(self, profile: Any) -> MemoryAck:
        await self._call("set_profile", self._store.put_profile, self.actor_id, profile)
        logger.info("memory profile updated", extra={"user_id": self.user_id})
        return MemoryAck()

    async def _call(self, operation: str, func: Callable[..., T], *args: Any, settle: bool = True) -> T:
        """Run a store call in a worker thread, bounded by the actor's deadline.

        A worker thread cannot be stopped once started. When *settle* is set
        (every write), a call that overruns the deadline is still awaited under
        the actor lock and reported by its real outcome. Reads give up at the
        deadline instead.
        """

        pending = asyncio.ensure_future(asyncio.to_thread(func, *args))
        try:
            return await asyncio.wait_for(asyncio.shield(pending), timeout=self._timeout)
        except asyncio.TimeoutError as exc:
            if not settle:
                pending.add_done_callback(_discard_result)
                raise self._unavailable(operation, exc) from exc
            logger.warning(
                "memory storage call overran its deadline; waiting for it to settle",
                extra={"operation": operation, "user_id": self.user_id, "timeout": self._timeout},
            )
        except _STORAGE_ERRORS as exc:
            raise self._unavailable(operation, exc) from exc

        try:
            return await pending
        except _STORAGE_ERRORS as exc:
            raise self._unavailable(operation, exc) from exc

    def _unavailable(self, operation: str, exc: BaseException) -> StorageUnavailable:
        logger.error(
            "memory storage call failed",
            extra={"operation": operation, "user_id": self.user_id, "error": repr(exc)},
        )
        return StorageUnavailable(operation, self.user_id, exc)


class MemoryActorStub:
    """Client handle that talks to an actor only through its message protocol."""

    def __init__(self, actor: MemoryActor) -> None:
        self._actor = actor

    @property
    def user_id(self) -> str:
        return self._actor.user_id

    async def send(self, message: Mapping[str, Any]) -> Union[MemorySnapshot, MemoryAck]:
        return await self._actor.handle(message)

    async def get(self) -> MemorySnapshot:
        result = await self.send({"op": "get", "userId": self.user_id})
        return cast(MemorySnapshot, result)

    async def append(self, item: str) -> MemoryAck:
        result = await self.send({"op": "append", "userId": self.user_id, "item": item})
        return cast(MemoryAck, result)

    async def set_profile(self, profile: Any) -> MemoryAck:
        result = await self.send({"op": "set_profile", "userId": self.user_id, "profile": profile})
        return cast(MemoryAck, result)


class MemoryNamespace:
    """Maps user ids onto exactly one live memory actor each."""

    def __init__(self, store: ActorStore, *, store_timeout: float = 5.0) -> None:
        self._store = store
        self._store_timeout = store_timeout
        self._actors: Dict[str, MemoryActor] = {}
        self._lock = threading.Lock()

    @staticmethod
    def id_from_name(name: str) -> str:
        return hashlib.sha256(name.encode("utf-8")).hexdigest()

    def get(self, user_id: Optional[str]) -> MemoryActorStub:
        if not isinstance(user_id, str) or not user_id.strip():
            raise BadRequest("userId must be a non-empty string")

        actor_id = self.id_from_name(user_id)
        with self._lock:
            actor = self._actors.get(actor_id)
            if actor is None:
                actor = MemoryActor(user_id, actor_id, self._store, timeout=self._store_timeout)
                self._actors[actor_id] = actor
        return MemoryActorStub(actor)

    def __len__(self) -> int:
        return len(self._actors)


__all__ = [
    "MemoryActor",
    "MemoryActorStub",
    "MemoryNamespace",
]
