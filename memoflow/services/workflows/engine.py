"""In-process durable workflow engine.

Instances are persisted in SQLite before they are scheduled, run as asyncio
tasks bounded by a semaphore, and resumed on the next ``start`` if the process
stopped while they were queued or running.
"""

from __future__ import annotations

import asyncio
import uuid
from typing import Any, Awaitable, Dict, Mapping, Optional, Protocol

from ...errors import BadRequest, NotFound
from ...logging_config import logger
from ...models.workflow import WorkflowState, WorkflowStatus
from .store import WorkflowRecord, WorkflowStore


class Workflow(Protocol):
    """A named job body executed by the engine."""

    name: str

    def run(self, params: Dict[str, Any]) -> Awaitable[Any]:  # pragma: no cover - typing protocol
        ...


def _new_instance_id() -> str:
    return f"wf-{uuid.uuid4().hex}"


class WorkflowInstance:
    """Handle to one execution; status is always read fresh from the store."""

    def __init__(self, instance_id: str, engine: "WorkflowEngine") -> None:
        self.id = instance_id
        self._engine = engine

    async def status(self) -> WorkflowStatus:
        return self._engine.status_of(self.id)

    def __repr__(self) -> str:
        return f"WorkflowInstance(id={self.id!r})"


class WorkflowBinding:
    """Create/get access to the instances of a single registered workflow."""

    def __init__(self, engine: "WorkflowEngine", name: str) -> None:
        self._engine = engine
        self.name = name

    async def create(self, params: Mapping[str, Any]) -> WorkflowInstance:
        return await self._engine.create(self.name, params)

    async def get(self, instance_id: str) -> WorkflowInstance:
        return await self._engine.get(instance_id, name=self.name)


class WorkflowEngine:
    def __init__(
        self,
        store: WorkflowStore,
        *,
        max_concurrency: int = 4,
        timeout_seconds: float = 300.0,
    ) -> None:
        self._store = store
        self._timeout = timeout_seconds
        self._max_concurrency = max(1, max_concurrency)
        self._semaphore: Optional[asyncio.Semaphore] = None
        self._workflows: Dict[str, Workflow] = {}
        self._tasks: Dict[str, asyncio.Task[None]] = {}

    def register(self, workflow: Workflow) -> WorkflowBinding:
        self._workflows[workflow.name] = workflow
        return WorkflowBinding(self, workflow.name)

    def binding(self, name: str) -> WorkflowBinding:
        if name not in self._workflows:
            raise KeyError(f"workflow {name!r} is not registered")
        return WorkflowBinding(self, name)

    async def create(self, name: str, params: Mapping[str, Any]) -> WorkflowInstance:
        if name not in self._workflows:
            raise BadRequest(f"unknown workflow {name!r}")
        instance_id = _new_instance_id()
        record = self._store.insert(instance_id, name, dict(params))
        logger.info("workflow instance created", extra={"workflow": name, "instance_id": instance_id})
        self._schedule(record)
        return WorkflowInstance(instance_id, self)

    async def get(self, instance_id: str, *, name: Optional[str] = None) -> WorkflowInstance:
        record = self._store.fetch_one(instance_id)
        if record is None or (name is not None and record.name != name):
            raise NotFound(f"workflow instance {instance_id!r} not found", context={"instance_id": instance_id})
        return WorkflowInstance(instance_id, self)

    def status_of(self, instance_id: str) -> WorkflowStatus:
        record = self._store.fetch_one(instance_id)
        if record is None:
            raise NotFound(f"workflow instance {instance_id!r} not found", context={"instance_id": instance_id})
        return record.status

    async def start(self) -> None:
        """Resume instances left unfinished by a previous process."""

        for record in self._store.list_unfinished():
            if record.id in self._tasks:
                continue
            logger.info(
                "resuming workflow instance",
                extra={"workflow": record.name, "instance_id": record.id, "state": record.status.status.value},
            )
            self._schedule(record)

    async def stop(self) -> None:
        tasks = list(self._tasks.values())
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)
        self._tasks.clear()
        self._semaphore = None

    async def wait_idle(self) -> None:
        """Block until every scheduled instance has finished running."""

        while self._tasks:
            await asyncio.gather(*list(self._tasks.values()), return_exceptions=True)

    def _schedule(self, record: WorkflowRecord) -> None:
        loop = asyncio.get_running_loop()
        if self._semaphore is None:
            self._semaphore = asyncio.Semaphore(self._max_concurrency)
        task = loop.create_task(self._run(record), name=f"workflow-{record.id}")
        self._tasks[record.id] = task
        task.add_done_callback(lambda _task, key=record.id: self._tasks.pop(key, None))

    async def _run(self, record: WorkflowRecord) -> None:
        assert self._semaphore is not None
        async with self._semaphore:
            workflow = self._workflows.get(record.name)
            if workflow is None:
                self._finish(record, WorkflowState.FAILED, error=f"workflow {record.name!r} is not registered")
                return

            moved = self._store.transition(
                record.id,
                WorkflowState.RUNNING,
                sources=(WorkflowState.QUEUED, WorkflowState.RUNNING),
            )
            if not moved:
                return
            logger.info("workflow instance running", extra={"workflow": record.name, "instance_id": record.id})

            try:
                output = await asyncio.wait_for(workflow.run(dict(record.params)), timeout=self._timeout)
            except asyncio.CancelledError:
                logger.info("workflow instance interrupted", extra={"instance_id": record.id})
                raise
            except asyncio.TimeoutError:
                self._finish(record, WorkflowState.FAILED, error=f"timed out after {self._timeout:g} seconds")
            except Exception as exc:
                logger.exception("workflow instance failed", extra={"instance_id": record.id})
                self._finish(record, WorkflowState.FAILED, error=str(exc) or exc.__class__.__name__)
            else:
                self._finish(record, WorkflowState.SUCCEEDED, output=output)

    def _finish(
        self,
        record: WorkflowRecord,
        state: WorkflowState,
        *,
        output: Any = None,
        error: Optional[str] = None,
    ) -> None:
        moved = self._store.transition(
            record.id,
            state,
            sources=(WorkflowState.QUEUED, WorkflowState.RUNNING),
            output=output,
            error=error,
        )
        log = logger.info if state is WorkflowState.SUCCEEDED else logger.warning
        log(
            "workflow instance finished",
            extra={"instance_id": record.id, "state": state.value, "applied": moved, "error": error},
        )


__all__ = ["Workflow", "WorkflowBinding", "WorkflowEngine", "WorkflowInstance"]
