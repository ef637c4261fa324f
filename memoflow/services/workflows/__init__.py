"""Durable asynchronous workflows and the summarization front end."""

from __future__ import annotations

import threading
from typing import Optional

from ...config import get_settings
from .engine import Workflow, WorkflowBinding, WorkflowEngine, WorkflowInstance
from .orchestrator import SummarizationOrchestrator
from .store import WorkflowRecord, WorkflowStore
from .summarize import SummarizeError, SummarizeWorkflow

_workflow_engine: Optional[WorkflowEngine] = None
_factory_lock = threading.Lock()


def get_workflow_engine() -> WorkflowEngine:
    global _workflow_engine
    if _workflow_engine is None:
        with _factory_lock:
            if _workflow_engine is None:
                settings = get_settings()
                engine = WorkflowEngine(
                    WorkflowStore(settings.workflow_db_path),
                    max_concurrency=settings.workflow_max_concurrency,
                    timeout_seconds=settings.workflow_timeout_seconds,
                )
                engine.register(SummarizeWorkflow())
                _workflow_engine = engine
    return _workflow_engine


def get_summarization_orchestrator() -> SummarizationOrchestrator:
    return SummarizationOrchestrator(get_workflow_engine().binding(SummarizeWorkflow.name))


__all__ = [
    "SummarizationOrchestrator",
    "SummarizeError",
    "SummarizeWorkflow",
    "Workflow",
    "WorkflowBinding",
    "WorkflowEngine",
    "WorkflowInstance",
    "WorkflowRecord",
    "WorkflowStore",
    "get_summarization_orchestrator",
    "get_workflow_engine",
]
