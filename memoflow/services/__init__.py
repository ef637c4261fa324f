"""Service layer components."""

from .conversation import ChatResult, converse
from .inference import generate
from .memory import MemoryNamespace, get_memory_namespace
from .workflows import (
    SummarizationOrchestrator,
    WorkflowEngine,
    get_summarization_orchestrator,
    get_workflow_engine,
)

__all__ = [
    "ChatResult",
    "MemoryNamespace",
    "SummarizationOrchestrator",
    "WorkflowEngine",
    "converse",
    "generate",
    "get_memory_namespace",
    "get_summarization_orchestrator",
    "get_workflow_engine",
]
