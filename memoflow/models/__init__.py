from .chat import ChatRequest, ChatResponse
from .memory import MemoryAck, MemoryMessage, MemorySnapshot, SetProfileRequest
from .workflow import (
    TERMINAL_STATES,
    SummarizeRequest,
    SummarizeStartResponse,
    WorkflowState,
    WorkflowStatus,
)

__all__ = [
    "ChatRequest",
    "ChatResponse",
    "MemoryAck",
    "MemoryMessage",
    "MemorySnapshot",
    "SetProfileRequest",
    "SummarizeRequest",
    "SummarizeStartResponse",
    "TERMINAL_STATES",
    "WorkflowState",
    "WorkflowStatus",
]
