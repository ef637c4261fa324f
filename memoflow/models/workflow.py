from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field


class WorkflowState(str, Enum):
    QUEUED = "Queued"
    RUNNING = "Running"
    SUCCEEDED = "Succeeded"
    FAILED = "Failed"

    @property
    def is_terminal(self) -> bool:
        return self in TERMINAL_STATES


TERMINAL_STATES = frozenset({WorkflowState.SUCCEEDED, WorkflowState.FAILED})


class WorkflowStatus(BaseModel):
    """Read-only lifecycle snapshot of one workflow instance."""

    model_config = ConfigDict(frozen=True)

    status: WorkflowState
    output: Optional[Any] = None
    error: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class SummarizeRequest(BaseModel):
    model_config = ConfigDict(extra="ignore")

    url: Optional[str] = Field(default=None)


class SummarizeStartResponse(BaseModel):
    id: str
    status: WorkflowStatus
