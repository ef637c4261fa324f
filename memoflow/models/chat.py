from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class ChatRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    user_id: str = Field(..., alias="userId")
    user_msg: str = Field(..., alias="userMsg")


class ChatResponse(BaseModel):
    answer: str
    warning: Optional[str] = None
