from __future__ import annotations

from typing import Any, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


class MemorySnapshot(BaseModel):
    """Point-in-time view of one user's memory record."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    profile: Optional[Any] = Field(default=None, alias="prof")
    history: List[str] = Field(default_factory=list, alias="hist")

    @classmethod
    def empty(cls) -> "MemorySnapshot":
        return cls()

    def to_wire(self) -> dict:
        return self.model_dump(by_alias=True, exclude_none=True)


class MemoryMessage(BaseModel):
    """Request envelope understood by a memory actor."""

    model_config = ConfigDict(populate_by_name=True, extra="forbid")

    op: Literal["get", "append", "set_profile"]
    user_id: str = Field(..., min_length=1, alias="userId")
    item: Optional[str] = None
    profile: Optional[Any] = None


class MemoryAck(BaseModel):
    ok: bool = True
    length: Optional[int] = None


class SetProfileRequest(BaseModel):
    profile: Optional[Any] = None
