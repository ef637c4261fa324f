"""Error taxonomy shared by the memory, chat and workflow services."""

from __future__ import annotations

from typing import Any, Dict, Optional


class MemoflowError(RuntimeError):
    """Base class for errors that map onto an HTTP status."""

    status_code: int = 500

    def __init__(self, message: str, *, context: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(message)
        self.message = message
        self.context: Dict[str, Any] = dict(context or {})


class BadRequest(MemoflowError):
    """A required field is missing or malformed."""

    status_code = 400


class NotFound(MemoflowError):
    """The addressed workflow instance does not exist."""

    status_code = 404


class StorageUnavailable(MemoflowError):
    """A memory actor storage call failed or timed out."""

    status_code = 503

    def __init__(self, operation: str, user_id: str, cause: Optional[BaseException] = None) -> None:
        detail = f": {cause}" if cause is not None else ""
        super().__init__(
            f"memory storage unavailable during {operation} for {user_id!r}{detail}",
            context={"operation": operation, "user_id": user_id},
        )
        self.operation = operation
        self.user_id = user_id


class InferenceError(MemoflowError):
    """The language model could not produce an answer."""

    status_code = 502


__all__ = [
    "BadRequest",
    "InferenceError",
    "MemoflowError",
    "NotFound",
    "StorageUnavailable",
]
