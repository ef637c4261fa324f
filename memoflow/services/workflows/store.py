from __future__ import annotations

import json
import sqlite3
import threading
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional

from ...logging_config import logger
from ...models.workflow import WorkflowState, WorkflowStatus
from ...utils.timestamps import from_storage_timestamp, to_storage_timestamp, utc_now


@dataclass(frozen=True)
class WorkflowRecord:
    """Stored row for one workflow instance."""

    id: str
    name: str
    params: Dict[str, Any]
    status: WorkflowStatus


class WorkflowStore:
    """Low-level persistence for workflow instances backed by SQLite."""

    def __init__(self, db_path: Path):
        self._db_path = db_path
        self._lock = threading.Lock()
        self._ensure_directory()
        self._ensure_schema()

    def _ensure_directory(self) -> None:
        try:
            self._db_path.parent.mkdir(parents=True, exist_ok=True)
        except OSError as exc:  # pragma: no cover - surfaced by connect
            logger.warning(
                "workflow directory creation failed",
                extra={"error": str(exc)},
            )

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self._db_path, timeout=30, isolation_level=None)
        conn.row_factory = sqlite3.Row
        return conn

    def _ensure_schema(self) -> None:
        schema_sql = """
        CREATE TABLE IF NOT EXISTS workflow_instances (
            id TEXT PRIMARY KEY,
            name TEXT NOT NULL,
            params TEXT NOT NULL,
            status TEXT NOT NULL,
            output TEXT,
            error TEXT,
            created_at TEXT NOT NULL,
            updated_at TEXT NOT NULL
        );
        """
        index_sql = """
        CREATE INDEX IF NOT EXISTS idx_workflow_instances_status
        ON workflow_instances (status, created_at);
        """
        with self._lock, self._connect() as conn:
            conn.execute("PRAGMA journal_mode=WAL;")
            conn.execute(schema_sql)
            conn.execute(index_sql)

    def insert(self, instance_id: str, name: str, params: Dict[str, Any]) -> WorkflowRecord:
        now = to_storage_timestamp(utc_now())
        with self._lock, self._connect() as conn:
            conn.execute(
                "INSERT INTO workflow_instances (id, name, params, status, created_at, updated_at)"
                " VALUES (?, ?, ?, ?, ?, ?)",
                (instance_id, name, json.dumps(params), WorkflowState.QUEUED.value, now, now),
            )
            row = conn.execute("SELECT * FROM workflow_instances WHERE id = ?", (instance_id,)).fetchone()
        return self._row_to_record(row)

    def fetch_one(self, instance_id: str) -> Optional[WorkflowRecord]:
        with self._lock, self._connect() as conn:
            row = conn.execute(
                "SELECT * FROM workflow_instances WHERE id = ?",
                (instance_id,),
            ).fetchone()
        return self._row_to_record(row) if row else None

    def transition(
        self,
        instance_id: str,
        target: WorkflowState,
        *,
        sources: Iterable[WorkflowState],
        output: Any = None,
        error: Optional[str] = None,
    ) -> bool:
        """Move an instance into *target* only if it currently sits in one of *sources*.

        Terminal states are never valid sources, so a finished instance keeps
        its outcome whatever callers attempt afterwards.
        """

        allowed = [state.value for state in sources if not state.is_terminal]
        if not allowed:
            return False
        placeholders = ", ".join("?" for _ in allowed)
        sql = (
            "UPDATE workflow_instances SET status = ?, output = ?, error = ?, updated_at = ?"
            f" WHERE id = ? AND status IN ({placeholders})"
        )
        params: List[Any] = [
            target.value,
            json.dumps(output) if output is not None else None,
            error,
            to_storage_timestamp(utc_now()),
            instance_id,
            *allowed,
        ]
        with self._lock, self._connect() as conn:
            cursor = conn.execute(sql, params)
            return cursor.rowcount > 0

    def list_unfinished(self) -> List[WorkflowRecord]:
        with self._lock, self._connect() as conn:
            rows = conn.execute(
                "SELECT * FROM workflow_instances WHERE status IN (?, ?) ORDER BY created_at, id",
                (WorkflowState.QUEUED.value, WorkflowState.RUNNING.value),
            ).fetchall()
        return [self._row_to_record(row) for row in rows]

    def _row_to_record(self, row: sqlite3.Row) -> WorkflowRecord:
        output = json.loads(row["output"]) if row["output"] is not None else None
        status = WorkflowStatus(
            status=WorkflowState(row["status"]),
            output=output,
            error=row["error"],
            created_at=from_storage_timestamp(row["created_at"]),
            updated_at=from_storage_timestamp(row["updated_at"]),
        )
        return WorkflowRecord(
            id=row["id"],
            name=row["name"],
            params=json.loads(row["params"]),
            status=status,
        )


__all__ = ["WorkflowRecord", "WorkflowStore"]
