from __future__ import annotations

import json
import sqlite3
import threading
from pathlib import Path
from typing import Any, List, Optional, Tuple

from ...logging_config import logger


MemoryRow = Tuple[Optional[Any], List[str]]


class ActorStore:
    """Durable key-value state for memory actors backed by SQLite.

    One row per actor id holds the JSON-encoded profile and history. Each
    write is a single transaction so a failed append leaves the row untouched.
    """

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
                "memory store directory creation failed",
                extra={"error": str(exc), "path": str(self._db_path)},
            )

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self._db_path, timeout=30, isolation_level=None)
        conn.row_factory = sqlite3.Row
        return conn

    def _ensure_schema(self) -> None:
        schema_sql = """
        CREATE TABLE IF NOT EXISTS memory_actors (
            actor_id TEXT PRIMARY KEY,
            profile TEXT,
            history TEXT NOT NULL DEFAULT '[]'
        );
        """
        with self._lock, self._connect() as conn:
            conn.execute("PRAGMA journal_mode=WAL;")
            conn.execute(schema_sql)

    def load(self, actor_id: str) -> Optional[MemoryRow]:
        with self._lock, self._connect() as conn:
            row = conn.execute(
                "SELECT profile, history FROM memory_actors WHERE actor_id = ?",
                (actor_id,),
            ).fetchone()
        if row is None:
            return None
        profile = json.loads(row["profile"]) if row["profile"] is not None else None
        return profile, list(json.loads(row["history"]))

    def append(self, actor_id: str, item: str) -> int:
        """Append *item* to the actor's history and return the new length."""

        with self._lock, self._connect() as conn:
            conn.execute("BEGIN IMMEDIATE")
            try:
                row = conn.execute(
                    "SELECT history FROM memory_actors WHERE actor_id = ?",
                    (actor_id,),
                ).fetchone()
                history: List[str] = json.loads(row["history"]) if row else []
                history.append(item)
                conn.execute(
                    "INSERT INTO memory_actors (actor_id, history) VALUES (?, ?)"
                    " ON CONFLICT(actor_id) DO UPDATE SET history = excluded.history",
                    (actor_id, json.dumps(history)),
                )
            except BaseException:
                conn.execute("ROLLBACK")
                raise
            conn.execute("COMMIT")
        return len(history)

    def put_profile(self, actor_id: str, profile: Any) -> None:
        encoded = json.dumps(profile) if profile is not None else None
        with self._lock, self._connect() as conn:
            conn.execute(
                "INSERT INTO memory_actors (actor_id, profile) VALUES (?, ?)"
                " ON CONFLICT(actor_id) DO UPDATE SET profile = excluded.profile",
                (actor_id, encoded),
            )


__all__ = ["ActorStore", "MemoryRow"]
