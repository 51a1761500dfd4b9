# letteros/services/outbox.py
"""Local SQLite outbox for launch content writes.

Every launch content write lands here first. An entry is removed once the
same version of the record has been written to Postgres, either right away
or later by the reconciler. Each entry is versioned by its ``queued_at``
stamp, so a push of an older version never clears a newer pending write.

Deleted ids are kept as tombstones so a push that was already in flight
when the record was deleted can be undone.
"""
import json
import sqlite3
import logging
from contextlib import closing
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

logger = logging.getLogger(__name__)

SCHEMA = """
CREATE TABLE IF NOT EXISTS launch_content_outbox (
    id          TEXT PRIMARY KEY,
    user_id     TEXT NOT NULL,
    payload     TEXT NOT NULL,
    queued_at   TEXT NOT NULL,
    attempts    INTEGER NOT NULL DEFAULT 0,
    last_error  TEXT
);
CREATE TABLE IF NOT EXISTS launch_content_tombstones (
    id          TEXT PRIMARY KEY,
    deleted_at  TEXT NOT NULL
);
"""

def _now() -> str:
    return datetime.now(timezone.utc).isoformat()

class LaunchContentOutbox:
    def __init__(self, path: str):
        self.path = Path(path)
        self._initialized = False
        self._last_stamp = ""

    def _connect(self) -> sqlite3.Connection:
        if not self._initialized:
            self.path.parent.mkdir(parents=True, exist_ok=True)
        conn = sqlite3.connect(str(self.path))
        conn.row_factory = sqlite3.Row
        if not self._initialized:
            conn.executescript(SCHEMA)
            conn.commit()
            self._initialized = True
        return conn

    def _stamp(self) -> str:
        # Strictly increasing, even when the clock does not move between two puts
        stamp = _now()
        if stamp <= self._last_stamp:
            stamp = f"{self._last_stamp}+"
        self._last_stamp = stamp
        return stamp

    def put(self, record: Dict[str, Any]) -> str:
        """Queue (or replace) the pending write for record['id'] and return its version stamp"""
        stamp = self._stamp()
        with closing(self._connect()) as conn, conn:
            conn.execute(
                """
                INSERT INTO launch_content_outbox (id, user_id, payload, queued_at)
                VALUES (?, ?, ?, ?)
                ON CONFLICT(id) DO UPDATE SET
                    payload = excluded.payload,
                    queued_at = excluded.queued_at
                """,
                (record["id"], record["user_id"], json.dumps(record), stamp)
            )
        return stamp

    def remove(self, record_id: str, queued_at: Optional[str] = None) -> bool:
        """Drop the pending write; with queued_at, only if that version is still the queued one"""
        query = "DELETE FROM launch_content_outbox WHERE id = ?"
        params: tuple = (record_id,)
        if queued_at is not None:
            query += " AND queued_at = ?"
            params = (record_id, queued_at)
        with closing(self._connect()) as conn, conn:
            cursor = conn.execute(query, params)
            return cursor.rowcount > 0

    def get(self, record_id: str) -> Optional[Dict[str, Any]]:
        entry = self.entry(record_id)
        return entry[0] if entry else None

    def entry(self, record_id: str) -> Optional[Tuple[Dict[str, Any], str]]:
        """The pending payload for record_id with its version stamp"""
        with closing(self._connect()) as conn:
            row = conn.execute(
                "SELECT payload, queued_at FROM launch_content_outbox WHERE id = ?", (record_id,)
            ).fetchone()
        return (json.loads(row["payload"]), row["queued_at"]) if row else None

    def entries(self, user_id: Optional[str] = None) -> List[Tuple[Dict[str, Any], str]]:
        """Pending payloads with their version stamps, oldest first"""
        query = "SELECT payload, queued_at FROM launch_content_outbox"
        params: tuple = ()
        if user_id is not None:
            query += " WHERE user_id = ?"
            params = (user_id,)
        query += " ORDER BY queued_at"
        with closing(self._connect()) as conn:
            rows = conn.execute(query, params).fetchall()
        return [(json.loads(row["payload"]), row["queued_at"]) for row in rows]

    def pending(self, user_id: Optional[str] = None) -> List[Dict[str, Any]]:
        """Pending records, oldest first"""
        return [payload for payload, _ in self.entries(user_id)]

    def mark_failed(self, record_id: str, error: str) -> None:
        with closing(self._connect()) as conn, conn:
            conn.execute(
                """
                UPDATE launch_content_outbox
                SET attempts = attempts + 1, last_error = ?
                WHERE id = ?
                """,
                (error, record_id)
            )

    def attempts(self, record_id: str) -> int:
        with closing(self._connect()) as conn:
            row = conn.execute(
                "SELECT attempts FROM launch_content_outbox WHERE id = ?", (record_id,)
            ).fetchone()
        return row["attempts"] if row else 0

    def mark_deleted(self, record_id: str) -> None:
        """Drop any pending write for record_id and remember that it was deleted"""
        with closing(self._connect()) as conn, conn:
            conn.execute("DELETE FROM launch_content_outbox WHERE id = ?", (record_id,))
            conn.execute(
                "INSERT OR REPLACE INTO launch_content_tombstones (id, deleted_at) VALUES (?, ?)",
                (record_id, _now())
            )

    def is_deleted(self, record_id: str) -> bool:
        with closing(self._connect()) as conn:
            row = conn.execute(
                "SELECT 1 FROM launch_content_tombstones WHERE id = ?", (record_id,)
            ).fetchone()
        return row is not None
