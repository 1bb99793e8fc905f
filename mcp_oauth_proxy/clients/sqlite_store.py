"""SQLite-backed snapshot storage for OAuth records."""

from __future__ import annotations

import json
import sqlite3
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Optional


class SQLiteSnapshotStore:
    """Persist credential snapshots in a table keyed by (collection, key)."""

    def __init__(self, db_path: str) -> None:
        self._db_path = Path(db_path)
        if self._db_path.parent and not self._db_path.parent.exists():
            self._db_path.parent.mkdir(parents=True, exist_ok=True)
        self._ensure_schema()

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self._db_path, check_same_thread=False)
        conn.row_factory = sqlite3.Row
        return conn

    def _ensure_schema(self) -> None:
        with self._connect() as conn:
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS oauth_records (
                    collection TEXT NOT NULL,
                    record_key TEXT NOT NULL,
                    data TEXT NOT NULL,
                    PRIMARY KEY (collection, record_key)
                )
                """
            )
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS oauth_snapshot_meta (
                    id INTEGER PRIMARY KEY CHECK (id = 1),
                    saved_at TEXT NOT NULL
                )
                """
            )

    def load(self) -> Optional[Dict[str, Any]]:
        with self._connect() as conn:
            meta = conn.execute(
                "SELECT saved_at FROM oauth_snapshot_meta WHERE id = 1"
            ).fetchone()
            if not meta:
                return None
            rows = conn.execute(
                "SELECT collection, record_key, data FROM oauth_records"
            ).fetchall()

        snapshot: Dict[str, Any] = {"saved_at": meta["saved_at"]}
        for row in rows:
            snapshot.setdefault(row["collection"], {})[row["record_key"]] = json.loads(
                row["data"]
            )
        return snapshot

    def save(self, snapshot: Dict[str, Any]) -> None:
        """Replace the stored snapshot in a single transaction."""
        rows = [
            (collection, key, json.dumps(value))
            for collection, records in snapshot.items()
            if isinstance(records, dict)
            for key, value in records.items()
        ]
        saved_at = snapshot.get("saved_at") or datetime.now(timezone.utc).isoformat()
        with self._connect() as conn:
            conn.execute("DELETE FROM oauth_records")
            conn.executemany(
                "INSERT INTO oauth_records (collection, record_key, data) VALUES (?, ?, ?)",
                rows,
            )
            conn.execute(
                """
                INSERT INTO oauth_snapshot_meta (id, saved_at) VALUES (1, ?)
                ON CONFLICT(id) DO UPDATE SET saved_at = excluded.saved_at
                """,
                (saved_at,),
            )


__all__ = ["SQLiteSnapshotStore"]
