from __future__ import annotations

import json
import os
import sqlite3
import threading
import time
from typing import Any, Dict, List, Optional

_SCHEMA = """
CREATE TABLE IF NOT EXISTS submissions(
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    ts_ms INTEGER NOT NULL,
    batch_id TEXT NOT NULL,
    action TEXT NOT NULL,
    route TEXT NOT NULL,
    chain_id INTEGER NOT NULL,
    ok INTEGER NOT NULL,
    tx_hash TEXT,
    nonce INTEGER,
    error_code TEXT,
    summary_json TEXT NOT NULL
)
"""
_COLUMNS = ("ts_ms", "batch_id", "action", "route", "chain_id", "ok", "tx_hash", "nonce", "error_code", "summary_json")


class AuditLog:
    """
    Optional SQLite record of administrative submissions.

    OFF unless a path is given or `AUDIT_DB_PATH` (or `ADMINOPS_AUDIT_DB_PATH`) is set.
    One row per accepted or failed transaction/proposal, so operators can see which
    nonces were consumed when a batch aborts halfway.

    Only hashes, nonces and a short summary are stored; never key material.
    """

    def __init__(self, db_path: Optional[str] = None) -> None:
        self._lock = threading.Lock()
        self._conn: Optional[sqlite3.Connection] = None
        self._explicit_path = db_path

    def enabled(self) -> bool:
        return bool(self._db_path())

    def append(
        self,
        *,
        ts_ms: int,
        batch_id: str,
        action: str,
        route: str,
        chain_id: int,
        ok: bool,
        tx_hash: str | None = None,
        nonce: int | None = None,
        error_code: str | None = None,
        summary: Dict[str, Any] | None = None,
    ) -> None:
        conn = self._get_conn()
        if conn is None:
            return
        row = (
            int(ts_ms),
            batch_id,
            action,
            route,
            int(chain_id),
            int(bool(ok)),
            tx_hash,
            nonce,
            error_code,
            json.dumps(summary or {}, sort_keys=True, default=str),
        )
        placeholders = ", ".join("?" for _ in _COLUMNS)
        with self._lock:
            conn.execute(f"INSERT INTO submissions({', '.join(_COLUMNS)}) VALUES({placeholders})", row)  # nosec B608
            conn.commit()

    def list_batch(self, batch_id: str) -> List[Dict[str, Any]]:
        """Rows of one batch in insertion order."""
        conn = self._get_conn()
        if conn is None:
            return []
        with self._lock:
            cur = conn.execute(f"SELECT {', '.join(_COLUMNS)} FROM submissions WHERE batch_id = ? ORDER BY id", (batch_id,))  # nosec B608
            rows = cur.fetchall()
        out = []
        for r in rows:
            rec = dict(zip(_COLUMNS, r))
            rec["ok"] = bool(rec["ok"])
            rec["summary"] = json.loads(rec.pop("summary_json"))
            out.append(rec)
        return out

    def _db_path(self) -> str:
        if self._explicit_path:
            return self._explicit_path
        return (os.getenv("ADMINOPS_AUDIT_DB_PATH") or os.getenv("AUDIT_DB_PATH") or "").strip()

    def _get_conn(self) -> Optional[sqlite3.Connection]:
        path = self._db_path()
        if not path:
            return None
        with self._lock:
            if self._conn is None:
                self._conn = sqlite3.connect(path, check_same_thread=False)
                self._conn.execute("PRAGMA journal_mode=WAL;")
                self._conn.execute(_SCHEMA)
                self._conn.commit()
            return self._conn


def now_ms() -> int:
    return int(time.time() * 1000)
