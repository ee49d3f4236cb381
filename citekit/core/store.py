"""SQLite store for a citation list, one row per canonical record."""

import logging
import secrets
import sqlite3
from datetime import datetime, timezone
from pathlib import Path

from citekit.core.models import CanonicalRecord

logger = logging.getLogger(__name__)

LIST_ORDERS = ("recent", "added", "title")

# ── Schema DDL ───────────────────────────────────────────────────────

_SCHEMA = """
CREATE TABLE IF NOT EXISTS citations (
    id          TEXT PRIMARY KEY,
    seq         INTEGER NOT NULL,
    title       TEXT,
    data        TEXT NOT NULL,     -- CanonicalRecord JSON
    created_at  TEXT NOT NULL,
    updated_at  TEXT NOT NULL
);

CREATE INDEX IF NOT EXISTS idx_citations_seq ON citations(seq);
"""

_ORDER_BY = {
    "recent": "seq DESC",
    "added": "seq ASC",
    "title": "COALESCE(title, '') COLLATE NOCASE ASC, seq ASC",
}


# ── CitationStore ────────────────────────────────────────────────────


class CitationStore:
    """Durable, ordered list of citation records."""

    def __init__(self, db_path: str | Path):
        self.db_path = Path(db_path)
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self._conn = sqlite3.connect(str(self.db_path))
        self._conn.row_factory = sqlite3.Row
        self._conn.execute("PRAGMA journal_mode=WAL")
        self._conn.executescript(_SCHEMA)
        self._conn.commit()

    # ── Records ──────────────────────────────────────────────

    def add(self, record: CanonicalRecord) -> str:
        """Insert a record and return its new id."""
        record_id = secrets.token_hex(8)
        seq = self._conn.execute(
            "SELECT COALESCE(MAX(seq), 0) + 1 FROM citations"
        ).fetchone()[0]
        now = _now()
        self._conn.execute(
            """INSERT INTO citations (id, seq, title, data, created_at, updated_at)
               VALUES (?, ?, ?, ?, ?, ?)""",
            (record_id, seq, record.title, record.model_dump_json(), now, now),
        )
        self._conn.commit()
        logger.info("Added citation %s: %r", record_id, record.title)
        return record_id

    def replace(self, record_id: str, record: CanonicalRecord) -> None:
        """Swap in an edited record, keeping its id and list position."""
        cur = self._conn.execute(
            "UPDATE citations SET title = ?, data = ?, updated_at = ? WHERE id = ?",
            (record.title, record.model_dump_json(), _now(), record_id),
        )
        if cur.rowcount == 0:
            raise ValueError(f"Citation {record_id} not found")
        self._conn.commit()

    def remove(self, record_id: str) -> None:
        cur = self._conn.execute("DELETE FROM citations WHERE id = ?", (record_id,))
        if cur.rowcount == 0:
            raise ValueError(f"Citation {record_id} not found")
        self._conn.commit()
        logger.info("Removed citation %s", record_id)

    def get(self, record_id: str) -> CanonicalRecord:
        row = self._conn.execute(
            "SELECT data FROM citations WHERE id = ?", (record_id,)
        ).fetchone()
        if row is None:
            raise ValueError(f"Citation {record_id} not found")
        return CanonicalRecord.model_validate_json(row["data"])

    def entries(self, order: str = "recent") -> list[tuple[str, CanonicalRecord]]:
        """All (id, record) pairs: newest first, oldest first, or by title."""
        if order not in _ORDER_BY:
            raise ValueError(f"Invalid order: {order} (valid: {', '.join(LIST_ORDERS)})")
        rows = self._conn.execute(
            f"SELECT id, data FROM citations ORDER BY {_ORDER_BY[order]}"
        ).fetchall()
        return [(r["id"], CanonicalRecord.model_validate_json(r["data"])) for r in rows]

    def records(self, order: str = "recent") -> list[CanonicalRecord]:
        return [record for _, record in self.entries(order)]

    def count(self) -> int:
        return self._conn.execute("SELECT COUNT(*) FROM citations").fetchone()[0]

    def clear(self) -> int:
        """Delete every record. Returns the number removed."""
        cur = self._conn.execute("DELETE FROM citations")
        self._conn.commit()
        logger.info("Cleared %d citations", cur.rowcount)
        return cur.rowcount

    # ── Cleanup ──────────────────────────────────────────────

    def close(self) -> None:
        self._conn.close()


# ── Helpers ──────────────────────────────────────────────────────────


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()
