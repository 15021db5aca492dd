"""SQLite cache for raw analyzer output (TTL 7 days)."""

from __future__ import annotations

import hashlib
import json
import sqlite3
import time
from pathlib import Path

from writing_annotator.models.suggestion import RawSuggestion

DEFAULT_DB_PATH = Path.home() / ".writing-annotator" / "cache.db"
DEFAULT_TTL_DAYS = 7


def content_hash(text: str, writing_goal: str | None = None) -> str:
    digest = hashlib.sha256()
    digest.update(text.encode("utf-8"))
    digest.update(b"\x00")
    digest.update((writing_goal or "").encode("utf-8"))
    return digest.hexdigest()


class AnalysisCache:
    """Raw suggestions per (analyzer, text, goal) with TTL expiration.

    Raw payloads are cached rather than located suggestions: offsets and ids
    belong to a session and a document version, the payload does not.
    """

    def __init__(
        self,
        db_path: str | Path = DEFAULT_DB_PATH,
        ttl_days: int = DEFAULT_TTL_DAYS,
    ):
        self.db_path = Path(db_path)
        self.ttl_seconds = ttl_days * 86400
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self._init_db()

    def _init_db(self) -> None:
        with self._connect() as conn:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS analysis_cache (
                    analyzer TEXT NOT NULL,
                    content_hash TEXT NOT NULL,
                    payload_json TEXT NOT NULL,
                    cached_at REAL NOT NULL,
                    PRIMARY KEY (analyzer, content_hash)
                )
            """)

    def _connect(self) -> sqlite3.Connection:
        return sqlite3.connect(str(self.db_path))

    def get(
        self, analyzer: str, text: str, writing_goal: str | None = None
    ) -> list[RawSuggestion] | None:
        """Return cached raw suggestions, or None on a miss or expired entry."""
        key = content_hash(text, writing_goal)
        with self._connect() as conn:
            row = conn.execute(
                "SELECT payload_json, cached_at FROM analysis_cache "
                "WHERE analyzer = ? AND content_hash = ?",
                (analyzer, key),
            ).fetchone()

        if row is None:
            return None

        payload_json, cached_at = row
        if time.time() - cached_at > self.ttl_seconds:
            self.delete(analyzer, text, writing_goal)
            return None

        return [RawSuggestion.model_validate(item) for item in json.loads(payload_json)]

    def put(
        self,
        analyzer: str,
        text: str,
        suggestions: list[RawSuggestion],
        writing_goal: str | None = None,
    ) -> None:
        payload = json.dumps([s.model_dump() for s in suggestions], ensure_ascii=False)
        with self._connect() as conn:
            conn.execute(
                """INSERT OR REPLACE INTO analysis_cache
                   (analyzer, content_hash, payload_json, cached_at)
                   VALUES (?, ?, ?, ?)""",
                (analyzer, content_hash(text, writing_goal), payload, time.time()),
            )

    def delete(self, analyzer: str, text: str, writing_goal: str | None = None) -> None:
        with self._connect() as conn:
            conn.execute(
                "DELETE FROM analysis_cache WHERE analyzer = ? AND content_hash = ?",
                (analyzer, content_hash(text, writing_goal)),
            )

    def clear(self) -> int:
        """Clear all cached entries. Returns count of deleted rows."""
        with self._connect() as conn:
            cursor = conn.execute("DELETE FROM analysis_cache")
            return cursor.rowcount

    def stats(self) -> dict:
        with self._connect() as conn:
            total = conn.execute(
                "SELECT COUNT(*) FROM analysis_cache"
            ).fetchone()[0]
            expired = conn.execute(
                "SELECT COUNT(*) FROM analysis_cache WHERE ? - cached_at > ?",
                (time.time(), self.ttl_seconds),
            ).fetchone()[0]
        return {"total": total, "expired": expired, "active": total - expired}
