"""SQLite-backed usage log storage."""

from __future__ import annotations

import sqlite3
from datetime import datetime
from pathlib import Path

from writing_annotator.logging.models import AnalysisLog

DEFAULT_DB_PATH = Path.home() / ".writing-annotator" / "usage.db"

_COLUMNS = (
    "id", "session_id", "timestamp", "action", "document_version",
    "writing_goal", "analyzers_run", "analyzers_failed", "suggestion_count",
    "applied_count", "stale_count", "elapsed_seconds", "total_input_tokens",
    "total_output_tokens", "estimated_cost_usd", "superseded", "success",
    "error_message",
)


class UsageStore:
    """SQLite-backed store for session usage logs with WAL mode."""

    def __init__(self, db_path: str | Path = DEFAULT_DB_PATH):
        self.db_path = Path(db_path)
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self._init_db()

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(str(self.db_path))
        conn.execute("PRAGMA journal_mode=WAL")
        return conn

    def _init_db(self) -> None:
        with self._connect() as conn:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS usage_logs (
                    id TEXT PRIMARY KEY,
                    session_id TEXT NOT NULL,
                    timestamp TEXT NOT NULL,
                    action TEXT NOT NULL,
                    document_version INTEGER NOT NULL DEFAULT 0,
                    writing_goal TEXT,
                    analyzers_run INTEGER NOT NULL DEFAULT 0,
                    analyzers_failed INTEGER NOT NULL DEFAULT 0,
                    suggestion_count INTEGER NOT NULL DEFAULT 0,
                    applied_count INTEGER NOT NULL DEFAULT 0,
                    stale_count INTEGER NOT NULL DEFAULT 0,
                    elapsed_seconds REAL NOT NULL DEFAULT 0.0,
                    total_input_tokens INTEGER NOT NULL DEFAULT 0,
                    total_output_tokens INTEGER NOT NULL DEFAULT 0,
                    estimated_cost_usd REAL NOT NULL DEFAULT 0.0,
                    superseded INTEGER NOT NULL DEFAULT 0,
                    success INTEGER NOT NULL DEFAULT 1,
                    error_message TEXT
                )
            """)

    def save_log(self, log: AnalysisLog) -> None:
        """Persist a usage log entry."""
        placeholders = ", ".join("?" for _ in _COLUMNS)
        with self._connect() as conn:
            conn.execute(
                f"INSERT OR REPLACE INTO usage_logs ({', '.join(_COLUMNS)}) "
                f"VALUES ({placeholders})",
                (
                    log.id,
                    log.session_id,
                    log.timestamp.isoformat(),
                    log.action,
                    log.document_version,
                    log.writing_goal,
                    log.analyzers_run,
                    log.analyzers_failed,
                    log.suggestion_count,
                    log.applied_count,
                    log.stale_count,
                    log.elapsed_seconds,
                    log.total_input_tokens,
                    log.total_output_tokens,
                    log.estimated_cost_usd,
                    1 if log.superseded else 0,
                    1 if log.success else 0,
                    log.error_message,
                ),
            )

    def get_logs(
        self,
        session_id: str | None = None,
        limit: int = 50,
    ) -> list[AnalysisLog]:
        """Retrieve usage logs, newest first, optionally filtered by session_id."""
        select = f"SELECT {', '.join(_COLUMNS)} FROM usage_logs"
        with self._connect() as conn:
            if session_id is not None:
                rows = conn.execute(
                    f"{select} WHERE session_id = ? ORDER BY timestamp DESC LIMIT ?",
                    (session_id, limit),
                ).fetchall()
            else:
                rows = conn.execute(
                    f"{select} ORDER BY timestamp DESC LIMIT ?",
                    (limit,),
                ).fetchall()
        return [self._row_to_log(row) for row in rows]

    def get_monthly_stats(self) -> dict:
        """Get aggregated stats for the current month."""
        now = datetime.now()
        month_start = now.replace(day=1, hour=0, minute=0, second=0, microsecond=0)
        with self._connect() as conn:
            row = conn.execute(
                """SELECT
                       COUNT(*) as total_runs,
                       SUM(CASE WHEN action = 'analyze' THEN 1 ELSE 0 END) as analyses,
                       SUM(suggestion_count) as suggestions,
                       SUM(applied_count) as applied,
                       SUM(stale_count) as stale,
                       SUM(total_input_tokens) as total_input,
                       SUM(total_output_tokens) as total_output,
                       SUM(estimated_cost_usd) as total_cost,
                       SUM(CASE WHEN success = 1 THEN 1 ELSE 0 END) as success_count
                   FROM usage_logs
                   WHERE timestamp >= ?""",
                (month_start.isoformat(),),
            ).fetchone()
        return {
            "total_runs": row[0] or 0,
            "analyses": row[1] or 0,
            "suggestions": row[2] or 0,
            "applied": row[3] or 0,
            "stale": row[4] or 0,
            "total_input_tokens": row[5] or 0,
            "total_output_tokens": row[6] or 0,
            "total_cost_usd": row[7] or 0.0,
            "success_rate": (row[8] / row[0] * 100) if row[0] else 0.0,
            "month": now.strftime("%Y-%m"),
        }

    def get_total_cost(self) -> float:
        with self._connect() as conn:
            row = conn.execute(
                "SELECT SUM(estimated_cost_usd) FROM usage_logs"
            ).fetchone()
        return row[0] or 0.0

    @staticmethod
    def _row_to_log(row: tuple) -> AnalysisLog:
        data = dict(zip(_COLUMNS, row))
        data["timestamp"] = datetime.fromisoformat(data["timestamp"])
        data["superseded"] = bool(data["superseded"])
        data["success"] = bool(data["success"])
        return AnalysisLog(**data)
