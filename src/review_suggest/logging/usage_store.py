"""SQLite-backed generation log storage."""

from __future__ import annotations

import sqlite3
from datetime import datetime
from pathlib import Path

from review_suggest.logging.models import GenerationLog

DEFAULT_DB_PATH = Path.home() / ".review-suggest" / "generations.db"

_COLUMNS = (
    "id, timestamp, business_key, category, source, reason, attempts, "
    "suggestion_count, elapsed_seconds, input_tokens, output_tokens, estimated_cost_usd"
)


class GenerationLogStore:
    """SQLite store recording whether each request was served live or from fallback."""

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
                CREATE TABLE IF NOT EXISTS generation_logs (
                    id TEXT PRIMARY KEY,
                    timestamp TEXT NOT NULL,
                    business_key TEXT NOT NULL,
                    category TEXT NOT NULL,
                    source TEXT NOT NULL,
                    reason TEXT,
                    attempts INTEGER NOT NULL DEFAULT 0,
                    suggestion_count INTEGER NOT NULL DEFAULT 0,
                    elapsed_seconds REAL NOT NULL DEFAULT 0.0,
                    input_tokens INTEGER NOT NULL DEFAULT 0,
                    output_tokens INTEGER NOT NULL DEFAULT 0,
                    estimated_cost_usd REAL NOT NULL DEFAULT 0.0
                )
            """)

    def save_log(self, log: GenerationLog) -> None:
        with self._connect() as conn:
            conn.execute(
                f"INSERT OR REPLACE INTO generation_logs ({_COLUMNS}) "
                "VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)",
                (
                    log.id,
                    log.timestamp.isoformat(),
                    log.business_key,
                    log.category,
                    log.source,
                    log.reason,
                    log.attempts,
                    log.suggestion_count,
                    log.elapsed_seconds,
                    log.input_tokens,
                    log.output_tokens,
                    log.estimated_cost_usd,
                ),
            )

    def get_logs(self, business_key: str | None = None, limit: int = 50) -> list[GenerationLog]:
        """Most recent logs first, optionally for one business key."""
        with self._connect() as conn:
            if business_key is not None:
                rows = conn.execute(
                    f"SELECT {_COLUMNS} FROM generation_logs WHERE business_key = ? "
                    "ORDER BY timestamp DESC LIMIT ?",
                    (business_key, limit),
                ).fetchall()
            else:
                rows = conn.execute(
                    f"SELECT {_COLUMNS} FROM generation_logs ORDER BY timestamp DESC LIMIT ?",
                    (limit,),
                ).fetchall()
        return [self._row_to_log(row) for row in rows]

    def get_stats(self) -> dict:
        """Live/fallback split and fallback reasons across all logs."""
        with self._connect() as conn:
            row = conn.execute(
                """SELECT
                       COUNT(*),
                       SUM(CASE WHEN source = 'live' THEN 1 ELSE 0 END),
                       SUM(input_tokens),
                       SUM(output_tokens),
                       SUM(estimated_cost_usd),
                       AVG(elapsed_seconds)
                   FROM generation_logs"""
            ).fetchone()
            reasons = conn.execute(
                """SELECT reason, COUNT(*) FROM generation_logs
                   WHERE source = 'fallback'
                   GROUP BY reason ORDER BY COUNT(*) DESC"""
            ).fetchall()
        total = row[0] or 0
        live = row[1] or 0
        return {
            "total_requests": total,
            "live": live,
            "fallback": total - live,
            "fallback_rate": ((total - live) / total * 100) if total else 0.0,
            "total_input_tokens": row[2] or 0,
            "total_output_tokens": row[3] or 0,
            "total_cost_usd": row[4] or 0.0,
            "avg_elapsed_seconds": round(row[5], 3) if row[5] is not None else None,
            "fallback_reasons": {reason or "unknown": count for reason, count in reasons},
        }

    @staticmethod
    def _row_to_log(row: tuple) -> GenerationLog:
        return GenerationLog(
            id=row[0],
            timestamp=datetime.fromisoformat(row[1]),
            business_key=row[2],
            category=row[3],
            source=row[4],
            reason=row[5],
            attempts=row[6],
            suggestion_count=row[7],
            elapsed_seconds=row[8],
            input_tokens=row[9],
            output_tokens=row[10],
            estimated_cost_usd=row[11],
        )
