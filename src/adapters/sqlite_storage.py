"""SQLite storage adapter.

Implements the core LogPointStoragePort using a single SQLite table.
"""

from __future__ import annotations

import logging
import sqlite3
from typing import Any, Dict, List, Optional, Sequence

from core.codec import (
    decode_application_filters,
    decode_webhook_ids,
    encode_application_filters,
    encode_webhook_ids,
)
from core.errors import DuplicateLogPointError
from core.models import LogPoint, LogPointConfig, LogPointUpdate
from core.targeting import ProbeQueryFilter

LOGGER = logging.getLogger(__name__)

_ORDER_BY = " ORDER BY file_name, line_no, client"


def _log_point_fields(row: sqlite3.Row) -> Dict[str, Any]:
    return {
        "id": row["id"],
        "workspace_id": row["workspace_id"],
        "user_id": row["user_id"],
        "file_name": row["file_name"],
        "line_no": int(row["line_no"]),
        "client": row["client"],
        "condition_expression": row["condition_expression"],
        "expire_secs": row["expire_secs"],
        "expire_count": row["expire_count"],
        "file_hash": row["file_hash"],
        "disabled": bool(row["disabled"]),
        "expire_timestamp": row["expire_timestamp"],
        "log_expression": row["log_expression"],
        "stdout_enabled": bool(row["stdout_enabled"]),
        "log_level": row["log_level"],
        "webhook_ids": decode_webhook_ids(row["webhook_ids"]),
        "from_api": bool(row["from_api"]),
        "predefined": bool(row["predefined"]),
        "probe_name": row["probe_name"],
    }


def row_to_log_point(row: sqlite3.Row) -> LogPoint:
    """Map a log_points row to a LogPoint."""

    return LogPoint(**_log_point_fields(row))


def row_to_config(row: sqlite3.Row) -> LogPointConfig:
    """Map a log_points row to a LogPointConfig, decoding its filters."""

    return LogPointConfig(
        application_filters=decode_application_filters(row["application_filters"]),
        **_log_point_fields(row),
    )


class SQLiteLogPointStore:
    """Thin SQLite wrapper that satisfies the LogPointStoragePort contract."""

    def __init__(self, db_path: str) -> None:
        self._db_path = db_path

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self._db_path)
        conn.row_factory = sqlite3.Row
        return conn

    def init_db(self) -> None:
        """Create the log_points table and its indexes if they do not exist."""

        with self._connect() as conn:
            # The UNIQUE constraint is what rejects a second log point on the
            # same (workspace, file, line, client); inserts never pre-check.
            # List-valued fields (application_filters, webhook_ids) are JSON
            # text. expire_secs/expire_count use -1 for unlimited and
            # expire_timestamp is epoch milliseconds or NULL.
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS log_points (
                    id TEXT PRIMARY KEY,
                    workspace_id TEXT NOT NULL,
                    user_id TEXT NOT NULL,
                    file_name TEXT NOT NULL,
                    line_no INTEGER NOT NULL,
                    client TEXT NOT NULL,
                    condition_expression TEXT,
                    expire_secs INTEGER NOT NULL DEFAULT -1,
                    expire_count INTEGER NOT NULL DEFAULT -1,
                    file_hash TEXT,
                    disabled INTEGER NOT NULL DEFAULT 0,
                    expire_timestamp INTEGER,
                    application_filters TEXT,
                    log_expression TEXT,
                    stdout_enabled INTEGER NOT NULL DEFAULT 0,
                    log_level TEXT NOT NULL DEFAULT 'INFO',
                    webhook_ids TEXT,
                    from_api INTEGER NOT NULL DEFAULT 0,
                    predefined INTEGER NOT NULL DEFAULT 0,
                    probe_name TEXT,
                    UNIQUE (workspace_id, file_name, line_no, client)
                )
                """
            )
            conn.execute(
                """
                CREATE INDEX IF NOT EXISTS idx_log_points_workspace_disabled
                ON log_points (workspace_id, disabled)
                """
            )
        LOGGER.debug("Initialized log point schema at %s", self._db_path)

    def get_by_workspace_and_id(self, workspace_id: str, log_point_id: str) -> Optional[LogPointConfig]:
        """Return a config within a workspace, or None if it does not exist."""

        with self._connect() as conn:
            row = conn.execute(
                "SELECT * FROM log_points WHERE workspace_id = ? AND id = ?",
                (workspace_id, log_point_id),
            ).fetchone()
        return row_to_config(row) if row else None

    def get_by_id(self, log_point_id: str) -> Optional[LogPoint]:
        """Return a log point by id across all workspaces."""

        with self._connect() as conn:
            row = conn.execute(
                "SELECT * FROM log_points WHERE id = ?",
                (log_point_id,),
            ).fetchone()
        return row_to_log_point(row) if row else None

    def insert(self, config: LogPointConfig) -> None:
        """Insert a new log point, translating constraint violations."""

        try:
            with self._connect() as conn:
                conn.execute(
                    """
                    INSERT INTO log_points (
                        id, workspace_id, user_id,
                        file_name, line_no, client,
                        condition_expression, expire_secs, expire_count,
                        file_hash, disabled,
                        expire_timestamp, application_filters, log_expression,
                        stdout_enabled, log_level, webhook_ids,
                        from_api, predefined, probe_name
                    ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                    """,
                    (
                        config.id,
                        config.workspace_id,
                        config.user_id,
                        config.file_name,
                        config.line_no,
                        config.client,
                        config.condition_expression,
                        config.expire_secs,
                        config.expire_count,
                        config.file_hash,
                        int(config.disabled),
                        config.expire_timestamp,
                        encode_application_filters(config.application_filters),
                        config.log_expression,
                        int(config.stdout_enabled),
                        config.log_level,
                        encode_webhook_ids(config.webhook_ids),
                        int(config.from_api),
                        int(config.predefined),
                        config.probe_name,
                    ),
                )
        except sqlite3.IntegrityError as exc:
            # Primary key and tuple collisions both report UNIQUE; NOT NULL
            # and other constraint failures are not duplicates.
            if "UNIQUE constraint failed" not in str(exc):
                raise
            raise DuplicateLogPointError(config.file_name, config.line_no, config.client) from exc

    def update(self, workspace_id: str, user_id: str, log_point_id: str, fields: LogPointUpdate) -> None:
        """Overwrite the mutable fields of one log point."""

        with self._connect() as conn:
            conn.execute(
                """
                UPDATE log_points SET
                    condition_expression = ?, expire_secs = ?, expire_count = ?,
                    expire_timestamp = ?, log_expression = ?,
                    stdout_enabled = ?, log_level = ?, webhook_ids = ?,
                    predefined = ?, probe_name = ?
                WHERE workspace_id = ? AND user_id = ? AND id = ?
                """,
                (
                    fields.condition_expression,
                    fields.expire_secs,
                    fields.expire_count,
                    fields.expire_timestamp,
                    fields.log_expression,
                    int(fields.stdout_enabled),
                    fields.log_level,
                    encode_webhook_ids(fields.webhook_ids),
                    int(fields.predefined),
                    fields.probe_name,
                    workspace_id,
                    user_id,
                    log_point_id,
                ),
            )

    def set_disabled(self, workspace_id: str, user_id: str, log_point_id: str, disabled: bool) -> None:
        with self._connect() as conn:
            conn.execute(
                "UPDATE log_points SET disabled = ? WHERE workspace_id = ? AND user_id = ? AND id = ?",
                (int(disabled), workspace_id, user_id, log_point_id),
            )

    def delete(self, workspace_id: str, user_id: str, log_point_id: str) -> None:
        with self._connect() as conn:
            conn.execute(
                "DELETE FROM log_points WHERE workspace_id = ? AND user_id = ? AND id = ?",
                (workspace_id, user_id, log_point_id),
            )

    def delete_many(self, workspace_id: str, user_id: str, log_point_ids: Sequence[str]) -> int:
        """Delete several log points and return the number removed."""

        if not log_point_ids:
            return 0
        placeholders = ", ".join("?" for _ in log_point_ids)
        with self._connect() as conn:
            cur = conn.execute(
                f"DELETE FROM log_points WHERE workspace_id = ? AND user_id = ? AND id IN ({placeholders})",
                (workspace_id, user_id, *log_point_ids),
            )
            return cur.rowcount

    def list_by_workspace_and_user(
        self, workspace_id: str, user_id: str, predefined_only: bool
    ) -> List[LogPoint]:
        """Return a user's log points ordered by file, line and client."""

        sql = "SELECT * FROM log_points WHERE workspace_id = ? AND user_id = ?"
        if predefined_only:
            sql += " AND predefined = 1"
        with self._connect() as conn:
            rows = conn.execute(sql + _ORDER_BY, (workspace_id, user_id)).fetchall()
        return [row_to_log_point(row) for row in rows]

    def scan_by_workspace(self, workspace_id: str, query_filter: ProbeQueryFilter) -> List[LogPointConfig]:
        """Return candidate configs for a targeting query.

        Only the coarse predicate is applied here; the caller must still run
        the in-process filter match.
        """

        sql = "SELECT * FROM log_points WHERE workspace_id = ?"
        args: List[Any] = [workspace_id]
        if query_filter.exclude_disabled:
            sql += " AND disabled = 0"
        with self._connect() as conn:
            rows = conn.execute(sql + _ORDER_BY, args).fetchall()
        return [row_to_config(row) for row in rows]
