# src/task_service/tasks/task_store.py

from __future__ import annotations

import contextlib
import logging
import sqlite3
from collections.abc import Iterator
from datetime import datetime
from pathlib import Path
from typing import Any

from ..core.errors import StoreError
from .task_models import Task, TaskQuery, TaskStatus

logger = logging.getLogger(__name__)

# LIMIT/OFFSET are bound as signed 64-bit integers.
SQLITE_MAX_INT = 2**63 - 1


def _dt_to_str(value: datetime | None) -> str | None:
    if value is None:
        return None
    return value.isoformat(timespec="microseconds")


def _str_to_dt(raw: str | None) -> datetime | None:
    if not raw:
        return None
    return datetime.fromisoformat(raw)


def _casefold(value: str | None) -> str | None:
    return value.casefold() if value is not None else None


class TaskStore:
    """
    SQLite task store.

    The schema is intentionally simple and migration-safe:
    - create table if missing
    - use PRAGMA table_info to detect missing columns
    - add columns with ALTER TABLE only when needed

    Thread-safety:
    - each method opens its own SQLite connection
    """

    def __init__(self, db_path: str | Path = "tasks.sqlite3") -> None:
        self._db_path = Path(db_path)
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        self._ensure_schema()
        logger.info("TaskStore ready db=%s total=%s", self._db_path, self.count_tasks())

    def close(self) -> None:
        """Compatibility hook for shutdown (no persistent connections to close)."""
        return

    # ---- low-level helpers ----

    def _get_conn(self) -> sqlite3.Connection:
        conn = sqlite3.connect(str(self._db_path), timeout=30.0)
        conn.row_factory = sqlite3.Row
        self._configure_conn(conn)
        return conn

    @staticmethod
    def _configure_conn(conn: sqlite3.Connection) -> None:
        with contextlib.suppress(sqlite3.Error):
            conn.execute("PRAGMA journal_mode=WAL")
        # SQLite's lower() only folds ASCII; use Python's casefold so search
        # behaves the same as the in-memory store.
        conn.create_function("py_casefold", 1, _casefold, deterministic=True)

    @contextlib.contextmanager
    def _connection(self) -> Iterator[sqlite3.Connection]:
        try:
            conn = self._get_conn()
        except sqlite3.Error as e:
            raise StoreError(f"cannot open {self._db_path}: {e}") from e
        try:
            yield conn
            conn.commit()
        except sqlite3.Error as e:
            raise StoreError(f"sqlite failure on {self._db_path}: {e}") from e
        finally:
            conn.close()

    def _ensure_schema(self) -> None:
        with self._connection() as conn:
            cur = conn.cursor()

            cur.execute(
                """
                CREATE TABLE IF NOT EXISTS tasks (
                    id TEXT PRIMARY KEY,
                    seq INTEGER NOT NULL DEFAULT 0,
                    title TEXT NOT NULL,
                    description TEXT,
                    due_date TEXT,
                    status TEXT NOT NULL DEFAULT 'pending',
                    created_at TEXT NOT NULL,
                    updated_at TEXT NOT NULL
                )
                """
            )

            # Migrations (safe): add missing columns.
            cur.execute("PRAGMA table_info(tasks)")
            cols = {row["name"] for row in cur.fetchall()}

            def add_col(name: str, decl: str) -> None:
                if name in cols:
                    return
                cur.execute(f"ALTER TABLE tasks ADD COLUMN {name} {decl}")
                logger.info("TaskStore migration: added column %s", name)

            add_col("seq", "INTEGER NOT NULL DEFAULT 0")
            add_col("description", "TEXT")
            add_col("due_date", "TEXT")
            add_col("status", "TEXT NOT NULL DEFAULT 'pending'")

            cur.execute("CREATE INDEX IF NOT EXISTS idx_tasks_status ON tasks(status)")
            cur.execute("CREATE INDEX IF NOT EXISTS idx_tasks_created ON tasks(created_at, seq)")

    @staticmethod
    def _row_to_task(row: sqlite3.Row) -> Task:
        return Task(
            id=str(row["id"]),
            title=str(row["title"]),
            description=row["description"],
            due_date=_str_to_dt(row["due_date"]),
            status=TaskStatus.from_db(row["status"]),
            created_at=datetime.fromisoformat(row["created_at"]),
            updated_at=datetime.fromisoformat(row["updated_at"]),
        )

    @staticmethod
    def _where(query: TaskQuery) -> tuple[str, list[Any]]:
        clauses: list[str] = []
        params: list[Any] = []

        if query.statuses is not None:
            if not query.statuses:
                return "WHERE 0", []
            ordered = sorted(s.value for s in query.statuses)
            placeholders = ",".join("?" for _ in ordered)
            clauses.append(f"status IN ({placeholders})")
            params.extend(ordered)

        if query.search:
            clauses.append(
                "(instr(py_casefold(title), ?) > 0"
                " OR (description IS NOT NULL AND instr(py_casefold(description), ?) > 0))"
            )
            needle = query.search.casefold()
            params.extend([needle, needle])

        if not clauses:
            return "", params
        return "WHERE " + " AND ".join(clauses), params

    # ---- public API ----

    def count_tasks(self) -> int:
        with self._connection() as conn:
            (n,) = conn.execute("SELECT COUNT(*) FROM tasks").fetchone()
            return int(n)

    def get_task(self, task_id: str) -> Task | None:
        with self._connection() as conn:
            row = conn.execute("SELECT * FROM tasks WHERE id = ?", (task_id,)).fetchone()
            return self._row_to_task(row) if row else None

    def query_tasks(
        self,
        query: TaskQuery,
        *,
        offset: int,
        limit: int,
    ) -> tuple[list[Task], int]:
        where, params = self._where(query)
        with self._connection() as conn:
            (total,) = conn.execute(f"SELECT COUNT(*) FROM tasks {where}", params).fetchone()
            if offset > SQLITE_MAX_INT:
                return [], int(total)
            rows = conn.execute(
                f"""
                SELECT *
                FROM tasks
                {where}
                ORDER BY created_at DESC, seq DESC
                    LIMIT ? OFFSET ?
                """,
                (*params, min(int(limit), SQLITE_MAX_INT), int(offset)),
            ).fetchall()
            return [self._row_to_task(r) for r in rows], int(total)

    def insert_task(self, task: Task) -> None:
        with self._connection() as conn:
            conn.execute(
                """
                INSERT INTO tasks(
                    id, seq, title, description, due_date, status, created_at, updated_at
                )
                VALUES (?, (SELECT COALESCE(MAX(seq), 0) + 1 FROM tasks), ?, ?, ?, ?, ?, ?)
                """,
                (
                    task.id,
                    task.title,
                    task.description,
                    _dt_to_str(task.due_date),
                    task.status.value,
                    _dt_to_str(task.created_at),
                    _dt_to_str(task.updated_at),
                ),
            )
        logger.debug("Task inserted id=%s status=%s", task.id, task.status.value)

    def save_task(self, task: Task) -> bool:
        with self._connection() as conn:
            cur = conn.execute(
                """
                UPDATE tasks
                SET title = ?,
                    description = ?,
                    due_date = ?,
                    status = ?,
                    updated_at = ?
                WHERE id = ?
                """,
                (
                    task.title,
                    task.description,
                    _dt_to_str(task.due_date),
                    task.status.value,
                    _dt_to_str(task.updated_at),
                    task.id,
                ),
            )
            saved = cur.rowcount == 1
        logger.debug("Task saved id=%s status=%s ok=%s", task.id, task.status.value, saved)
        return saved

    def delete_task(self, task_id: str) -> bool:
        with self._connection() as conn:
            cur = conn.execute("DELETE FROM tasks WHERE id = ?", (task_id,))
            deleted = cur.rowcount == 1
        logger.debug("Task delete id=%s ok=%s", task_id, deleted)
        return deleted
