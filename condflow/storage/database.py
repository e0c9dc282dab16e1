"""SQLite database connection and schema management."""

import aiosqlite
from pathlib import Path
from typing import Optional
import logging

logger = logging.getLogger(__name__)


# SQL schema for task_instances table
TASK_INSTANCES_SCHEMA = """
CREATE TABLE IF NOT EXISTS task_instances (
    id INTEGER PRIMARY KEY,
    name TEXT NOT NULL DEFAULT '',
    task_type TEXT NOT NULL DEFAULT '',
    task_code INTEGER NOT NULL,
    workflow_instance_id INTEGER NOT NULL,
    state TEXT NOT NULL DEFAULT 'SUBMITTED_SUCCESS',
    flag TEXT NOT NULL DEFAULT 'yes',
    test_flag INTEGER NOT NULL DEFAULT 0,
    retry_times INTEGER NOT NULL DEFAULT 0,
    task_params TEXT DEFAULT '{}',
    submit_time TEXT NOT NULL,
    start_time TEXT,
    end_time TEXT
);

CREATE INDEX IF NOT EXISTS idx_task_instances_workflow
    ON task_instances(workflow_instance_id, flag, test_flag);
CREATE INDEX IF NOT EXISTS idx_task_instances_task_code ON task_instances(task_code);
"""


class Database:
    """
    Async SQLite database connection manager.

    Provides the connection and schema management.
    """

    def __init__(self, db_path: Path | str = "condflow.db"):
        self.db_path = Path(db_path)
        self._connection: Optional[aiosqlite.Connection] = None

    async def connect(self) -> None:
        """Establish database connection and initialize schema."""
        if self._connection is not None:
            return

        self.db_path.parent.mkdir(parents=True, exist_ok=True)

        logger.info(f"Connecting to database: {self.db_path}")
        self._connection = await aiosqlite.connect(
            self.db_path,
            isolation_level=None,  # Autocommit mode
        )
        self._connection.row_factory = aiosqlite.Row

        await self._connection.execute("PRAGMA journal_mode = WAL")
        await self._init_schema()

        logger.info("Database connected and schema initialized")

    async def _init_schema(self) -> None:
        """Create tables if they don't exist."""
        await self._connection.executescript(TASK_INSTANCES_SCHEMA)

    async def close(self) -> None:
        """Close database connection."""
        if self._connection is not None:
            await self._connection.close()
            self._connection = None
            logger.info("Database connection closed")

    @property
    def connection(self) -> aiosqlite.Connection:
        """Get the current connection (raises if not connected)."""
        if self._connection is None:
            raise RuntimeError("Database not connected. Call connect() first.")
        return self._connection

    async def execute(self, sql: str, params: tuple = ()) -> aiosqlite.Cursor:
        """Execute a SQL statement."""
        return await self.connection.execute(sql, params)

    async def fetch_one(self, sql: str, params: tuple = ()) -> Optional[dict]:
        """Fetch a single row as a dictionary."""
        async with self.connection.execute(sql, params) as cursor:
            row = await cursor.fetchone()
            if row:
                return dict(row)
            return None

    async def fetch_all(self, sql: str, params: tuple = ()) -> list[dict]:
        """Fetch all rows as dictionaries."""
        async with self.connection.execute(sql, params) as cursor:
            rows = await cursor.fetchall()
            return [dict(row) for row in rows]
