"""Task instance storage layer."""

from typing import Optional
from datetime import datetime

from .database import Database
from ..models import TaskInstance, TaskExecutionStatus, Flag


class TaskInstanceStore:
    """
    Persistent storage for task instances.

    Handles CRUD operations and the snapshot queries used by logic tasks.
    """

    def __init__(self, database: Database):
        self.db = database

    async def save(self, task_instance: TaskInstance) -> None:
        """Save a task instance (insert or update)."""
        sql = """
        INSERT INTO task_instances (
            id, name, task_type, task_code, workflow_instance_id,
            state, flag, test_flag, retry_times, task_params,
            submit_time, start_time, end_time
        ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
        ON CONFLICT(id) DO UPDATE SET
            name = excluded.name,
            task_type = excluded.task_type,
            task_code = excluded.task_code,
            workflow_instance_id = excluded.workflow_instance_id,
            state = excluded.state,
            flag = excluded.flag,
            test_flag = excluded.test_flag,
            retry_times = excluded.retry_times,
            task_params = excluded.task_params,
            start_time = excluded.start_time,
            end_time = excluded.end_time
        """

        await self.db.execute(sql, (
            task_instance.id,
            task_instance.name,
            task_instance.task_type,
            task_instance.task_code,
            task_instance.workflow_instance_id,
            _value(task_instance.state),
            _value(task_instance.flag),
            task_instance.test_flag,
            task_instance.retry_times,
            task_instance.task_params,
            task_instance.submit_time.isoformat(),
            task_instance.start_time.isoformat() if task_instance.start_time else None,
            task_instance.end_time.isoformat() if task_instance.end_time else None,
        ))

    async def get(self, task_instance_id: int) -> Optional[TaskInstance]:
        """Get a task instance by ID."""
        row = await self.db.fetch_one(
            "SELECT * FROM task_instances WHERE id = ?",
            (task_instance_id,)
        )
        if row:
            return self._row_to_task_instance(row)
        return None

    async def query_valid_task_instances(
        self,
        workflow_instance_id: int,
        test_flag: int,
    ) -> list[TaskInstance]:
        """
        Get the current attempt of every task in a workflow run.

        Superseded records (flag = 'no') are excluded, and only records from
        the same mode (test or production) as `test_flag` are returned.
        """
        rows = await self.db.fetch_all(
            """
            SELECT * FROM task_instances
            WHERE workflow_instance_id = ? AND flag = 'yes' AND test_flag = ?
            ORDER BY id ASC
            """,
            (workflow_instance_id, test_flag)
        )
        return [self._row_to_task_instance(row) for row in rows]

    async def list_by_workflow_instance(self, workflow_instance_id: int) -> list[TaskInstance]:
        """Get all task instances of a workflow run, including superseded ones."""
        rows = await self.db.fetch_all(
            "SELECT * FROM task_instances WHERE workflow_instance_id = ? ORDER BY id ASC",
            (workflow_instance_id,)
        )
        return [self._row_to_task_instance(row) for row in rows]

    async def update_state(self, task_instance_id: int, state: TaskExecutionStatus) -> None:
        """Quick state update without full save."""
        sql = "UPDATE task_instances SET state = ?"
        params = [_value(state)]

        if TaskExecutionStatus(state).is_finished:
            sql += ", end_time = ?"
            params.append(datetime.utcnow().isoformat())

        sql += " WHERE id = ?"
        params.append(task_instance_id)

        await self.db.execute(sql, tuple(params))

    async def update_task_params(self, task_instance_id: int, task_params: str) -> None:
        """Replace the parameter blob of a task instance."""
        await self.db.execute(
            "UPDATE task_instances SET task_params = ? WHERE id = ?",
            (task_params, task_instance_id)
        )

    async def invalidate(self, task_instance_id: int) -> None:
        """Mark a task instance as superseded, e.g. when a retry is recorded."""
        await self.db.execute(
            "UPDATE task_instances SET flag = ? WHERE id = ?",
            (Flag.NO.value, task_instance_id)
        )

    async def delete(self, task_instance_id: int) -> bool:
        """Delete a task instance by ID. Returns True if deleted."""
        cursor = await self.db.execute(
            "DELETE FROM task_instances WHERE id = ?",
            (task_instance_id,)
        )
        return cursor.rowcount > 0

    def _row_to_task_instance(self, row: dict) -> TaskInstance:
        """Convert a database row to a TaskInstance object."""
        def parse_datetime(val):
            if val:
                return datetime.fromisoformat(val)
            return None

        return TaskInstance(
            id=row["id"],
            name=row["name"],
            task_type=row["task_type"],
            task_code=row["task_code"],
            workflow_instance_id=row["workflow_instance_id"],
            state=row["state"],
            flag=row["flag"],
            test_flag=row["test_flag"],
            retry_times=row["retry_times"],
            task_params=row.get("task_params") or "{}",
            submit_time=parse_datetime(row.get("submit_time")) or datetime.utcnow(),
            start_time=parse_datetime(row.get("start_time")),
            end_time=parse_datetime(row.get("end_time")),
        )


def _value(member) -> str:
    """Get the stored value of an enum member or an already-plain value."""
    return member.value if hasattr(member, "value") else member
