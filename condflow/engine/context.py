"""Execution contexts - what a logic task knows about its task and its run."""

from typing import Optional
import logging

from pydantic import BaseModel

from ..errors import TaskInstanceNotFoundError
from ..models import TaskInstance
from ..storage import TaskInstanceStore

logger = logging.getLogger(__name__)


class TaskExecutionContext(BaseModel):
    """
    Everything a logic task is handed about the task instance it runs for.

    Built by the executor from the task instance record before the logic
    task is constructed.
    """

    task_instance_id: int
    task_name: str = ""
    task_type: str
    workflow_instance_id: int
    test_flag: int = 0
    task_params: str = "{}"

    @classmethod
    def from_task_instance(cls, task_instance: TaskInstance) -> "TaskExecutionContext":
        """Build a context from a task instance record."""
        return cls(
            task_instance_id=task_instance.id,
            task_name=task_instance.name,
            task_type=task_instance.task_type,
            workflow_instance_id=task_instance.workflow_instance_id,
            test_flag=task_instance.test_flag,
            task_params=task_instance.task_params,
        )


class WorkflowExecuteContext:
    """
    In-memory view of one workflow run.

    Holds the task instances the engine is tracking for the run, keyed by
    task instance id, so logic tasks can resolve the instance they run for.

    Usage:
        ctx = await WorkflowExecuteContext.load(store, workflow_instance_id=7, test_flag=0)
        task_instance = ctx.resolve_task_instance(42)
    """

    def __init__(
        self,
        workflow_instance_id: int,
        test_flag: int = 0,
        task_instances: Optional[list[TaskInstance]] = None,
    ):
        self.workflow_instance_id = workflow_instance_id
        self.test_flag = test_flag
        self._task_instances: dict[int, TaskInstance] = {}
        for task_instance in task_instances or []:
            self.add_task_instance(task_instance)

    @classmethod
    async def load(
        cls,
        store: TaskInstanceStore,
        workflow_instance_id: int,
        test_flag: int = 0,
    ) -> "WorkflowExecuteContext":
        """Build the context from the valid task instances in the store."""
        task_instances = await store.query_valid_task_instances(workflow_instance_id, test_flag)
        logger.debug(
            f"Loaded {len(task_instances)} task instances for workflow instance {workflow_instance_id}"
        )
        return cls(workflow_instance_id, test_flag, task_instances)

    def add_task_instance(self, task_instance: TaskInstance) -> None:
        """Track a task instance (replaces any instance with the same id)."""
        if task_instance.workflow_instance_id != self.workflow_instance_id:
            raise ValueError(
                f"Task instance {task_instance.id} belongs to workflow instance "
                f"{task_instance.workflow_instance_id}, not {self.workflow_instance_id}"
            )
        self._task_instances[task_instance.id] = task_instance

    def resolve_task_instance(self, task_instance_id: int) -> TaskInstance:
        """
        Get a tracked task instance by id.

        Raises:
            TaskInstanceNotFoundError: If the run does not track this instance
        """
        task_instance = self._task_instances.get(task_instance_id)
        if task_instance is None:
            raise TaskInstanceNotFoundError(
                f"Task instance {task_instance_id} not found in workflow instance "
                f"{self.workflow_instance_id}"
            )
        return task_instance

    @property
    def task_instances(self) -> list[TaskInstance]:
        """Get all tracked task instances."""
        return list(self._task_instances.values())
